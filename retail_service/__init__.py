"""
Retail Service - catalog, customers, orders and payments
"""
__version__ = "1.0.0"
