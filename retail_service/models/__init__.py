"""
Database models and API schemas
"""
from retail_service.models.catalog import Category, Customer, Product
from retail_service.models.order import LineItemRecord, OrderRecord
from retail_service.models.payment import Payment, PaymentMethod, PaymentStatus

__all__ = [
    "Category",
    "Customer",
    "Product",
    "LineItemRecord",
    "OrderRecord",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
]
