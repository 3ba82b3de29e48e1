"""
Order aggregate and money helpers (no I/O)
"""
from retail_service.domain.money import ZERO, to_money
from retail_service.domain.order import LineItem, Order, OrderStatus, ProductSnapshot

__all__ = ["ZERO", "to_money", "LineItem", "Order", "OrderStatus", "ProductSnapshot"]
