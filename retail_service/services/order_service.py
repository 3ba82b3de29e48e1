# retail_service/services/order_service.py
"""
Order business logic

Each call loads the aggregate from storage, applies one change and saves it
back, so totals are always recomputed by the aggregate itself.
"""
from datetime import datetime
from sqlalchemy.orm import Session
from retail_service.db.order_repository import OrderRepository
from retail_service.domain.order import LineItem, Order, OrderStatus
from retail_service.errors import NotFound
from retail_service.models.catalog import Customer, Product
from retail_service.models.schemas import (
    LineItemCreate,
    LineItemUpdate,
    OrderAdjustments,
    OrderCreate,
    SalesSummary,
)
from retail_service.services.catalog_service import CustomerService, ProductService
from typing import List, Optional, Tuple
from opentelemetry import trace
import logging

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

NON_REVENUE_STATUSES = (OrderStatus.CANCELLED, OrderStatus.REFUNDED)


class OrderService:
    """Order service for business logic"""

    @staticmethod
    def create_order(db: Session, order_data: OrderCreate) -> Order:
        """
        Create new order

        Process:
        1. Check the customer exists
        2. Price each line from the product's current price
        3. Apply tax, discount and notes
        4. Save order and line items in one transaction
        """
        with tracer.start_as_current_span("order_service.create_order") as span:
            span.set_attribute("customer.id", order_data.customer_id)
            span.set_attribute("items.count", len(order_data.items))

            logger.info(
                f"Creating order for customer {order_data.customer_id} "
                f"with {len(order_data.items)} items"
            )

            if not CustomerService.get_customer(db, order_data.customer_id):
                raise NotFound(f"Customer with id {order_data.customer_id} not found")

            order = Order(customer_id=order_data.customer_id, notes=order_data.notes)
            for item_data in order_data.items:
                order.add_line_item(OrderService._price_line(db, item_data))

            order.tax_amount = order_data.tax_amount
            order.discount_amount = order_data.discount_amount

            span.set_attribute("order.total_amount", str(order.total_amount))

            OrderRepository.save(db, order)

            span.set_attribute("order.id", order.order_id)
            logger.info(f"Order {order.order_id} created with total {order.total_amount}")
            return order

    @staticmethod
    def get_order(db: Session, order_id: int) -> Optional[Order]:
        """Get order by ID"""
        return OrderRepository.find_by_id(db, order_id)

    @staticmethod
    def get_orders(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        customer_id: Optional[int] = None,
        status: Optional[OrderStatus] = None
    ) -> Tuple[List[Order], int]:
        """Get list of orders with filters"""
        return OrderRepository.find_all(
            db, skip=skip, limit=limit, customer_id=customer_id, status=status
        )

    @staticmethod
    def get_orders_by_date_range(db: Session, start: datetime, end: datetime) -> List[Order]:
        if start > end:
            raise ValueError("start must not be after end")
        return OrderRepository.find_by_date_range(db, start, end)

    @staticmethod
    def add_item(db: Session, order_id: int, item_data: LineItemCreate) -> Order:
        with tracer.start_as_current_span("order_service.add_item") as span:
            span.set_attribute("order.id", order_id)
            span.set_attribute("product.id", item_data.product_id)

            order = OrderService._load(db, order_id)
            order.add_line_item(OrderService._price_line(db, item_data))
            return OrderRepository.save(db, order)

    @staticmethod
    def update_item(db: Session, order_id: int, line_item_id: int, change: LineItemUpdate) -> Order:
        """Set or shift the quantity of one line; the order total follows"""
        with tracer.start_as_current_span("order_service.update_item") as span:
            span.set_attribute("order.id", order_id)
            span.set_attribute("line_item.id", line_item_id)

            order = OrderService._load(db, order_id)
            item = OrderService._find_item(order, line_item_id)

            if change.quantity is not None:
                item.set_quantity(change.quantity)
            elif change.delta >= 0:
                item.increase_quantity(change.delta)
            else:
                item.decrease_quantity(-change.delta)

            return OrderRepository.save(db, order)

    @staticmethod
    def remove_item(db: Session, order_id: int, line_item_id: int) -> Order:
        with tracer.start_as_current_span("order_service.remove_item") as span:
            span.set_attribute("order.id", order_id)
            span.set_attribute("line_item.id", line_item_id)

            order = OrderService._load(db, order_id)
            order.remove_line_item(OrderService._find_item(order, line_item_id))
            return OrderRepository.save(db, order)

    @staticmethod
    def update_adjustments(db: Session, order_id: int, adjustments: OrderAdjustments) -> Order:
        order = OrderService._load(db, order_id)

        changes = adjustments.model_dump(exclude_unset=True)
        if changes.get("tax_amount") is not None:
            order.tax_amount = changes["tax_amount"]
        if changes.get("discount_amount") is not None:
            order.discount_amount = changes["discount_amount"]
        if "notes" in changes:
            order.notes = changes["notes"]

        return OrderRepository.save(db, order)

    @staticmethod
    def update_order_status(db: Session, order_id: int, status: OrderStatus) -> Optional[Order]:
        """Set any status; no transition rule is applied here"""
        with tracer.start_as_current_span("order_service.update_status") as span:
            span.set_attribute("order.id", order_id)
            span.set_attribute("status.new", status.value)

            order = OrderRepository.find_by_id(db, order_id)
            if not order:
                return None

            old_status = order.status
            OrderRepository.update_status(db, order_id, status)

            span.set_attribute("status.old", old_status.value)
            logger.info(f"Order {order_id} status updated: {old_status.value} -> {status.value}")
            return OrderRepository.find_by_id(db, order_id)

    @staticmethod
    def cancel_order(db: Session, order_id: int) -> Order:
        """
        Cancel an order

        Raises:
            NotFound: unknown order
            InvalidStateTransition: order is past CONFIRMED
        """
        with tracer.start_as_current_span("order_service.cancel_order") as span:
            span.set_attribute("order.id", order_id)

            order = OrderService._load(db, order_id)
            if not order.can_be_cancelled():
                logger.warning(f"Cannot cancel order {order_id} with status {order.status.value}")
            order.cancel()
            OrderRepository.save(db, order)

            logger.info(f"Order {order_id} cancelled")
            return order

    @staticmethod
    def delete_order(db: Session, order_id: int) -> bool:
        return OrderRepository.delete(db, order_id)

    @staticmethod
    def sales_summary(db: Session) -> SalesSummary:
        """Counts and revenue for the dashboard"""
        by_status = OrderRepository.count_by_status(db)
        return SalesSummary(
            total_products=db.query(Product).count(),
            total_customers=db.query(Customer).count(),
            total_orders=sum(by_status.values()),
            total_revenue=OrderRepository.revenue(db, NON_REVENUE_STATUSES),
            orders_by_status={status.value: count for status, count in by_status.items()},
        )

    @staticmethod
    def _load(db: Session, order_id: int) -> Order:
        order = OrderRepository.find_by_id(db, order_id)
        if not order:
            raise NotFound(f"Order with id {order_id} not found")
        return order

    @staticmethod
    def _find_item(order: Order, line_item_id: int) -> LineItem:
        item = order.find_line_item(line_item_id)
        if item is None:
            raise NotFound(f"Line item {line_item_id} not found on order {order.order_id}")
        return item

    @staticmethod
    def _price_line(db: Session, item_data: LineItemCreate) -> LineItem:
        product = ProductService.get_product(db, item_data.product_id)
        if not product:
            raise NotFound(f"Product with id {item_data.product_id} not found")
        if not product.is_active:
            raise ValueError(f"Product {product.name} is not active")
        return LineItem.for_product(product, item_data.quantity)
