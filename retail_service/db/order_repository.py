# retail_service/db/order_repository.py
"""
Storage for the Order aggregate

An order and its line items are written as one unit: either the order row
and every line item row are committed, or the session is rolled back and
PersistenceFailure is raised.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional, Tuple
from opentelemetry import trace
import logging

from retail_service.domain.money import to_money
from retail_service.domain.order import LineItem, Order, OrderStatus, ProductSnapshot, utcnow
from retail_service.errors import NotFound, PersistenceFailure
from retail_service.models.order import LineItemRecord, OrderRecord

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class OrderRepository:
    """Load, save and delete Order aggregates"""

    @staticmethod
    def save(db: Session, order: Order) -> Order:
        """
        Insert or update an order together with its line items

        Line item rows are matched by ``line_item_id``; rows for items no
        longer in the order are deleted, new items get fresh rows.

        Raises:
            NotFound: the order carries an id that is not in storage
            PersistenceFailure: the transaction failed and was rolled back
        """
        with tracer.start_as_current_span("order_repository.save") as span:
            span.set_attribute("order.new", order.order_id is None)
            span.set_attribute("items.count", len(order.line_items))

            try:
                if order.order_id is None:
                    record = OrderRecord()
                    db.add(record)
                else:
                    record = db.get(OrderRecord, order.order_id)
                    if record is None:
                        raise NotFound(f"Order with id {order.order_id} not found")

                OrderRepository._copy_to_record(order, record)

                existing = {row.id: row for row in record.items}
                rows = []
                for item in order.line_items:
                    # an entry listed twice claims its stored row only once
                    row = existing.pop(item.line_item_id, None) if item.line_item_id else None
                    if row is None:
                        row = LineItemRecord(created_at=item.created_at)
                    row.product_id = item.product_id
                    row.quantity = item.quantity
                    row.unit_price = item.unit_price
                    row.line_total = item.line_total
                    rows.append(row)
                record.items = rows

                db.flush()
                order_id = record.id
                item_ids = [row.id for row in rows]
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                span.record_exception(e)
                logger.error(f"Failed to save order {order.order_id}: {e}")
                raise PersistenceFailure(f"Could not save order: {e.__class__.__name__}") from e

            order.mark_persisted(order_id)
            for item, item_id in zip(order.line_items, item_ids):
                item.line_item_id = item_id

            span.set_attribute("order.id", order_id)
            logger.info(f"Order {order_id} saved with {len(item_ids)} line items")
            return order

    @staticmethod
    def find_by_id(db: Session, order_id: int) -> Optional[Order]:
        """Load an order and its line items"""
        with tracer.start_as_current_span("order_repository.find_by_id") as span:
            span.set_attribute("order.id", order_id)
            record = (
                db.query(OrderRecord)
                .options(selectinload(OrderRecord.items))
                .filter(OrderRecord.id == order_id)
                .first()
            )
            return OrderRepository._to_aggregate(record) if record else None

    @staticmethod
    def find_all(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        customer_id: Optional[int] = None,
        status: Optional[OrderStatus] = None
    ) -> Tuple[List[Order], int]:
        """List orders, newest first, with optional filters"""
        with tracer.start_as_current_span("order_repository.find_all") as span:
            query = db.query(OrderRecord)

            if customer_id:
                query = query.filter(OrderRecord.customer_id == customer_id)
                span.set_attribute("filter.customer_id", customer_id)

            if status:
                query = query.filter(OrderRecord.status == status)
                span.set_attribute("filter.status", status.value)

            total = query.count()
            records = (
                query.options(selectinload(OrderRecord.items))
                .order_by(OrderRecord.order_date.desc(), OrderRecord.id.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )

            span.set_attribute("orders.total", total)
            span.set_attribute("orders.returned", len(records))

            return [OrderRepository._to_aggregate(r) for r in records], total

    @staticmethod
    def find_by_date_range(db: Session, start: datetime, end: datetime) -> List[Order]:
        """Orders placed between ``start`` and ``end`` inclusive"""
        with tracer.start_as_current_span("order_repository.find_by_date_range") as span:
            span.set_attribute("filter.start", start.isoformat())
            span.set_attribute("filter.end", end.isoformat())

            records = (
                db.query(OrderRecord)
                .options(selectinload(OrderRecord.items))
                .filter(OrderRecord.order_date.between(start, end))
                .order_by(OrderRecord.order_date.desc())
                .all()
            )

            span.set_attribute("orders.returned", len(records))
            return [OrderRepository._to_aggregate(r) for r in records]

    @staticmethod
    def update_status(db: Session, order_id: int, status: OrderStatus) -> bool:
        """Write a new status without loading the aggregate"""
        with tracer.start_as_current_span("order_repository.update_status") as span:
            span.set_attribute("order.id", order_id)
            span.set_attribute("status.new", status.value)

            try:
                result = db.execute(
                    update(OrderRecord)
                    .where(OrderRecord.id == order_id)
                    .values(status=status, updated_at=utcnow())
                )
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                span.record_exception(e)
                logger.error(f"Failed to update status of order {order_id}: {e}")
                raise PersistenceFailure(f"Could not update order status: {e.__class__.__name__}") from e
            return result.rowcount > 0

    @staticmethod
    def delete(db: Session, order_id: int) -> bool:
        """Delete an order; its line items and payments go with it"""
        with tracer.start_as_current_span("order_repository.delete") as span:
            span.set_attribute("order.id", order_id)

            record = db.get(OrderRecord, order_id)
            if record is None:
                return False

            try:
                db.delete(record)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Failed to delete order {order_id}: {e}")
                raise PersistenceFailure(f"Could not delete order: {e.__class__.__name__}") from e

            logger.info(f"Order {order_id} deleted")
            return True

    @staticmethod
    def count_by_status(db: Session) -> dict:
        rows = db.query(OrderRecord.status, func.count(OrderRecord.id)).group_by(OrderRecord.status).all()
        return {status: count for status, count in rows}

    @staticmethod
    def revenue(db: Session, excluded: Tuple[OrderStatus, ...]) -> Decimal:
        """Sum of order totals, skipping the given statuses"""
        total = (
            db.query(func.coalesce(func.sum(OrderRecord.total_amount), 0))
            .filter(OrderRecord.status.notin_(excluded))
            .scalar()
        )
        return to_money(total)

    @staticmethod
    def _copy_to_record(order: Order, record: OrderRecord) -> None:
        record.customer_id = order.customer_id
        record.order_date = order.order_date
        record.status = order.status
        record.subtotal = order.subtotal
        record.tax_amount = order.tax_amount
        record.discount_amount = order.discount_amount
        record.total_amount = order.total_amount
        record.notes = order.notes
        record.created_at = order.created_at
        record.updated_at = order.updated_at

    @staticmethod
    def _to_aggregate(record: OrderRecord) -> Order:
        order = Order(
            customer_id=record.customer_id,
            order_id=record.id,
            order_date=record.order_date,
            status=record.status,
            tax_amount=record.tax_amount,
            discount_amount=record.discount_amount,
            notes=record.notes,
            created_at=record.created_at,
        )

        items = []
        for row in record.items:
            item = LineItem(
                product_id=row.product_id,
                quantity=row.quantity,
                unit_price=row.unit_price,
                line_item_id=row.id,
                order_id=row.order_id,
                created_at=row.created_at,
            )
            if row.product is not None:
                # Display copy only; the stored unit price stays authoritative
                item.product = ProductSnapshot(
                    product_id=row.product.id,
                    name=row.product.name,
                    sku=row.product.sku,
                    price=to_money(row.unit_price),
                )
            items.append(item)

        order.set_line_items(items)
        order.updated_at = record.updated_at or record.created_at
        return order
