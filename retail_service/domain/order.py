# retail_service/domain/order.py
"""
Order aggregate

An Order owns an ordered sequence of line items and keeps its derived totals
consistent after every change:

    subtotal     = sum(line_total for each line item)
    total_amount = subtotal - discount_amount + tax_amount

Customers and products are referenced by id only. A line item may carry a
ProductSnapshot for display, copied at attachment time.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple
import enum

from retail_service.domain.money import ZERO, MoneyLike, to_money
from retail_service.errors import InvalidQuantity, InvalidStateTransition


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, enum.Enum):
    """Order status enum"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


@dataclass(frozen=True)
class ProductSnapshot:
    """Display copy of a product taken when it was attached to a line item"""
    product_id: int
    name: str
    sku: Optional[str]
    price: Decimal

    @classmethod
    def from_product(cls, product: Any) -> "ProductSnapshot":
        return cls(
            product_id=product.id,
            name=product.name,
            sku=getattr(product, "sku", None),
            price=to_money(product.price),
        )


class LineItem:
    """
    One product/quantity/price entry of an order

    ``line_total`` is never set directly; it follows ``unit_price * quantity``.
    """

    def __init__(
        self,
        product_id: Optional[int] = None,
        quantity: int = 1,
        unit_price: MoneyLike = ZERO,
        line_item_id: Optional[int] = None,
        order_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ):
        _require_positive(quantity)
        self.line_item_id = line_item_id
        self.order_id = order_id
        self.product_id = product_id
        self.product: Optional[ProductSnapshot] = None
        self.created_at = created_at or utcnow()
        self._quantity = quantity
        self._unit_price = to_money(unit_price)
        self._line_total = ZERO
        self._owner: Optional["Order"] = None
        self._recalculate()

    @classmethod
    def for_product(cls, product: Any, quantity: int = 1) -> "LineItem":
        """Build a line item priced at the product's current price"""
        item = cls(product_id=product.id, quantity=quantity)
        item.attach_product(product)
        return item

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def unit_price(self) -> Decimal:
        return self._unit_price

    @property
    def line_total(self) -> Decimal:
        return self._line_total

    def set_quantity(self, quantity: int) -> None:
        _require_positive(quantity)
        self._quantity = quantity
        self._recalculate()

    def increase_quantity(self, delta: int) -> None:
        """Add ``delta`` units; a negative delta may not empty the line"""
        new_quantity = self._quantity + delta
        if new_quantity <= 0:
            raise InvalidQuantity(
                f"Cannot change quantity {self._quantity} by {delta}: result must be at least 1",
                quantity=new_quantity,
            )
        self._quantity = new_quantity
        self._recalculate()

    def decrease_quantity(self, delta: int) -> None:
        if delta >= self._quantity:
            raise InvalidQuantity(
                f"Cannot decrease quantity {self._quantity} by {delta}",
                quantity=self._quantity - delta,
            )
        self._quantity -= delta
        self._recalculate()

    def set_unit_price(self, unit_price: MoneyLike) -> None:
        self._unit_price = to_money(unit_price)
        self._recalculate()

    def attach_product(self, product: Any) -> None:
        """
        Attach a product and take over its current price

        Only a frozen snapshot is kept, so later price changes on the product
        do not reach this line item.
        """
        snapshot = ProductSnapshot.from_product(product)
        self.product = snapshot
        self.product_id = snapshot.product_id
        self._unit_price = snapshot.price
        self._recalculate()

    def _recalculate(self) -> None:
        self._line_total = to_money(self._unit_price * self._quantity)
        if self._owner is not None:
            self._owner._line_item_changed()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_item_id": self.line_item_id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self._quantity,
            "unit_price": self._unit_price,
            "line_total": self._line_total,
            "created_at": self.created_at,
        }

    def __repr__(self):
        return (
            f"<LineItem(id={self.line_item_id}, product_id={self.product_id}, "
            f"qty={self._quantity}, total={self._line_total})>"
        )


def _require_positive(quantity: int) -> None:
    if quantity < 1:
        raise InvalidQuantity(f"Quantity must be at least 1, got {quantity}", quantity=quantity)


class Order:
    """
    Order aggregate root

    ``status`` can be assigned freely; only ``cancel()`` checks a precondition.
    Every mutating operation ends with ``_touch()`` to refresh ``updated_at``.
    """

    def __init__(
        self,
        customer_id: int,
        order_id: Optional[int] = None,
        order_date: Optional[datetime] = None,
        status: OrderStatus = OrderStatus.PENDING,
        tax_amount: MoneyLike = ZERO,
        discount_amount: MoneyLike = ZERO,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        now = utcnow()
        self.order_id = order_id
        self._customer_id = customer_id
        self._order_date = order_date or now
        self._status = OrderStatus(status)
        self._tax_amount = to_money(tax_amount)
        self._discount_amount = to_money(discount_amount)
        self._notes = notes
        self.created_at = created_at or now
        self.updated_at = updated_at or now
        self._line_items: List[LineItem] = []
        self.subtotal = ZERO
        self.total_amount = ZERO
        self.recompute_totals()

    # -- plain fields ------------------------------------------------------

    @property
    def customer_id(self) -> int:
        return self._customer_id

    @customer_id.setter
    def customer_id(self, value: int) -> None:
        self._customer_id = value
        self._touch()

    @property
    def order_date(self) -> datetime:
        return self._order_date

    @order_date.setter
    def order_date(self, value: datetime) -> None:
        self._order_date = value
        self._touch()

    @property
    def status(self) -> OrderStatus:
        return self._status

    @status.setter
    def status(self, value: OrderStatus) -> None:
        self._status = OrderStatus(value)
        self._touch()

    @property
    def notes(self) -> Optional[str]:
        return self._notes

    @notes.setter
    def notes(self, value: Optional[str]) -> None:
        self._notes = value
        self._touch()

    # -- monetary adjustments ----------------------------------------------

    @property
    def tax_amount(self) -> Decimal:
        return self._tax_amount

    @tax_amount.setter
    def tax_amount(self, value: MoneyLike) -> None:
        self._tax_amount = to_money(value)
        self.recompute_totals()
        self._touch()

    @property
    def discount_amount(self) -> Decimal:
        return self._discount_amount

    @discount_amount.setter
    def discount_amount(self, value: MoneyLike) -> None:
        self._discount_amount = to_money(value)
        self.recompute_totals()
        self._touch()

    # -- line items ---------------------------------------------------------

    @property
    def line_items(self) -> Tuple[LineItem, ...]:
        return tuple(self._line_items)

    def add_line_item(self, item: LineItem) -> None:
        """
        Append a line item; the same product may appear more than once

        Raises:
            ValueError: the item already belongs to another order
        """
        self._adopt(item)
        self._line_items.append(item)
        self.recompute_totals()
        self._touch()

    def remove_line_item(self, item: LineItem) -> bool:
        """Remove the first entry that is ``item``; absent items are ignored"""
        for index, existing in enumerate(self._line_items):
            if existing is item:
                del self._line_items[index]
                if not any(other is item for other in self._line_items):
                    item._owner = None
                self.recompute_totals()
                self._touch()
                return True
        return False

    def set_line_items(self, items: Iterable[LineItem]) -> None:
        items = list(items)
        for item in items:
            self._check_owner(item)
        for existing in self._line_items:
            existing._owner = None
        self._line_items = []
        for item in items:
            self._adopt(item)
            self._line_items.append(item)
        self.recompute_totals()
        self._touch()

    def find_line_item(self, line_item_id: int) -> Optional[LineItem]:
        for item in self._line_items:
            if item.line_item_id == line_item_id:
                return item
        return None

    def recompute_totals(self) -> None:
        self.subtotal = sum((item.line_total for item in self._line_items), ZERO)
        self.total_amount = self.subtotal - self._discount_amount + self._tax_amount

    def total_item_count(self) -> int:
        """Units across all lines, not the number of lines"""
        return sum(item.quantity for item in self._line_items)

    # -- lifecycle ------------------------------------------------------------

    def can_be_cancelled(self) -> bool:
        return self._status in CANCELLABLE_STATUSES

    def is_completed(self) -> bool:
        return self._status == OrderStatus.DELIVERED

    def cancel(self) -> None:
        if not self.can_be_cancelled():
            raise InvalidStateTransition(
                f"Order cannot be cancelled in current status: {self._status.value}",
                current_status=self._status,
            )
        self.status = OrderStatus.CANCELLED

    def mark_persisted(self, order_id: int) -> None:
        """Record the id assigned by storage on all owned line items"""
        self.order_id = order_id
        for item in self._line_items:
            item.order_id = order_id

    def snapshot(self) -> Dict[str, Any]:
        """Plain copy of every field, for storage and display"""
        return {
            "order_id": self.order_id,
            "customer_id": self._customer_id,
            "order_date": self._order_date,
            "status": self._status,
            "subtotal": self.subtotal,
            "tax_amount": self._tax_amount,
            "discount_amount": self._discount_amount,
            "total_amount": self.total_amount,
            "notes": self._notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "total_items": self.total_item_count(),
            "is_completed": self.is_completed(),
            "can_be_cancelled": self.can_be_cancelled(),
            "line_items": [item.to_dict() for item in self._line_items],
        }

    def _check_owner(self, item: LineItem) -> None:
        if item._owner is not None and item._owner is not self:
            raise ValueError(
                f"Line item {item.line_item_id} already belongs to order {item._owner.order_id}"
            )

    def _adopt(self, item: LineItem) -> None:
        self._check_owner(item)
        item.order_id = self.order_id
        item._owner = self

    def _line_item_changed(self) -> None:
        self.recompute_totals()
        self._touch()

    def _touch(self) -> None:
        self.updated_at = utcnow()

    def __repr__(self):
        return f"<Order(id={self.order_id}, status={self._status.value}, total={self.total_amount})>"
