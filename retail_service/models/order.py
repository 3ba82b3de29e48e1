# retail_service/models/order.py
"""
Order database models

These rows only hold what the Order aggregate snapshots; totals are
recomputed by the aggregate whenever an order is loaded.
"""
from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, Numeric, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from retail_service.db.database import Base
from retail_service.domain.order import OrderStatus


class OrderRecord(Base):
    """Order row"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    order_date = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(SQLEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)

    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship(
        "LineItemRecord",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="LineItemRecord.id",
    )
    payments = relationship("Payment", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<OrderRecord(id={self.id}, status={self.status}, total={self.total_amount})>"


class LineItemRecord(Base):
    """Order line item row"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    line_total = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("OrderRecord", back_populates="items")
    product = relationship("Product", lazy="joined")

    def __repr__(self):
        return f"<LineItemRecord(id={self.id}, product_id={self.product_id}, qty={self.quantity})>"
