# retail_service/models/payment.py
"""
Payment database model
"""
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.sql import func
import enum

from retail_service.db.database import Base
from retail_service.domain.money import MoneyLike, to_money
from retail_service.errors import InvalidRefundAmount, InvalidStateTransition


class PaymentMethod(str, enum.Enum):
    """Payment method enum"""
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    OTHER = "other"


class PaymentStatus(str, enum.Enum):
    """Payment status enum"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PARTIAL_REFUND = "partial_refund"


class Payment(Base):
    """Payment against an order"""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)
    status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    transaction_id = Column(String(100), index=True)
    reference = Column(String(100))
    notes = Column(Text)
    payment_date = Column(DateTime(timezone=True), server_default=func.now())

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def is_successful(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    def is_pending(self) -> bool:
        return self.status in (PaymentStatus.PENDING, PaymentStatus.PROCESSING)

    def is_failed(self) -> bool:
        return self.status in (PaymentStatus.FAILED, PaymentStatus.CANCELLED)

    def can_be_refunded(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    def mark_as_completed(self, transaction_id: str) -> None:
        self.status = PaymentStatus.COMPLETED
        self.transaction_id = transaction_id
        self.payment_date = datetime.now(timezone.utc)

    def mark_as_failed(self, reason: str) -> None:
        self.status = PaymentStatus.FAILED
        self.notes = reason

    def refund(self, refund_amount: MoneyLike) -> PaymentStatus:
        """
        Refund all or part of a completed payment

        Returns:
            The resulting status (REFUNDED or PARTIAL_REFUND)
        """
        if not self.can_be_refunded():
            raise InvalidStateTransition(
                f"Payment cannot be refunded in current status: {self.status.value}",
                current_status=self.status,
            )

        refund_amount = to_money(refund_amount)
        paid = to_money(Decimal(self.amount))
        if refund_amount > paid:
            raise InvalidRefundAmount(
                f"Refund amount {refund_amount} cannot exceed payment amount {paid}",
                amount=refund_amount,
                limit=paid,
            )

        self.status = PaymentStatus.REFUNDED if refund_amount == paid else PaymentStatus.PARTIAL_REFUND
        return self.status

    def __repr__(self):
        return f"<Payment(id={self.id}, method={self.payment_method}, amount={self.amount}, status={self.status})>"
