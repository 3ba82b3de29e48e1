"""Payment business logic"""
from sqlalchemy.orm import Session
from retail_service.errors import NotFound
from retail_service.models.order import OrderRecord
from retail_service.models.payment import Payment, PaymentStatus
from retail_service.models.schemas import PaymentCreate
from typing import List, Optional
from opentelemetry import trace
import logging

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class PaymentService:
    """Payment service for business logic"""

    @staticmethod
    def get_payment(db: Session, payment_id: int) -> Optional[Payment]:
        return db.get(Payment, payment_id)

    @staticmethod
    def get_payments_for_order(db: Session, order_id: int) -> List[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.order_id == order_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
            .all()
        )

    @staticmethod
    def get_payments(
        db: Session,
        status: Optional[PaymentStatus] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Payment]:
        query = db.query(Payment)
        if status:
            query = query.filter(Payment.status == status)
        return query.order_by(Payment.id.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def create_payment(db: Session, data: PaymentCreate) -> Payment:
        with tracer.start_as_current_span("payment_service.create_payment") as span:
            span.set_attribute("order.id", data.order_id)
            span.set_attribute("payment.method", data.payment_method.value)

            if not db.get(OrderRecord, data.order_id):
                raise NotFound(f"Order with id {data.order_id} not found")

            payment = Payment(**data.model_dump(), status=PaymentStatus.PENDING)
            db.add(payment)
            db.commit()
            db.refresh(payment)

            logger.info(f"Payment {payment.id} recorded for order {data.order_id}: {payment.amount}")
            return payment

    @staticmethod
    def complete_payment(db: Session, payment_id: int, transaction_id: str) -> Payment:
        payment = PaymentService._load(db, payment_id)
        payment.mark_as_completed(transaction_id)
        db.commit()
        db.refresh(payment)
        logger.info(f"Payment {payment_id} completed, transaction {transaction_id}")
        return payment

    @staticmethod
    def fail_payment(db: Session, payment_id: int, reason: str) -> Payment:
        payment = PaymentService._load(db, payment_id)
        payment.mark_as_failed(reason)
        db.commit()
        db.refresh(payment)
        logger.warning(f"Payment {payment_id} failed: {reason}")
        return payment

    @staticmethod
    def refund_payment(db: Session, payment_id: int, amount) -> Payment:
        """
        Refund a completed payment in full or in part

        Raises:
            NotFound: unknown payment
            InvalidStateTransition: payment is not COMPLETED
            InvalidRefundAmount: amount is larger than the payment
        """
        with tracer.start_as_current_span("payment_service.refund_payment") as span:
            span.set_attribute("payment.id", payment_id)
            span.set_attribute("refund.amount", str(amount))

            payment = PaymentService._load(db, payment_id)
            new_status = payment.refund(amount)
            db.commit()
            db.refresh(payment)

            span.set_attribute("payment.status", new_status.value)
            logger.info(f"Payment {payment_id} refunded {amount}: {new_status.value}")
            return payment

    @staticmethod
    def _load(db: Session, payment_id: int) -> Payment:
        payment = PaymentService.get_payment(db, payment_id)
        if not payment:
            raise NotFound(f"Payment with id {payment_id} not found")
        return payment
