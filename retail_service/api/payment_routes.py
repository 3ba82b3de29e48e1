"""FastAPI routes for payments"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from retail_service.db.database import get_db
from retail_service.services.payment_service import PaymentService
from retail_service.models.payment import PaymentStatus
from retail_service.models.schemas import (
    PaymentComplete,
    PaymentCreate,
    PaymentFail,
    PaymentResponse,
    RefundRequest,
)
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["payments"])


@router.get("/payments", response_model=List[PaymentResponse])
def list_payments(
    status: Optional[PaymentStatus] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    return PaymentService.get_payments(db, status=status, skip=skip, limit=limit)


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    payment = PaymentService.get_payment(db, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.post("/payments", response_model=PaymentResponse, status_code=201)
def create_payment(payment: PaymentCreate, db: Session = Depends(get_db)):
    """Record a pending payment against an order"""
    return PaymentService.create_payment(db, payment)


@router.post("/payments/{payment_id}/complete", response_model=PaymentResponse)
def complete_payment(payment_id: int, body: PaymentComplete, db: Session = Depends(get_db)):
    return PaymentService.complete_payment(db, payment_id, body.transaction_id)


@router.post("/payments/{payment_id}/fail", response_model=PaymentResponse)
def fail_payment(payment_id: int, body: PaymentFail, db: Session = Depends(get_db)):
    return PaymentService.fail_payment(db, payment_id, body.reason)


@router.post("/payments/{payment_id}/refund", response_model=PaymentResponse)
def refund_payment(payment_id: int, body: RefundRequest, db: Session = Depends(get_db)):
    """
    Refund a completed payment

    The full amount marks it refunded, a smaller amount partially refunded.
    """
    return PaymentService.refund_payment(db, payment_id, body.amount)
