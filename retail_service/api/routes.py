# retail_service/api/routes.py
"""
FastAPI routes for orders
"""
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from retail_service.db.database import get_db
from retail_service.domain.order import Order, OrderStatus
from retail_service.services.order_service import OrderService
from retail_service.services.payment_service import PaymentService
from retail_service.models.schemas import (
    LineItemCreate,
    LineItemUpdate,
    OrderAdjustments,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    PaymentResponse,
    SalesSummary,
)
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["orders"])


def to_response(order: Order) -> OrderResponse:
    return OrderResponse.model_validate(order.snapshot())


def to_list_response(orders: List[Order], total: int, skip: int, limit: int) -> OrderListResponse:
    return OrderListResponse(
        total=total,
        orders=[to_response(order) for order in orders],
        page=skip // limit + 1,
        page_size=limit
    )


@router.get("/orders/summary", response_model=SalesSummary)
def get_summary(db: Session = Depends(get_db)):
    """Totals for the dashboard"""
    return OrderService.sales_summary(db)


@router.get("/orders/date-range", response_model=List[OrderResponse])
def get_orders_by_date_range(
    start: datetime = Query(..., description="Earliest order date"),
    end: datetime = Query(..., description="Latest order date"),
    db: Session = Depends(get_db)
):
    """Orders placed between two dates, newest first"""
    try:
        orders = OrderService.get_orders_by_date_range(db, start, end)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [to_response(order) for order in orders]


@router.get("/orders", response_model=OrderListResponse)
def list_orders(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max items to return"),
    customer_id: Optional[int] = Query(None, description="Filter by customer ID"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db)
):
    """
    List orders, newest first

    - **skip**: Number of orders to skip (for pagination)
    - **limit**: Maximum number of orders to return
    - **customer_id**: Filter by customer ID (optional)
    - **status**: Filter by order status (optional)
    """
    logger.info(f"Listing orders: skip={skip}, limit={limit}, customer_id={customer_id}, status={status}")

    orders, total = OrderService.get_orders(
        db=db, skip=skip, limit=limit, customer_id=customer_id, status=status
    )
    return to_list_response(orders, total, skip, limit)


@router.get("/orders/customer/{customer_id}", response_model=OrderListResponse)
def get_customer_orders(
    customer_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    """Get all orders for a specific customer"""
    orders, total = OrderService.get_orders(db=db, skip=skip, limit=limit, customer_id=customer_id)
    return to_list_response(orders, total, skip, limit)


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db)):
    """Get a specific order by ID"""
    order = OrderService.get_order(db, order_id)
    if not order:
        logger.warning(f"Order {order_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order with id {order_id} not found"
        )
    return to_response(order)


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(order: OrderCreate, db: Session = Depends(get_db)):
    """
    Create a new order

    Each line is priced at the product's current price. Tax and discount are
    applied on top of the subtotal.
    """
    try:
        new_order = OrderService.create_order(db, order)
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return to_response(new_order)


@router.post("/orders/{order_id}/items", response_model=OrderResponse)
def add_order_item(order_id: int, item: LineItemCreate, db: Session = Depends(get_db)):
    """Append a line item to an order"""
    try:
        order = OrderService.add_item(db, order_id, item)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return to_response(order)


@router.patch("/orders/{order_id}/items/{line_item_id}", response_model=OrderResponse)
def update_order_item(
    order_id: int,
    line_item_id: int,
    change: LineItemUpdate,
    db: Session = Depends(get_db)
):
    """Set a line's quantity, or change it by a delta"""
    return to_response(OrderService.update_item(db, order_id, line_item_id, change))


@router.delete("/orders/{order_id}/items/{line_item_id}", response_model=OrderResponse)
def remove_order_item(order_id: int, line_item_id: int, db: Session = Depends(get_db)):
    return to_response(OrderService.remove_item(db, order_id, line_item_id))


@router.patch("/orders/{order_id}/adjustments", response_model=OrderResponse)
def update_adjustments(order_id: int, adjustments: OrderAdjustments, db: Session = Depends(get_db)):
    """Change tax, discount or notes"""
    return to_response(OrderService.update_adjustments(db, order_id, adjustments))


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(order_id: int, status_update: OrderStatusUpdate, db: Session = Depends(get_db)):
    """
    Update order status

    Any status may be set here; use the cancel endpoint to enforce the
    cancellation rule.
    """
    logger.info(f"Updating order {order_id} status to {status_update.status.value}")

    updated_order = OrderService.update_order_status(db, order_id, status_update.status)
    if not updated_order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order with id {order_id} not found"
        )
    return to_response(updated_order)


@router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: int, db: Session = Depends(get_db)):
    """
    Cancel an order

    Only pending or confirmed orders can be cancelled.
    """
    return to_response(OrderService.cancel_order(db, order_id))


@router.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: int, db: Session = Depends(get_db)):
    """Delete an order with its line items and payments"""
    if not OrderService.delete_order(db, order_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order with id {order_id} not found"
        )


@router.get("/orders/{order_id}/payments", response_model=List[PaymentResponse])
def list_order_payments(order_id: int, db: Session = Depends(get_db)):
    return PaymentService.get_payments_for_order(db, order_id)
