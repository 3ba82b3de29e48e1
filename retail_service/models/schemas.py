# retail_service/models/schemas.py
"""
Pydantic schemas for the Retail Service API
"""
from pydantic import BaseModel, Field, EmailStr, ConfigDict, model_validator
from typing import Dict, List, Optional
from datetime import datetime
from decimal import Decimal

from retail_service.domain.order import OrderStatus
from retail_service.models.payment import PaymentMethod, PaymentStatus


# --- Orders -----------------------------------------------------------------

class LineItemCreate(BaseModel):
    """Schema for adding a line item"""
    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity")


class LineItemUpdate(BaseModel):
    """Set an absolute quantity or change it by a delta"""
    quantity: Optional[int] = Field(None, description="New quantity")
    delta: Optional[int] = Field(None, description="Units to add (negative to remove)")

    @model_validator(mode="after")
    def exactly_one(self):
        if (self.quantity is None) == (self.delta is None):
            raise ValueError("Provide exactly one of 'quantity' or 'delta'")
        return self


class LineItemResponse(BaseModel):
    """Schema for line item response"""
    line_item_id: Optional[int]
    product_id: Optional[int]
    product_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    created_at: datetime


class OrderCreate(BaseModel):
    """Schema for creating an order"""
    customer_id: int = Field(..., gt=0, description="Customer ID")
    items: List[LineItemCreate] = Field(default_factory=list)
    tax_amount: Decimal = Field(Decimal("0"), ge=0)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None


class OrderAdjustments(BaseModel):
    """Tax, discount and notes; unset fields are left alone"""
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    discount_amount: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: OrderStatus


class OrderResponse(BaseModel):
    """Schema for order response"""
    order_id: Optional[int]
    customer_id: int
    order_date: datetime
    status: OrderStatus
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    notes: Optional[str] = None
    total_items: int
    is_completed: bool
    can_be_cancelled: bool
    line_items: List[LineItemResponse]
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    """Schema for list of orders"""
    total: int
    orders: List[OrderResponse]
    page: int
    page_size: int


class SalesSummary(BaseModel):
    """Dashboard figures"""
    total_products: int
    total_customers: int
    total_orders: int
    total_revenue: Decimal
    orders_by_status: Dict[str, int]


# --- Catalog ----------------------------------------------------------------

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: bool = True


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryResponse(CategoryBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductBase(BaseModel):
    """Base product schema"""
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    sku: str = Field(..., min_length=1, max_length=50, description="Stock Keeping Unit")
    price: Decimal = Field(..., gt=0, description="Selling price")
    cost_price: Optional[Decimal] = Field(None, ge=0, description="Purchase price")
    stock_quantity: int = Field(0, ge=0)
    min_stock_level: int = Field(0, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = Field(None, max_length=500)
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    """Schema for updating a product (all fields optional)"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    price: Optional[Decimal] = Field(None, gt=0)
    cost_price: Optional[Decimal] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    min_stock_level: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


class StockAdjustment(BaseModel):
    """Positive to receive stock, negative to take it out"""
    change: int


class ProductResponse(ProductBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for list of products"""
    total: int
    products: List[ProductResponse]
    page: int
    page_size: int


class CustomerBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=50)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=50)
    is_active: bool = True


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=50)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


class CustomerResponse(CustomerBase):
    id: int
    full_name: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CustomerListResponse(BaseModel):
    """Schema for list of customers"""
    total: int
    customers: List[CustomerResponse]
    page: int
    page_size: int


# --- Payments ---------------------------------------------------------------

class PaymentCreate(BaseModel):
    order_id: int = Field(..., gt=0)
    payment_method: PaymentMethod
    amount: Decimal = Field(..., gt=0)
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaymentComplete(BaseModel):
    transaction_id: str = Field(..., min_length=1, max_length=100)


class PaymentFail(BaseModel):
    reason: str = Field(..., min_length=1)


class RefundRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)


class PaymentResponse(BaseModel):
    id: int
    order_id: int
    payment_method: PaymentMethod
    status: PaymentStatus
    amount: Decimal
    transaction_id: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    version: str
    timestamp: datetime
