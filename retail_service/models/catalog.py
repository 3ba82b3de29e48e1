# retail_service/models/catalog.py
"""
Catalog and customer database models
"""
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from retail_service.db.database import Base
from retail_service.domain.money import ZERO
from retail_service.errors import InvalidQuantity


class Category(Base):
    """Product category"""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"


class Product(Base):
    """Sellable product"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    sku = Column(String(50), nullable=False, unique=True, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    cost_price = Column(Numeric(10, 2))
    stock_quantity = Column(Integer, default=0, nullable=False)
    min_stock_level = Column(Integer, default=0, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    image_url = Column(String(500))
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("Category", back_populates="products")

    def is_low_stock(self) -> bool:
        return (self.stock_quantity or 0) <= (self.min_stock_level or 0)

    def is_in_stock(self) -> bool:
        return (self.stock_quantity or 0) > 0

    def profit_margin(self) -> Decimal:
        if not self.cost_price:
            return ZERO
        return Decimal(self.price) - Decimal(self.cost_price)

    def profit_percentage(self) -> Decimal:
        """Margin as a percentage of cost price"""
        if not self.cost_price:
            return ZERO
        ratio = (self.profit_margin() / Decimal(self.cost_price)).quantize(
            Decimal("0.0001"), rounding=ROUND_HALF_UP
        )
        return ratio * 100

    def reduce_stock(self, quantity: int) -> None:
        if quantity > (self.stock_quantity or 0):
            raise InvalidQuantity(
                f"Cannot reduce stock of {self.sku} by {quantity}, only {self.stock_quantity} available",
                quantity=quantity,
            )
        self.stock_quantity -= quantity

    def add_stock(self, quantity: int) -> None:
        self.stock_quantity = (self.stock_quantity or 0) + quantity

    def __repr__(self):
        return f"<Product(id={self.id}, sku={self.sku}, price={self.price})>"


class Customer(Base):
    """Customer record"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, index=True)
    phone_number = Column(String(20))
    address = Column(Text)
    city = Column(String(50))
    postal_code = Column(String(20))
    country = Column(String(50))
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Customer(id={self.id}, email={self.email})>"
