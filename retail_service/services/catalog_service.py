"""Catalog and customer business logic"""
from sqlalchemy.orm import Session
from retail_service.models.catalog import Category, Customer, Product
from retail_service.models.schemas import (
    CategoryCreate,
    CategoryUpdate,
    CustomerCreate,
    CustomerUpdate,
    ProductCreate,
    ProductUpdate,
)
from retail_service.errors import NotFound
from typing import List, Optional, Tuple
from opentelemetry import trace
import logging

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class CategoryService:
    """Category service for business logic"""

    @staticmethod
    def get_category(db: Session, category_id: int) -> Optional[Category]:
        return db.get(Category, category_id)

    @staticmethod
    def get_category_by_name(db: Session, name: str) -> Optional[Category]:
        return db.query(Category).filter(Category.name == name).first()

    @staticmethod
    def get_categories(db: Session, active_only: bool = False) -> List[Category]:
        query = db.query(Category)
        if active_only:
            query = query.filter(Category.is_active.is_(True))
        return query.order_by(Category.name).all()

    @staticmethod
    def create_category(db: Session, data: CategoryCreate) -> Category:
        if CategoryService.get_category_by_name(db, data.name):
            raise ValueError(f"Category {data.name} already exists")

        category = Category(**data.model_dump())
        db.add(category)
        db.commit()
        db.refresh(category)
        logger.info(f"Category {category.id} created: {category.name}")
        return category

    @staticmethod
    def update_category(db: Session, category_id: int, data: CategoryUpdate) -> Optional[Category]:
        category = CategoryService.get_category(db, category_id)
        if not category:
            return None

        update_data = data.model_dump(exclude_unset=True)
        new_name = update_data.get("name")
        if new_name and new_name != category.name and CategoryService.get_category_by_name(db, new_name):
            raise ValueError(f"Category {new_name} already exists")

        for field, value in update_data.items():
            setattr(category, field, value)

        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def delete_category(db: Session, category_id: int) -> bool:
        """Delete category (soft delete)"""
        category = CategoryService.get_category(db, category_id)
        if not category:
            return False

        category.is_active = False
        db.commit()
        return True


class ProductService:
    """Product service for business logic"""

    @staticmethod
    def get_product(db: Session, product_id: int) -> Optional[Product]:
        """Get product by ID"""
        with tracer.start_as_current_span("get_product") as span:
            span.set_attribute("product.id", product_id)
            return db.get(Product, product_id)

    @staticmethod
    def get_product_by_sku(db: Session, sku: str) -> Optional[Product]:
        """Get product by SKU"""
        return db.query(Product).filter(Product.sku == sku).first()

    @staticmethod
    def get_products(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        category_id: Optional[int] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        low_stock: bool = False
    ) -> Tuple[List[Product], int]:
        """Get list of products with pagination"""
        query = db.query(Product)

        if category_id:
            query = query.filter(Product.category_id == category_id)
        if is_active is not None:
            query = query.filter(Product.is_active == is_active)
        if search:
            pattern = f"%{search}%"
            query = query.filter(Product.name.ilike(pattern) | Product.sku.ilike(pattern))
        if low_stock:
            query = query.filter(Product.stock_quantity <= Product.min_stock_level)

        total = query.count()
        products = query.order_by(Product.name).offset(skip).limit(limit).all()

        return products, total

    @staticmethod
    def create_product(db: Session, product_data: ProductCreate) -> Product:
        """Create new product"""
        existing = ProductService.get_product_by_sku(db, product_data.sku)
        if existing:
            raise ValueError(f"Product with SKU {product_data.sku} already exists")

        if product_data.category_id and not CategoryService.get_category(db, product_data.category_id):
            raise NotFound(f"Category with id {product_data.category_id} not found")

        product = Product(**product_data.model_dump())
        db.add(product)
        db.commit()
        db.refresh(product)
        logger.info(f"Product {product.id} created: {product.sku}")
        return product

    @staticmethod
    def update_product(db: Session, product_id: int, product_data: ProductUpdate) -> Optional[Product]:
        """Update existing product"""
        product = ProductService.get_product(db, product_id)
        if not product:
            return None

        update_data = product_data.model_dump(exclude_unset=True)
        new_sku = update_data.get("sku")
        if new_sku and new_sku != product.sku and ProductService.get_product_by_sku(db, new_sku):
            raise ValueError(f"Product with SKU {new_sku} already exists")

        for field, value in update_data.items():
            setattr(product, field, value)

        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def delete_product(db: Session, product_id: int) -> bool:
        """Delete product (soft delete)"""
        product = ProductService.get_product(db, product_id)
        if not product:
            return False

        product.is_active = False
        db.commit()
        return True

    @staticmethod
    def adjust_stock(db: Session, product_id: int, change: int) -> Product:
        """
        Receive or remove stock

        Raises:
            NotFound: unknown product
            InvalidQuantity: removing more than is on hand
        """
        with tracer.start_as_current_span("adjust_stock") as span:
            span.set_attribute("product.id", product_id)
            span.set_attribute("stock.change", change)

            product = ProductService.get_product(db, product_id)
            if not product:
                raise NotFound(f"Product with id {product_id} not found")

            if change < 0:
                product.reduce_stock(-change)
            else:
                product.add_stock(change)

            db.commit()
            db.refresh(product)

            if product.is_low_stock():
                logger.warning(f"Product {product.sku} is low on stock: {product.stock_quantity}")
            return product


class CustomerService:
    """Customer service for business logic"""

    @staticmethod
    def get_customer(db: Session, customer_id: int) -> Optional[Customer]:
        return db.get(Customer, customer_id)

    @staticmethod
    def get_customer_by_email(db: Session, email: str) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.email == email).first()

    @staticmethod
    def get_customers(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
        active_only: bool = False
    ) -> Tuple[List[Customer], int]:
        query = db.query(Customer)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                Customer.first_name.ilike(pattern)
                | Customer.last_name.ilike(pattern)
                | Customer.email.ilike(pattern)
            )
        if active_only:
            query = query.filter(Customer.is_active.is_(True))

        total = query.count()
        customers = (
            query.order_by(Customer.first_name, Customer.last_name)
            .offset(skip)
            .limit(limit)
            .all()
        )
        return customers, total

    @staticmethod
    def create_customer(db: Session, data: CustomerCreate) -> Customer:
        if data.email and CustomerService.get_customer_by_email(db, data.email):
            raise ValueError(f"Customer with email {data.email} already exists")

        customer = Customer(**data.model_dump())
        db.add(customer)
        db.commit()
        db.refresh(customer)
        logger.info(f"Customer {customer.id} created")
        return customer

    @staticmethod
    def update_customer(db: Session, customer_id: int, data: CustomerUpdate) -> Optional[Customer]:
        customer = CustomerService.get_customer(db, customer_id)
        if not customer:
            return None

        update_data = data.model_dump(exclude_unset=True)
        new_email = update_data.get("email")
        if new_email and new_email != customer.email and CustomerService.get_customer_by_email(db, new_email):
            raise ValueError(f"Customer with email {new_email} already exists")

        for field, value in update_data.items():
            setattr(customer, field, value)

        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def delete_customer(db: Session, customer_id: int) -> bool:
        """Delete customer (soft delete)"""
        customer = CustomerService.get_customer(db, customer_id)
        if not customer:
            return False

        customer.is_active = False
        db.commit()
        return True
