"""FastAPI routes for categories, products and customers"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from retail_service.db.database import get_db
from retail_service.services.catalog_service import CategoryService, CustomerService, ProductService
from retail_service.models.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    StockAdjustment,
)
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["catalog"])


# --- Categories ---------------------------------------------------------------

@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(active_only: bool = Query(False), db: Session = Depends(get_db)):
    return CategoryService.get_categories(db, active_only=active_only)


@router.get("/categories/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int, db: Session = Depends(get_db)):
    category = CategoryService.get_category(db, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    try:
        return CategoryService.create_category(db, category)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(category_id: int, category: CategoryUpdate, db: Session = Depends(get_db)):
    try:
        updated = CategoryService.update_category(db, category_id, category)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Category not found")
    return updated


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    """Delete a category (soft delete)"""
    if not CategoryService.delete_category(db, category_id):
        raise HTTPException(status_code=404, detail="Category not found")


# --- Products -----------------------------------------------------------------

@router.get("/products", response_model=ProductListResponse)
def list_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    category_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    low_stock: bool = Query(False),
    db: Session = Depends(get_db)
):
    """List products with pagination"""
    logger.info(f"Listing products: skip={skip}, limit={limit}")

    products, total = ProductService.get_products(
        db=db,
        skip=skip,
        limit=limit,
        category_id=category_id,
        is_active=is_active,
        search=search,
        low_stock=low_stock,
    )
    return ProductListResponse(
        total=total,
        products=products,
        page=skip // limit + 1,
        page_size=limit
    )


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db)):
    """Get a specific product by ID"""
    product = ProductService.get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    """Create a new product"""
    try:
        return ProductService.create_product(db, product)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(product_id: int, product: ProductUpdate, db: Session = Depends(get_db)):
    """Update an existing product"""
    try:
        updated = ProductService.update_product(db, product_id, product)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Product not found")
    return updated


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    """Delete a product (soft delete)"""
    if not ProductService.delete_product(db, product_id):
        raise HTTPException(status_code=404, detail="Product not found")


@router.post("/products/{product_id}/stock", response_model=ProductResponse)
def adjust_stock(product_id: int, adjustment: StockAdjustment, db: Session = Depends(get_db)):
    """Receive (positive) or remove (negative) stock"""
    return ProductService.adjust_stock(db, product_id, adjustment.change)


# --- Customers ----------------------------------------------------------------

@router.get("/customers", response_model=CustomerListResponse)
def list_customers(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    search: Optional[str] = Query(None),
    active_only: bool = Query(False),
    db: Session = Depends(get_db)
):
    customers, total = CustomerService.get_customers(
        db, skip=skip, limit=limit, search=search, active_only=active_only
    )
    return CustomerListResponse(
        total=total,
        customers=customers,
        page=skip // limit + 1,
        page_size=limit
    )


@router.get("/customers/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    customer = CustomerService.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.post("/customers", response_model=CustomerResponse, status_code=201)
def create_customer(customer: CustomerCreate, db: Session = Depends(get_db)):
    try:
        return CustomerService.create_customer(db, customer)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/customers/{customer_id}", response_model=CustomerResponse)
def update_customer(customer_id: int, customer: CustomerUpdate, db: Session = Depends(get_db)):
    try:
        updated = CustomerService.update_customer(db, customer_id, customer)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Customer not found")
    return updated


@router.delete("/customers/{customer_id}", status_code=204)
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    """Delete a customer (soft delete)"""
    if not CustomerService.delete_customer(db, customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
