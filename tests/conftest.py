"""Shared fixtures: in-memory SQLite database, API client and seed records"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from retail_service.db import database
from retail_service.main import app
from retail_service.models.catalog import Category, Customer, Product


@pytest.fixture
def db_engine():
    """Fresh in-memory database per test"""
    engine = database.init_database("sqlite://")
    database.create_tables()
    yield engine
    database.drop_tables()
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(db_engine):
    return TestClient(app)


@pytest.fixture
def customer(db_session) -> Customer:
    record = Customer(first_name="Ada", last_name="Lovelace", email="ada@example.com")
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture
def products(db_session):
    """Two active products priced 10.00 and 5.50"""
    category = Category(name="Stationery")
    db_session.add(category)
    db_session.flush()

    pen = Product(name="Pen", sku="PEN-1", price=Decimal("10.00"), stock_quantity=50, category_id=category.id)
    pad = Product(name="Notepad", sku="PAD-1", price=Decimal("5.50"), stock_quantity=20, category_id=category.id)
    db_session.add_all([pen, pad])
    db_session.commit()
    db_session.refresh(pen)
    db_session.refresh(pad)
    return pen, pad
