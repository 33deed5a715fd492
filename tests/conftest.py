import os

os.environ.setdefault("MIZAN_DATABASE_URL", "sqlite://")
os.environ.setdefault("MIZAN_SEED_SAMPLE_DATA", "0")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mizan.crud import customers as crud_customers
from mizan.database import Base, get_db
from mizan.main import app
from mizan.schemas.customers import CustomerCreate


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def customer(db):
    return crud_customers.create_customer(
        db, CustomerCreate(name="مؤسسة النور التجارية", phone="+970-987-654-321", meter_number="CM-2041")
    )


def invoice_payload(customer_id, items=None, **invoice_fields):
    """Request body for POST /api/invoices."""
    invoice = {
        "customerId": customer_id,
        "date": datetime(2024, 3, 1).isoformat(),
        "type": "monthly",
    }
    invoice.update(invoice_fields)
    return {
        "invoice": invoice,
        "items": items if items is not None else [{"description": "رسوم شهرية", "price": "200"}],
    }


def as_decimal(value):
    return Decimal(str(value))
