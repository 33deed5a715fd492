"""
Create the tables and load sample data.

    python -m mizan.init_db
"""
import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from mizan.crud import customers as crud_customers
from mizan.crud import invoices as crud_invoices
from mizan.database import Base, SessionLocal, engine
from mizan.models import Customer, InvoiceStatus, InvoiceType
from mizan.schemas.customers import CustomerCreate
from mizan.schemas.invoices import InvoiceCreate, InvoiceItemCreate

logger = logging.getLogger(__name__)

SAMPLE_CUSTOMERS = [
    {
        "name": "شركة الأحلام للتجارة",
        "email": "info@dreams-trading.com",
        "phone": "+970-123-456-789",
        "address": "رام الله، فلسطين",
    },
    {
        "name": "مؤسسة النور التجارية",
        "email": "contact@alnoor.com",
        "phone": "+970-987-654-321",
        "address": "نابلس، فلسطين",
        "meter_number": "CM-2041",
    },
    {
        "name": "شركة المستقبل للخدمات",
        "email": "info@future-services.com",
        "phone": "+970-555-123-456",
        "address": "الخليل، فلسطين",
    },
]


def seed_sample_data(db: Session) -> bool:
    """Loads the samples into an empty database. Returns False if data already exists."""
    if db.query(Customer).first():
        logger.info("Database already has customers; skipping seed")
        return False

    dreams, alnoor, future = [
        crud_customers.create_customer(db, CustomerCreate(**data)) for data in SAMPLE_CUSTOMERS
    ]

    crud_invoices.create_invoice(
        db,
        InvoiceCreate(
            number="INV-2024-001",
            customer_id=dreams.id,
            date=datetime(2024, 1, 15),
            due_date=datetime(2024, 2, 15),
            status=InvoiceStatus.PAID,
            type=InvoiceType.MONTHLY,
            notes="فاتورة خدمات استشارية",
        ),
        [InvoiceItemCreate(description="استشارات تطوير الأعمال", price=Decimal("3250.00"))],
    )

    crud_invoices.create_invoice(
        db,
        InvoiceCreate(
            number="INV-2024-002",
            customer_id=alnoor.id,
            date=datetime(2024, 1, 14),
            due_date=datetime(2024, 2, 14),
            type=InvoiceType.COMMERCIAL,
        ),
        [
            InvoiceItemCreate(
                description="فاتورة العداد التجاري 10 ايام",
                meter_number="CM-2041",
                previous_reading=Decimal("1200"),
                current_reading=Decimal("1450"),
                unit_price=Decimal("7.50"),
            )
        ],
    )

    crud_invoices.create_invoice(
        db,
        InvoiceCreate(
            number="INV-2024-003",
            customer_id=future.id,
            date=datetime(2024, 1, 10),
            due_date=datetime(2024, 1, 25),
            status=InvoiceStatus.OVERDUE,
            type=InvoiceType.MONTHLY,
            notes="خدمات تقنية متقدمة",
        ),
        [InvoiceItemCreate(description="تطوير نظام إدارة", price=Decimal("5420.00"))],
    )

    logger.info("Sample data loaded: %s customers, 3 invoices", len(SAMPLE_CUSTOMERS))
    return True


def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_sample_data(db)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    init_db()
