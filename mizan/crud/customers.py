import logging
from decimal import Decimal

from sqlalchemy import desc
from sqlalchemy.orm import Session

from mizan.models import Customer, Invoice, InvoiceItem, InvoiceType
from mizan.schemas.customers import CustomerCreate, CustomerUpdate
from mizan.utils.billing import CREDIT_TYPES, DEBIT_TYPES, ZERO, quantize

logger = logging.getLogger(__name__)


def get_customers(db: Session):
    return db.query(Customer).order_by(desc(Customer.created_at), Customer.name).all()


def get_customer(db: Session, customer_id: str):
    return db.query(Customer).filter(Customer.id == customer_id).first()


def create_customer(db: Session, customer: CustomerCreate) -> Customer:
    db_customer = Customer(
        name=customer.name,
        email=customer.email,
        phone=customer.phone,
        address=customer.address,
        meter_number=customer.meter_number,
        balance=Decimal("0.00"),  # always starts at zero
    )
    db.add(db_customer)
    db.commit()
    db.refresh(db_customer)
    logger.info("Customer %s created (%s)", db_customer.id, db_customer.name)
    return db_customer


def update_customer(db: Session, customer_id: str, customer_in: CustomerUpdate):
    customer = get_customer(db, customer_id)
    if not customer:
        return None

    update_data = customer_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field == "name" and value is None:
            continue
        setattr(customer, field, value)

    db.commit()
    db.refresh(customer)
    return customer


def count_customer_invoices(db: Session, customer_id: str) -> int:
    return db.query(Invoice).filter(Invoice.customer_id == customer_id).count()


def delete_customer(db: Session, customer_id: str) -> bool:
    customer = get_customer(db, customer_id)
    if not customer:
        return False
    db.delete(customer)
    db.commit()
    logger.info("Customer %s deleted", customer_id)
    return True


def get_customers_with_stats(db: Session) -> list:
    result = []
    for customer in db.query(Customer).all():
        invoices = db.query(Invoice).filter(Invoice.customer_id == customer.id).all()
        total_amount = quantize(sum((inv.total for inv in invoices), ZERO))

        result.append({
            "id": customer.id,
            "name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
            "address": customer.address,
            "meter_number": customer.meter_number,
            "balance": customer.balance,
            "created_at": customer.created_at,
            "total_invoices": len(invoices),
            "total_amount": total_amount,
            "account_balance": customer.balance,
        })

    return sorted(result, key=lambda row: row["total_amount"], reverse=True)


def get_last_reading(db: Session, customer: Customer) -> dict:
    """
    Meter number and previous reading for the customer's next commercial
    invoice: the current reading of the latest commercial line on file.
    """
    last_item = (
        db.query(InvoiceItem)
        .join(Invoice, InvoiceItem.invoice_id == Invoice.id)
        .filter(
            Invoice.customer_id == customer.id,
            Invoice.type == InvoiceType.COMMERCIAL.value,
            InvoiceItem.current_reading.is_not(None),
        )
        .order_by(desc(Invoice.date), desc(Invoice.created_at), desc(InvoiceItem.position))
        .first()
    )

    if not last_item:
        return {"meter_number": customer.meter_number, "previous_reading": None}

    return {
        "meter_number": last_item.meter_number or customer.meter_number,
        "previous_reading": last_item.current_reading,
    }


def get_customer_account(db: Session, customer: Customer) -> dict:
    """
    Account statement built from the customer's invoices.

    Monthly and commercial invoices are debits, revenue entries are credits.
    The closing balance is the stored running balance, not a sum of the
    entries, so the two can differ after edits or deletions.
    """
    invoices = (
        db.query(Invoice)
        .filter(
            Invoice.customer_id == customer.id,
            Invoice.type.in_(DEBIT_TYPES + CREDIT_TYPES),
        )
        .order_by(Invoice.date, Invoice.created_at)
        .all()
    )

    transactions = []
    total_debit = ZERO
    total_credit = ZERO

    for entry_number, invoice in enumerate(invoices, start=1):
        kind = "debit" if invoice.type in DEBIT_TYPES else "credit"
        if kind == "debit":
            total_debit += invoice.total
        else:
            total_credit += invoice.total

        first_item = invoice.items[0] if invoice.items else None
        transactions.append({
            "id": invoice.id,
            "type": kind,
            "entry_number": entry_number,
            "amount": invoice.total,
            "description": (first_item.description if first_item else None) or invoice.notes or invoice.number,
            "document_number": first_item.document_number if first_item else None,
            "date": invoice.date,
            "invoice_number": invoice.number,
        })

    return {
        "customer": customer,
        "transactions": transactions,
        "totals": {
            "total_debit": quantize(total_debit),
            "total_credit": quantize(total_credit),
            "current_balance": quantize(customer.balance),
        },
    }
