import logging
from datetime import datetime, timezone

from sqlalchemy import desc
from sqlalchemy.orm import Session

from mizan.models import Customer, Invoice, InvoiceItem, InvoiceStatus, InvoiceType
from mizan.schemas.invoices import InvoiceCreate, InvoiceUpdate
from mizan.utils.billing import (
    ZERO,
    apply_invoice_to_customer_balance,
    compute_invoice_totals,
    quantize,
)
from mizan.utils.folios import get_next_invoice_number

logger = logging.getLogger(__name__)

PAYMENT_DESCRIPTION = "سداد فاتورة"


def _naive(value):
    # SQLite keeps naive timestamps; store everything as naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _enum_value(value):
    return getattr(value, "value", value)


# --------------------------------------------------------------------------
# Reads
# --------------------------------------------------------------------------
def get_invoices(db: Session, invoice_type: str = None, status: str = None, customer_id: str = None):
    query = db.query(Invoice)
    if invoice_type:
        query = query.filter(Invoice.type == _enum_value(invoice_type))
    if status:
        query = query.filter(Invoice.status == _enum_value(status))
    if customer_id:
        query = query.filter(Invoice.customer_id == customer_id)
    return query.order_by(desc(Invoice.created_at)).all()


def get_invoice(db: Session, invoice_id: str):
    return db.query(Invoice).filter(Invoice.id == invoice_id).first()


def get_invoice_by_number(db: Session, number: str):
    return db.query(Invoice).filter(Invoice.number == number).first()


def get_invoice_with_details(db: Session, invoice_id: str):
    """Invoice with customer and items loaded; None if either is missing."""
    invoice = get_invoice(db, invoice_id)
    if not invoice or invoice.customer is None:
        return None
    return invoice


def get_invoices_by_customer(db: Session, customer_id: str):
    return get_invoices(db, customer_id=customer_id)


def get_invoice_items(db: Session, invoice_id: str):
    return (
        db.query(InvoiceItem)
        .filter(InvoiceItem.invoice_id == invoice_id)
        .order_by(InvoiceItem.position)
        .all()
    )


# --------------------------------------------------------------------------
# Create
# --------------------------------------------------------------------------
def _add_invoice(db: Session, invoice_in: InvoiceCreate, items, status: str, discount_percent=None) -> Invoice:
    """
    Stage an invoice and its lines, recomputing every amount, then post it
    to the customer's balance. Flushes but does not commit.
    """
    invoice_type = invoice_in.type.value
    totals = compute_invoice_totals(items, invoice_type, discount_percent)
    subtotal = totals["subtotal"]

    if invoice_type == InvoiceType.PAYMENT.value:
        discount = ZERO
    elif discount_percent is not None:
        discount = totals["discount_amount"]
    else:
        discount = quantize(invoice_in.discount or ZERO)
    # Discount stays within [0, subtotal]
    discount = max(ZERO, min(discount, subtotal))

    invoice = Invoice(
        number=invoice_in.number or get_next_invoice_number(db, year=invoice_in.date.year),
        customer_id=invoice_in.customer_id,
        date=_naive(invoice_in.date),
        due_date=_naive(invoice_in.due_date),
        status=status,
        type=invoice_type,
        subtotal=subtotal,
        tax=ZERO,  # no tax under current business rules
        discount=discount,
        total=subtotal - discount,
        notes=invoice_in.notes,
    )
    db.add(invoice)
    db.flush()

    for position, (item, line_total) in enumerate(zip(items, totals["line_totals"])):
        db.add(InvoiceItem(
            invoice_id=invoice.id,
            position=position,
            description=item.description,
            document_number=item.document_number,
            meter_number=item.meter_number,
            previous_reading=item.previous_reading,
            current_reading=item.current_reading,
            unit_price=item.unit_price,
            price=line_total,
            total=line_total,
        ))
    db.flush()

    customer = db.query(Customer).filter(Customer.id == invoice.customer_id).first()
    apply_invoice_to_customer_balance(customer, invoice)
    return invoice


def _add_revenue_for_payment(db: Session, payment: Invoice) -> Invoice:
    """Revenue entry crediting the customer for a payment invoice."""
    description = f"{PAYMENT_DESCRIPTION} {payment.number}"
    revenue = Invoice(
        number=get_next_invoice_number(db, prefix="REV", year=payment.date.year),
        customer_id=payment.customer_id,
        date=payment.date,
        status=InvoiceStatus.PAID.value,
        type=InvoiceType.REVENUE.value,
        subtotal=payment.total,
        tax=ZERO,
        discount=ZERO,
        total=payment.total,
        notes=description,
    )
    db.add(revenue)
    db.flush()

    db.add(InvoiceItem(
        invoice_id=revenue.id,
        position=0,
        description=description,
        price=payment.total,
        total=payment.total,
    ))
    db.flush()

    customer = db.query(Customer).filter(Customer.id == revenue.customer_id).first()
    apply_invoice_to_customer_balance(customer, revenue)
    return revenue


def create_invoice(
    db: Session,
    invoice_in: InvoiceCreate,
    items: list,
    is_payment: bool = False,
    discount_percent=None,
) -> Invoice:
    if invoice_in.status is not None:
        status = invoice_in.status.value
    else:
        status = InvoiceStatus.PAID.value if is_payment else InvoiceStatus.PENDING.value

    invoice = _add_invoice(db, invoice_in, items, status, discount_percent)
    revenue = _add_revenue_for_payment(db, invoice) if is_payment else None

    db.commit()
    db.refresh(invoice)

    logger.info(
        "Invoice %s created (%s, total %s, customer %s)",
        invoice.number, invoice.type, invoice.total, invoice.customer_id,
    )
    if revenue is not None:
        logger.info("Revenue %s recorded for payment %s", revenue.number, invoice.number)
    return invoice


# --------------------------------------------------------------------------
# Update / delete
# --------------------------------------------------------------------------
def update_invoice(db: Session, invoice_id: str, invoice_in: InvoiceUpdate):
    """
    Header fields only. Amounts stay as computed at creation, so
    total == subtotal - discount keeps holding. The balance is not touched.
    """
    invoice = get_invoice(db, invoice_id)
    if not invoice:
        return None

    for field, value in invoice_in.model_dump(exclude_unset=True).items():
        if value is None and field in ("number", "customer_id", "date", "status", "type"):
            continue
        if field in ("date", "due_date"):
            value = _naive(value)
        setattr(invoice, field, _enum_value(value))

    db.commit()
    db.refresh(invoice)
    return invoice


def delete_invoice(db: Session, invoice_id: str) -> bool:
    """Deletes the items first, then the invoice. The balance is not touched."""
    invoice = get_invoice(db, invoice_id)
    if not invoice:
        return False

    number = invoice.number
    deleted_items = (
        db.query(InvoiceItem)
        .filter(InvoiceItem.invoice_id == invoice_id)
        .delete(synchronize_session=False)
    )
    db.expire(invoice, ["items"])
    db.delete(invoice)
    db.commit()
    logger.info("Invoice %s deleted with %s item(s)", number, deleted_items)
    return True


# --------------------------------------------------------------------------
# Status sweep
# --------------------------------------------------------------------------
def mark_overdue_invoices(db: Session, as_of: datetime = None) -> int:
    """
    Move pending invoices whose due date has passed to overdue.
    Nothing calls this implicitly; it is meant for a scheduled job.
    """
    as_of = _naive(as_of) or datetime.now(timezone.utc).replace(tzinfo=None)

    invoices = db.query(Invoice).filter(
        Invoice.status == InvoiceStatus.PENDING.value,
        Invoice.due_date.is_not(None),
        Invoice.due_date < as_of,
    ).all()

    for invoice in invoices:
        invoice.status = InvoiceStatus.OVERDUE.value

    db.commit()
    logger.info("Marked %s invoice(s) overdue as of %s", len(invoices), as_of.isoformat())
    return len(invoices)
