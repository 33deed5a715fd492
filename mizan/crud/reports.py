from sqlalchemy import func
from sqlalchemy.orm import Session

from mizan.models import Customer, Invoice, InvoiceStatus
from mizan.utils.billing import quantize


def get_dashboard_stats(db: Session) -> dict:
    """Totals for the dashboard cards. Sales count paid invoices only."""
    total_sales = db.query(func.coalesce(func.sum(Invoice.total), 0)).filter(
        Invoice.status == InvoiceStatus.PAID.value
    ).scalar()

    counts = dict(
        db.query(Invoice.status, func.count(Invoice.id)).group_by(Invoice.status).all()
    )

    return {
        "total_sales": quantize(total_sales),
        "paid_invoices": counts.get(InvoiceStatus.PAID.value, 0),
        "pending_invoices": counts.get(InvoiceStatus.PENDING.value, 0),
        "overdue_invoices": counts.get(InvoiceStatus.OVERDUE.value, 0),
        "active_customers": db.query(Customer).count(),
    }
