from decimal import Decimal

from mizan.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_sales: Decimal
    paid_invoices: int
    pending_invoices: int
    overdue_invoices: int
    active_customers: int
