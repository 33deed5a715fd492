# mizan/models/__init__.py
from mizan.database import Base

from .customers import Customer
from .invoices import Invoice, InvoiceItem, InvoiceStatus, InvoiceType
