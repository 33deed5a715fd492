# mizan/models/invoices.py
import enum

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from mizan.database import Base
from mizan.models.customers import new_id, utcnow


class InvoiceStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class InvoiceType(str, enum.Enum):
    MONTHLY = "monthly"          # flat recurring fee
    COMMERCIAL = "commercial"    # metered consumption
    STATEMENT = "statement"
    REVENUE = "revenue"          # credit against the customer's balance
    EXPENSE = "expense"
    PAYMENT = "payment"


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=new_id)
    number = Column(String, nullable=False, unique=True, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)

    date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=True)

    status = Column(String, nullable=False, default=InvoiceStatus.PENDING.value)
    type = Column(String, nullable=False, default=InvoiceType.MONTHLY.value)

    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False, default=0)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    customer = relationship("Customer", back_populates="invoices")
    # Items are removed explicitly by the delete handler.
    items = relationship("InvoiceItem", back_populates="invoice", order_by="InvoiceItem.position")


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    description = Column(String, nullable=False)
    document_number = Column(String, nullable=True)

    # Only meaningful on commercial invoices
    meter_number = Column(String, nullable=True)
    previous_reading = Column(Numeric(10, 2), nullable=True)
    current_reading = Column(Numeric(10, 2), nullable=True)
    unit_price = Column(Numeric(10, 2), nullable=True)

    price = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="items")
