# mizan/models/customers.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Numeric, DateTime
from sqlalchemy.orm import relationship

from mizan.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)

    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)

    # Running amount owed. Adjusted when invoices are created, never recomputed.
    balance = Column(Numeric(10, 2), nullable=False, default=0)
    meter_number = Column(String, nullable=True)  # commercial meter

    created_at = Column(DateTime, default=utcnow)

    invoices = relationship("Invoice", back_populates="customer")
