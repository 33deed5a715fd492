from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import Field, field_validator

from mizan.models import InvoiceStatus, InvoiceType
from mizan.schemas.common import CamelModel, blank_to_none, clean_number
from mizan.schemas.customers import CustomerRead

NUMERIC_ITEM_FIELDS = ("previous_reading", "current_reading", "unit_price", "price", "total")


def money_field(default=None):
    # Same bounds as the Numeric(10, 2) columns
    return Field(default, max_digits=10, decimal_places=2)

# --- Items ---

class InvoiceItemBase(CamelModel):
    description: str = Field(..., min_length=1)
    document_number: Optional[str] = None

    meter_number: Optional[str] = None
    previous_reading: Optional[Decimal] = money_field()
    current_reading: Optional[Decimal] = money_field()
    unit_price: Optional[Decimal] = money_field()

    price: Optional[Decimal] = money_field()
    total: Optional[Decimal] = money_field()

    @field_validator("document_number", "meter_number", mode="before")
    @classmethod
    def _blank_text(cls, value):
        return blank_to_none(value)

    @field_validator(*NUMERIC_ITEM_FIELDS, mode="before")
    @classmethod
    def _clean_numbers(cls, value):
        return clean_number(value)


class InvoiceItemCreate(InvoiceItemBase):
    pass


class InvoiceItemRead(InvoiceItemBase):
    id: str
    invoice_id: str
    price: Decimal
    total: Decimal

# --- Invoice header ---

class InvoiceCreate(CamelModel):
    number: Optional[str] = None       # generated when absent
    customer_id: str = Field(..., min_length=1)
    date: datetime
    due_date: Optional[datetime] = None
    status: Optional[InvoiceStatus] = None
    type: InvoiceType = InvoiceType.MONTHLY

    # Recomputed by the server; accepted for compatibility with older clients
    subtotal: Optional[Decimal] = money_field()
    tax: Optional[Decimal] = money_field()
    discount: Optional[Decimal] = money_field()
    total: Optional[Decimal] = money_field()

    notes: Optional[str] = None

    @field_validator("number", mode="before")
    @classmethod
    def _blank_number(cls, value):
        return blank_to_none(value)

    @field_validator("subtotal", "tax", "discount", "total", mode="before")
    @classmethod
    def _clean_numbers(cls, value):
        return clean_number(value)


class InvoiceUpdate(CamelModel):
    number: Optional[str] = Field(None, min_length=1)
    customer_id: Optional[str] = Field(None, min_length=1)
    date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: Optional[InvoiceStatus] = None
    type: Optional[InvoiceType] = None
    notes: Optional[str] = None


class InvoiceCreateRequest(CamelModel):
    invoice: InvoiceCreate
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    is_payment: bool = False
    discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)

    @field_validator("discount_percent", mode="before")
    @classmethod
    def _clean_percent(cls, value):
        return clean_number(value)


class InvoiceRead(CamelModel):
    id: str
    number: str
    customer_id: str
    date: datetime
    due_date: Optional[datetime] = None
    status: str
    type: str
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class InvoiceDetail(InvoiceRead):
    customer: CustomerRead
    items: List[InvoiceItemRead] = []

# --- Live preview (form mirror of the server computation) ---

LooseNumber = Optional[Union[Decimal, str]]


class InvoiceItemDraft(CamelModel):
    previous_reading: LooseNumber = None
    current_reading: LooseNumber = None
    unit_price: LooseNumber = None
    price: LooseNumber = None


class InvoicePreviewRequest(CamelModel):
    items: List[InvoiceItemDraft] = []
    type: InvoiceType = InvoiceType.MONTHLY
    discount_percent: LooseNumber = None


class LinePreview(CamelModel):
    line_total: Decimal


class InvoicePreview(CamelModel):
    items: List[LinePreview]
    subtotal: Decimal
    discount_amount: Decimal
    total: Decimal
