from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from mizan.schemas.common import CamelModel, blank_to_none

# --- BASE ---

class CustomerBase(CamelModel):
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    meter_number: Optional[str] = None   # commercial meter

    @field_validator("email", "phone", "address", "meter_number", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value)

# --- CREATE ---
# balance is not accepted: every customer starts at zero
class CustomerCreate(CustomerBase):
    pass

# --- UPDATE (partial) ---
class CustomerUpdate(CustomerBase):
    name: Optional[str] = Field(None, min_length=1)

# --- READ ---
class CustomerRead(CustomerBase):
    id: str
    balance: Decimal = Decimal("0.00")
    created_at: Optional[datetime] = None


class CustomerWithStats(CustomerRead):
    total_invoices: int
    total_amount: Decimal
    account_balance: Decimal


class LastReading(CamelModel):
    meter_number: Optional[str] = None
    previous_reading: Optional[Decimal] = None

# --- ACCOUNT STATEMENT ---

class AccountTransaction(CamelModel):
    id: str
    type: str               # debit = customer owes more, credit = payment received
    entry_number: int
    amount: Decimal
    description: str
    document_number: Optional[str] = None
    date: datetime
    invoice_number: str


class AccountTotals(CamelModel):
    total_debit: Decimal
    total_credit: Decimal
    current_balance: Decimal


class CustomerAccount(CamelModel):
    customer: CustomerRead
    transactions: List[AccountTransaction]
    totals: AccountTotals
