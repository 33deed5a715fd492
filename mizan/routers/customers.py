# mizan/routers/customers.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from mizan.crud import customers as crud_customers
from mizan.database import get_db
from mizan.schemas.customers import (
    CustomerAccount,
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    CustomerWithStats,
    LastReading,
)
from mizan.templating import resolve_currency
from mizan.utils.pdf_generator import PdfGenerationError, generate_account_statement_pdf

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_customer_or_404(db: Session, customer_id: str):
    customer = crud_customers.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer

# --------------------------------------------------------------------------
# 1. LIST
# --------------------------------------------------------------------------
@router.get("", response_model=List[CustomerRead])
def get_customers(db: Session = Depends(get_db)):
    return crud_customers.get_customers(db)


@router.get("/with-stats", response_model=List[CustomerWithStats])
def get_customers_with_stats(db: Session = Depends(get_db)):
    """Customers with invoice count and invoiced amount, highest amount first."""
    return crud_customers.get_customers_with_stats(db)

# --------------------------------------------------------------------------
# 2. DETAIL
# --------------------------------------------------------------------------
@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: str, db: Session = Depends(get_db)):
    return _get_customer_or_404(db, customer_id)

# --------------------------------------------------------------------------
# 3. CREATE / UPDATE / DELETE
# --------------------------------------------------------------------------
@router.post("", response_model=CustomerRead, status_code=201)
def create_customer(customer_in: CustomerCreate, db: Session = Depends(get_db)):
    return crud_customers.create_customer(db, customer_in)


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(customer_id: str, customer_in: CustomerUpdate, db: Session = Depends(get_db)):
    customer = crud_customers.update_customer(db, customer_id, customer_in)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.delete("/{customer_id}")
def delete_customer(customer_id: str, db: Session = Depends(get_db)):
    _get_customer_or_404(db, customer_id)

    # Invoices keep a hard reference to their customer
    invoice_count = crud_customers.count_customer_invoices(db, customer_id)
    if invoice_count:
        raise HTTPException(
            status_code=400,
            detail=f"Customer has {invoice_count} invoice(s); delete them first",
        )

    crud_customers.delete_customer(db, customer_id)
    return {"message": "Customer deleted successfully"}

# --------------------------------------------------------------------------
# 4. METER / ACCOUNT STATEMENT
# --------------------------------------------------------------------------
@router.get("/{customer_id}/last-reading", response_model=LastReading)
def get_last_reading(customer_id: str, db: Session = Depends(get_db)):
    """Pre-fills the next commercial invoice with the last meter reading."""
    customer = _get_customer_or_404(db, customer_id)
    return crud_customers.get_last_reading(db, customer)


@router.get("/{customer_id}/account", response_model=CustomerAccount)
def get_customer_account(customer_id: str, db: Session = Depends(get_db)):
    customer = _get_customer_or_404(db, customer_id)
    return crud_customers.get_customer_account(db, customer)


@router.get("/{customer_id}/account/pdf")
def get_customer_account_pdf(customer_id: str, request: Request, db: Session = Depends(get_db)):
    customer = _get_customer_or_404(db, customer_id)
    account = crud_customers.get_customer_account(db, customer)

    try:
        pdf_content = generate_account_statement_pdf(account, resolve_currency(request))
    except PdfGenerationError:
        logger.exception("Statement PDF failed for customer %s", customer_id)
        raise HTTPException(status_code=500, detail="Failed to generate PDF")

    return Response(
        content=pdf_content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="statement-{customer.id}.pdf"'},
    )
