# mizan/routers/invoices.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from mizan.crud import customers as crud_customers
from mizan.crud import invoices as crud_invoices
from mizan.database import get_db
from mizan.models import InvoiceStatus, InvoiceType
from mizan.schemas.invoices import (
    InvoiceCreateRequest,
    InvoiceDetail,
    InvoiceItemRead,
    InvoicePreview,
    InvoicePreviewRequest,
    InvoiceRead,
    InvoiceUpdate,
)
from mizan.templating import resolve_currency
from mizan.utils.billing import compute_invoice_totals
from mizan.utils.pdf_generator import PdfGenerationError, generate_invoice_pdf

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_invoice_or_404(db: Session, invoice_id: str):
    invoice = crud_invoices.get_invoice_with_details(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice

# --------------------------------------------------------------------------
# 1. LIST / PREVIEW
# --------------------------------------------------------------------------
@router.get("", response_model=List[InvoiceRead])
def get_invoices(
    type: Optional[InvoiceType] = None,
    status: Optional[InvoiceStatus] = None,
    customer_id: Optional[str] = Query(None, alias="customerId"),
    db: Session = Depends(get_db),
):
    """Newest first, optionally filtered by type, status or customer."""
    return crud_invoices.get_invoices(db, invoice_type=type, status=status, customer_id=customer_id)


@router.post("/preview", response_model=InvoicePreview)
def preview_invoice(preview_in: InvoicePreviewRequest):
    """Totals for an unsaved invoice form, computed exactly as on save."""
    discount_percent = preview_in.discount_percent
    if preview_in.type == InvoiceType.PAYMENT:
        discount_percent = None

    totals = compute_invoice_totals(preview_in.items, preview_in.type, discount_percent)
    return {
        "items": [{"line_total": line} for line in totals["line_totals"]],
        "subtotal": totals["subtotal"],
        "discount_amount": totals["discount_amount"],
        "total": totals["total"],
    }

# --------------------------------------------------------------------------
# 2. DETAIL
# --------------------------------------------------------------------------
@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(invoice_id: str, db: Session = Depends(get_db)):
    return _get_invoice_or_404(db, invoice_id)


@router.get("/{invoice_id}/items", response_model=List[InvoiceItemRead])
def get_invoice_items(invoice_id: str, db: Session = Depends(get_db)):
    if not crud_invoices.get_invoice(db, invoice_id):
        raise HTTPException(status_code=404, detail="Invoice not found")
    return crud_invoices.get_invoice_items(db, invoice_id)


@router.get("/{invoice_id}/pdf")
def get_invoice_pdf(invoice_id: str, request: Request, db: Session = Depends(get_db)):
    invoice = _get_invoice_or_404(db, invoice_id)

    try:
        pdf_content = generate_invoice_pdf(invoice, resolve_currency(request))
    except PdfGenerationError:
        logger.exception("Invoice PDF failed for %s", invoice.number)
        raise HTTPException(status_code=500, detail="Failed to generate PDF")

    return Response(
        content=pdf_content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{invoice.number}.pdf"'},
    )

# --------------------------------------------------------------------------
# 3. CREATE
# --------------------------------------------------------------------------
@router.post("", response_model=InvoiceDetail, status_code=201)
def create_invoice(payload: InvoiceCreateRequest, db: Session = Depends(get_db)):
    """
    Creates the invoice with its items and posts it to the customer's
    balance. With ``isPayment`` a paid revenue entry crediting the same
    customer is recorded as well.

    Unknown customers are rejected here with 400 even though
    ``crud_invoices.create_invoice`` tolerates them (it logs and skips the
    balance): the response embeds the customer and could not be built.
    """
    invoice_in = payload.invoice

    if not crud_customers.get_customer(db, invoice_in.customer_id):
        raise HTTPException(status_code=400, detail="Customer does not exist")

    if invoice_in.number and crud_invoices.get_invoice_by_number(db, invoice_in.number):
        raise HTTPException(status_code=400, detail=f"Invoice number {invoice_in.number} already exists")

    invoice = crud_invoices.create_invoice(
        db,
        invoice_in,
        payload.items,
        is_payment=payload.is_payment,
        discount_percent=payload.discount_percent,
    )
    return invoice

# --------------------------------------------------------------------------
# 4. UPDATE / DELETE
# --------------------------------------------------------------------------
@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice(invoice_id: str, invoice_in: InvoiceUpdate, db: Session = Depends(get_db)):
    """Header fields only; amounts already posted to the balance stay as they are."""
    if invoice_in.number:
        existing = crud_invoices.get_invoice_by_number(db, invoice_in.number)
        if existing and existing.id != invoice_id:
            raise HTTPException(status_code=400, detail=f"Invoice number {invoice_in.number} already exists")

    invoice = crud_invoices.update_invoice(db, invoice_id, invoice_in)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: str, db: Session = Depends(get_db)):
    if not crud_invoices.delete_invoice(db, invoice_id):
        raise HTTPException(status_code=404, detail="Invoice not found")
    return {"message": "Invoice deleted successfully"}
