import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from mizan.config import settings
from mizan.crud import customers as crud_customers
from mizan.crud import invoices as crud_invoices
from mizan.crud import reports as crud_reports
from mizan.database import SessionLocal, engine, get_db
from mizan.models import Base, InvoiceType
from mizan.routers import customers, dashboard, invoices
from mizan.templating import CURRENCY_COOKIE, STATIC_DIR, resolve_currency, templates

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# 1. TABLES
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SEED_SAMPLE_DATA:
        from mizan.init_db import seed_sample_data

        db = SessionLocal()
        try:
            seed_sample_data(db)
        finally:
            db.close()
    yield


app = FastAPI(
    title="Mizan Accounting",
    description="Customers, invoices, meter billing and account statements",
    version="1.0.0",
    lifespan=lifespan,
)

# 2. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3. STATIC FILES
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# 4. API ROUTERS
app.include_router(customers.router, prefix="/api/customers", tags=["Customers"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["Invoices"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])


# --- 5. PAGES ---

def _render(request: Request, name: str, context: dict, status_code: int = 200):
    currency = resolve_currency(request)
    response = templates.TemplateResponse(
        request, name, {**context, "currency": currency}, status_code=status_code
    )
    if request.query_params.get("currency"):
        response.set_cookie(CURRENCY_COOKIE, currency)
    return response


@app.get("/", response_class=HTMLResponse)
def dashboard_page(request: Request, db: Session = Depends(get_db)):
    return _render(request, "dashboard.html", {
        "stats": crud_reports.get_dashboard_stats(db),
        "recent_invoices": crud_invoices.get_invoices(db)[:5],
        "top_customers": crud_customers.get_customers_with_stats(db)[:3],
    })


@app.get("/customers", response_class=HTMLResponse)
def customers_page(request: Request, db: Session = Depends(get_db)):
    return _render(request, "customers/list.html", {
        "customers": crud_customers.get_customers_with_stats(db),
    })


@app.get("/customers/new", response_class=HTMLResponse)
def new_customer_page(request: Request):
    return _render(request, "customers/form.html", {"customer": None})


@app.get("/customers/{customer_id}/edit", response_class=HTMLResponse)
def edit_customer_page(customer_id: str, request: Request, db: Session = Depends(get_db)):
    customer = crud_customers.get_customer(db, customer_id)
    if not customer:
        raise StarletteHTTPException(status_code=404)
    return _render(request, "customers/form.html", {"customer": customer})


@app.get("/customers/{customer_id}/account", response_class=HTMLResponse)
def customer_account_page(customer_id: str, request: Request, db: Session = Depends(get_db)):
    customer = crud_customers.get_customer(db, customer_id)
    if not customer:
        raise StarletteHTTPException(status_code=404)
    return _render(request, "customers/account.html", crud_customers.get_customer_account(db, customer))


@app.get("/invoices", response_class=HTMLResponse)
def invoices_page(request: Request, type: Optional[InvoiceType] = None, db: Session = Depends(get_db)):
    return _render(request, "invoices/list.html", {
        "invoices": crud_invoices.get_invoices(db, invoice_type=type),
        "invoice_type": type.value if type else None,
    })


@app.get("/invoices/new", response_class=HTMLResponse)
def new_invoice_page(
    request: Request,
    type: InvoiceType = InvoiceType.MONTHLY,
    customer_id: Optional[str] = Query(None, alias="customerId"),
    db: Session = Depends(get_db),
):
    return _render(request, "invoices/form.html", {
        "invoice_type": type.value,
        "customers": crud_customers.get_customers(db),
        "selected_customer_id": customer_id,
        "today": date.today().isoformat(),
    })


@app.get("/revenues", response_class=HTMLResponse)
def revenues_page(request: Request, db: Session = Depends(get_db)):
    return _render(request, "invoices/ledger.html", {
        "title": "الإيرادات",
        "invoice_type": InvoiceType.REVENUE.value,
        "invoices": crud_invoices.get_invoices(db, invoice_type=InvoiceType.REVENUE),
    })


@app.get("/expenses", response_class=HTMLResponse)
def expenses_page(request: Request, db: Session = Depends(get_db)):
    return _render(request, "invoices/ledger.html", {
        "title": "المصروفات",
        "invoice_type": InvoiceType.EXPENSE.value,
        "invoices": crud_invoices.get_invoices(db, invoice_type=InvoiceType.EXPENSE),
    })


# --- 6. ERROR HANDLING ---

def _invalid_data_message(path: str) -> str:
    if path.startswith("/api/customers"):
        return "Invalid customer data"
    if path.startswith("/api/invoices"):
        return "Invalid invoice data"
    return "Invalid request data"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "message": _invalid_data_message(request.url.path),
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # API calls get JSON; the browser gets the 404 page
    if exc.status_code == 404 and not request.url.path.startswith("/api/"):
        return _render(request, "404.html", {}, status_code=404)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
