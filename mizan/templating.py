from datetime import datetime, timezone
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from mizan.config import settings
from mizan.utils.formatting import (
    CURRENCIES,
    currency_info,
    format_amount,
    format_date_ar,
    status_label,
    to_arabic_digits,
    type_label,
)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

CURRENCY_COOKIE = "selected-currency"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

templates.env.filters["amount"] = format_amount
templates.env.filters["date_ar"] = format_date_ar
templates.env.filters["status_label"] = status_label
templates.env.filters["type_label"] = type_label
templates.env.filters["arabic_digits"] = to_arabic_digits
templates.env.globals["app_name"] = settings.APP_NAME
templates.env.globals["currencies"] = CURRENCIES
templates.env.globals["now"] = lambda: datetime.now(timezone.utc)


def resolve_currency(request: Request) -> str:
    """Display currency: ?currency=, then the cookie, then the configured default."""
    code = request.query_params.get("currency") or request.cookies.get(CURRENCY_COOKIE) or settings.CURRENCY
    return currency_info(code)["code"]
