# mizan/utils/formatting.py
"""Arabic-locale display helpers used by the templates and PDF exports."""
import re
from datetime import date, datetime

from mizan.utils.billing import quantize

CURRENCIES = {
    "YER": {"code": "YER", "symbol": "﷼", "name": "Yemeni Rial", "name_ar": "الريال اليمني"},
    "SAR": {"code": "SAR", "symbol": "﷼", "name": "Saudi Riyal", "name_ar": "الريال السعودي"},
    "USD": {"code": "USD", "symbol": "$", "name": "US Dollar", "name_ar": "الدولار الأمريكي"},
}
DEFAULT_CURRENCY = "YER"

STATUS_LABELS = {
    "paid": "مدفوعة",
    "pending": "معلقة",
    "overdue": "متأخرة",
}

TYPE_LABELS = {
    "monthly": "فاتورة شهرية",
    "commercial": "فاتورة عداد تجاري",
    "statement": "كشف حساب",
    "revenue": "إيراد",
    "expense": "مصروف",
    "payment": "سداد",
}

_ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")
_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")


def currency_info(code: str) -> dict:
    return CURRENCIES.get((code or "").upper(), CURRENCIES[DEFAULT_CURRENCY])


def format_amount(amount, currency: str = DEFAULT_CURRENCY) -> str:
    """Symbol followed by the amount with thousands separators and 2 decimals."""
    return f"{currency_info(currency)['symbol']}{quantize(amount):,.2f}"


def format_number_input(value: str) -> str:
    """Insert thousands separators while the user types ("1234.5" -> "1,234.5")."""
    clean = re.sub(r"[^\d.]", "", value or "")
    parts = clean.split(".")
    parts[0] = _THOUSANDS.sub(",", parts[0])
    if len(parts) > 2:
        return parts[0] + "." + parts[1]
    return ".".join(parts)


def parse_formatted_number(value: str) -> str:
    return (value or "").replace(",", "")


def to_arabic_digits(text) -> str:
    return str(text).translate(_ARABIC_DIGITS)


def format_date_ar(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, (date, datetime)):
        return str(value)
    return to_arabic_digits(value.strftime("%d/%m/%Y"))


def status_label(status) -> str:
    status = getattr(status, "value", status)
    return STATUS_LABELS.get(status, status or "")


def type_label(invoice_type) -> str:
    invoice_type = getattr(invoice_type, "value", invoice_type)
    return TYPE_LABELS.get(invoice_type, invoice_type or "")
