"""
Invoice arithmetic shared by the API, the repository layer and the browser
form preview.

Every function here is pure except ``apply_invoice_to_customer_balance``,
which mutates the customer it is given. Unparsable numeric input is read as
zero instead of raising.
"""
import logging
import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

# Inputs at or beyond this magnitude are read like unparsable text
MAX_INPUT = Decimal("1e15")
# Enough digits for a product of two bounded inputs plus the cents
MONEY_PRECISION = 60

# Invoice types that move the customer's balance when created
DEBIT_TYPES = ("monthly", "commercial")
CREDIT_TYPES = ("revenue",)

_LEADING_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _parse_decimal(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        number = Decimal(str(value))
        return number if number.is_finite() else None

    text = str(value).replace(",", "").strip()
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def to_decimal(value, default: Decimal = ZERO) -> Decimal:
    """
    Lenient numeric parsing for form and JSON input.

    Accepts Decimal, int, float and strings. Thousands separators are
    ignored and only the leading numeric part of a string is read
    ("12.5kg" -> 12.5). Anything else, including values of ``MAX_INPUT``
    or more in magnitude, yields ``default``.
    """
    number = _parse_decimal(value)
    if number is None or abs(number) >= MAX_INPUT:
        return default
    return number


def quantize(amount) -> Decimal:
    """Round half-up to cents. Results too large to represent become zero."""
    number = _parse_decimal(amount)
    if number is None:
        return ZERO
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        try:
            return number.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            logger.warning("Amount %s is out of range; read as zero", number)
            return ZERO


def money_str(amount) -> str:
    """Fixed two-decimal string, e.g. ``"135.00"``."""
    return str(quantize(amount))


def _type_value(invoice_type) -> str:
    return getattr(invoice_type, "value", invoice_type) or ""


def _field(item, snake: str, camel: str):
    if isinstance(item, Mapping):
        value = item.get(snake)
        return item.get(camel) if value is None else value
    return getattr(item, snake, None)


def compute_line_total(item, invoice_type) -> Decimal:
    """
    Price of a single invoice line.

    On commercial invoices the price is derived from the meter readings,
    (current - previous) * unit_price, whenever previous >= 0, current > 0,
    unit_price > 0 and current >= previous. In every other case the
    manually entered price is returned as-is.
    """
    if _type_value(invoice_type) == "commercial":
        previous = to_decimal(_field(item, "previous_reading", "previousReading"))
        current = to_decimal(_field(item, "current_reading", "currentReading"))
        unit_price = to_decimal(_field(item, "unit_price", "unitPrice"))

        if previous >= 0 and current > 0 and unit_price > 0 and current >= previous:
            return quantize((current - previous) * unit_price)

    return to_decimal(_field(item, "price", "price"))


def compute_invoice_totals(items, invoice_type, discount_percent=None) -> dict:
    """
    Subtotal, percentage discount and grand total for a list of lines.

    Returns a dict with ``line_totals``, ``subtotal``, ``discount_amount``
    and ``total``; money values are Decimals rounded half-up to 2 places
    and ``total == subtotal - discount_amount`` always holds.
    """
    line_totals = [compute_line_total(item, invoice_type) for item in items or []]

    subtotal = quantize(sum(line_totals, ZERO))
    percent = to_decimal(discount_percent)
    discount_amount = quantize(subtotal * percent / HUNDRED)

    return {
        "line_totals": [quantize(line) for line in line_totals],
        "subtotal": subtotal,
        "discount_amount": discount_amount,
        "total": subtotal - discount_amount,
    }


def adjust_balance(balance, invoice_type, amount) -> Decimal:
    """New balance after posting an invoice of ``invoice_type`` for ``amount``."""
    current = to_decimal(balance)
    amount = to_decimal(amount)
    kind = _type_value(invoice_type)

    if kind in DEBIT_TYPES:
        return quantize(current + amount)
    if kind in CREDIT_TYPES:
        # Overpayments are absorbed; the balance never becomes a credit.
        return quantize(max(ZERO, current - amount))
    return quantize(current)


def apply_invoice_to_customer_balance(customer, invoice):
    """
    Post a freshly created invoice to its customer's running balance.

    Monthly and commercial invoices increase what the customer owes,
    revenue entries reduce it down to zero at most, and every other type
    leaves it untouched. A missing customer is a no-op.
    """
    kind = _type_value(getattr(invoice, "type", None))

    if customer is None:
        logger.warning(
            "Invoice %s references unknown customer %s; balance not adjusted",
            getattr(invoice, "number", None), getattr(invoice, "customer_id", None),
        )
        return None

    if kind not in DEBIT_TYPES and kind not in CREDIT_TYPES:
        return customer

    before = to_decimal(customer.balance)
    customer.balance = adjust_balance(before, kind, invoice.total)
    logger.info(
        "Customer %s balance %s -> %s (%s invoice %s)",
        customer.id, money_str(before), money_str(customer.balance),
        kind, getattr(invoice, "number", None),
    )
    return customer
