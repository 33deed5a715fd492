from datetime import datetime

from sqlalchemy.orm import Session

from mizan.models import Invoice


def get_next_invoice_number(db: Session, prefix: str = "INV", year: int = None) -> str:
    """
    Next consecutive number for a prefix and year, e.g. INV-2024-004.
    Scans the existing numbers of that series and adds one to the highest.
    """
    year = year or datetime.now().year
    stem = f"{prefix}-{year}-"

    numbers = db.query(Invoice.number).filter(Invoice.number.like(f"{stem}%")).all()

    highest = 0
    for (number,) in numbers:
        suffix = number[len(stem):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))

    return f"{stem}{highest + 1:03d}"
