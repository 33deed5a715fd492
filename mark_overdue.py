import logging

from mizan.config import settings
from mizan.crud.invoices import mark_overdue_invoices
from mizan.database import SessionLocal

logger = logging.getLogger("mark_overdue")


def run():
    db = SessionLocal()
    try:
        logger.info("--- Marking overdue invoices ---")
        count = mark_overdue_invoices(db)
        logger.info("--- %s invoice(s) now overdue ---", count)
    except Exception:
        logger.exception("Overdue sweep failed")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(message)s")
    run()
