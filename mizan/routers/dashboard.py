# mizan/routers/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mizan.crud import reports as crud_reports
from mizan.database import get_db
from mizan.schemas.reports import DashboardStats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(db: Session = Depends(get_db)):
    """Paid sales total, invoice counts by status and number of customers."""
    return crud_reports.get_dashboard_stats(db)
