# =========================================================
# REPORTS ROUTER
#
# - /summary: revenue, profit, inventory value, capital
# - /daily:   revenue and profit for one calendar day
#
# Figures are recomputed from the user's rows on every call
# =========================================================

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date, datetime, timezone
from typing import Optional

from stockbook.database import get_db
from stockbook.core.auth import get_current_user
from stockbook.services import ledger, metrics
from stockbook.services import sales as sales_service
from stockbook.schemas.report import (
    SummaryReportResponse,
    DailyReportResponse,
)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/summary", response_model=SummaryReportResponse)
def summary_report(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    products = ledger.list_products(db, current_user.id)
    sales = sales_service.list_sales(db, current_user.id)

    return metrics.summarize(products, sales)


@router.get("/daily", response_model=DailyReportResponse)
def daily_report(
    day: Optional[date] = Query(None, description="Calendar day, defaults to today (UTC)"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    day = day or datetime.now(timezone.utc).date()
    sales = sales_service.list_sales(db, current_user.id)

    return metrics.summarize_day(sales, day)
