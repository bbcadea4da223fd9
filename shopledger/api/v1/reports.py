"""
Report API endpoints: GST period totals, movement listings and valuation.
"""
from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shopledger.core.database import get_db
from shopledger.reports import queries
from shopledger.reports.periods import compute_period, fiscal_year_of
from shopledger.schemas.report import (
    AdjustmentSummary,
    FiscalPeriodResponse,
    InventoryValuation,
    PeriodStockSummary,
)
from shopledger.schemas.stock import StockTransactionResponse

router = APIRouter(prefix="/reports", tags=["Reports"])


def _date_filter(
    filter: Optional[str] = Query(None, description="'today' or 'month'"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
) -> dict:
    return {"filter": filter, "from": date_from, "to": date_to}


def _period_selector(
    period_type: str = Query(..., alias="periodType"),
    year: Optional[int] = Query(None, description="Defaults to the current (fiscal) year"),
    month: Optional[int] = Query(None),
    quarter: Optional[int] = Query(None),
) -> dict:
    if year is None:
        today = date.today()
        # Months are picked by calendar year, years and quarters by fiscal year
        year = today.year if period_type == "month" else fiscal_year_of(today)
    return {"period_type": period_type, "year": year, "month": month, "quarter": quarter}


@router.get("/fiscal-period", response_model=FiscalPeriodResponse)
def get_fiscal_period(selector: dict = Depends(_period_selector)):
    """Start and end dates of a GST year, quarter or month."""
    period = compute_period(selector)
    return FiscalPeriodResponse(start_date=period.start_date, end_date=period.end_date)


@router.get("/period", response_model=PeriodStockSummary)
def get_period_summary(
    selector: dict = Depends(_period_selector),
    db: Session = Depends(get_db)
):
    """
    Stock movement totals for a GST period.

    - **periodType**: year, quarter or month
    - **year**: Fiscal year start (2025 means April 2025 to March 2026)
    - **quarter** / **month**: Required for the matching period type
    """
    return queries.period_stock_summary(db, selector)


@router.get("/transactions", response_model=list[StockTransactionResponse])
def list_transactions(
    date_filter: dict = Depends(_date_filter),
    product_id: Optional[int] = Query(None, alias="productId"),
    transaction_type: Optional[str] = Query(None, alias="type"),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    """Stock movements, newest first."""
    return queries.list_transactions(
        db,
        date_filter,
        product_id=product_id,
        transaction_type=transaction_type,
        limit=limit,
    )


@router.get("/adjustments", response_model=AdjustmentSummary)
def get_adjustment_summary(
    date_filter: dict = Depends(_date_filter),
    db: Session = Depends(get_db)
):
    """Net adjustments with a per-category breakdown."""
    return queries.adjustment_summary(db, date_filter)


@router.get("/valuation", response_model=InventoryValuation)
def get_inventory_valuation(db: Session = Depends(get_db)):
    """Stock on hand valued at weighted-average cost."""
    return queries.inventory_valuation(db)
