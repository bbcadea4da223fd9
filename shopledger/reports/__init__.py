"""
GST period helpers and stock reports.
"""
from shopledger.reports.date_filters import DateFilter, build_date_filter, date_range_filter
from shopledger.reports.periods import FiscalPeriod, compute_period, fiscal_year_of
from shopledger.reports.queries import (
    adjustment_summary,
    inventory_valuation,
    list_transactions,
    period_stock_summary,
)

__all__ = [
    "DateFilter",
    "build_date_filter",
    "date_range_filter",
    "FiscalPeriod",
    "compute_period",
    "fiscal_year_of",
    "adjustment_summary",
    "inventory_valuation",
    "list_transactions",
    "period_stock_summary",
]
