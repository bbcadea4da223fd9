"""
GST fiscal period calculator.

The Indian fiscal year runs from April 1 to March 31 of the following year.
Dates are built from calendar components and returned as ``YYYY-MM-DD``
strings, so no timezone conversion can shift them by a day.
"""
import calendar
from dataclasses import dataclass
from datetime import date
from typing import Union

from shopledger.error_handlers import InvalidPeriodError
from shopledger.schemas.common import parse_input
from shopledger.schemas.report import PeriodRequest

FISCAL_YEAR_START_MONTH = 4

# Q1 Apr-Jun, Q2 Jul-Sep, Q3 Oct-Dec, Q4 Jan-Mar (next calendar year)
QUARTER_START_MONTHS = {1: 4, 2: 7, 3: 10, 4: 1}


@dataclass(frozen=True)
class FiscalPeriod:
    start_date: str
    end_date: str

    def as_dates(self) -> tuple[date, date]:
        return date.fromisoformat(self.start_date), date.fromisoformat(self.end_date)


def _iso(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def _last_day(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def compute_period(request: Union[PeriodRequest, dict]) -> FiscalPeriod:
    """
    Turn a period selector into concrete start/end dates.

    Raises InvalidPeriodError for an unknown ``period_type`` or when the
    month/quarter it needs is missing or out of range.
    """
    request = parse_input(PeriodRequest, request, error_cls=InvalidPeriodError)
    period_type = request.period_type
    year = request.year

    if period_type == "year":
        return FiscalPeriod(_iso(year, 4, 1), _iso(year + 1, 3, 31))

    if period_type == "quarter" and request.quarter in QUARTER_START_MONTHS:
        start_month = QUARTER_START_MONTHS[request.quarter]
        start_year = year + 1 if request.quarter == 4 else year
        end_month = start_month + 2
        return FiscalPeriod(
            _iso(start_year, start_month, 1),
            _iso(start_year, end_month, _last_day(start_year, end_month)),
        )

    if period_type == "month" and request.month is not None and 1 <= request.month <= 12:
        return FiscalPeriod(
            _iso(year, request.month, 1),
            _iso(year, request.month, _last_day(year, request.month)),
        )

    raise InvalidPeriodError(
        "Invalid period parameters",
        errors=[{
            "field": "period_type",
            "message": f"cannot build a '{period_type}' period from the given selector",
            "type": "invalid_period",
        }]
    )


def fiscal_year_of(day: date) -> int:
    """Calendar year in which the fiscal year containing ``day`` starts."""
    return day.year if day.month >= FISCAL_YEAR_START_MONTH else day.year - 1
