"""Tests for GST fiscal period calculation."""
import pytest
from datetime import date

from shopledger.error_handlers import InvalidPeriodError, ValidationError
from shopledger.reports.periods import FiscalPeriod, compute_period, fiscal_year_of
from shopledger.schemas.report import PeriodRequest


class TestComputePeriod:
    """Tests for year, quarter and month periods."""

    def test_fiscal_year_runs_april_to_march(self):
        """Test a full fiscal year."""
        period = compute_period({"periodType": "year", "year": 2024})

        assert period == FiscalPeriod("2024-04-01", "2025-03-31")

    @pytest.mark.parametrize("quarter,start,end", [
        (1, "2025-04-01", "2025-06-30"),
        (2, "2025-07-01", "2025-09-30"),
        (3, "2025-10-01", "2025-12-31"),
        (4, "2026-01-01", "2026-03-31"),
    ])
    def test_quarters(self, quarter, start, end):
        """Test each quarter of fiscal year 2025, Q4 falling in 2026."""
        period = compute_period({"periodType": "quarter", "year": 2025, "quarter": quarter})

        assert period.start_date == start
        assert period.end_date == end

    def test_month_in_leap_year(self):
        """Test that February 2024 ends on the 29th."""
        period = compute_period({"periodType": "month", "year": 2024, "month": 2})

        assert period.start_date == "2024-02-01"
        assert period.end_date == "2024-02-29"

    def test_month_in_common_year(self):
        """Test that February 2025 ends on the 28th."""
        period = compute_period({"period_type": "month", "year": 2025, "month": 2})

        assert period.end_date == "2025-02-28"

    @pytest.mark.parametrize("month,last_day", [(1, 31), (4, 30), (12, 31)])
    def test_month_lengths(self, month, last_day):
        """Test the last day of months with 30 and 31 days."""
        period = compute_period({"periodType": "month", "year": 2023, "month": month})

        assert period.end_date == f"2023-{month:02d}-{last_day}"

    def test_accepts_request_model(self):
        """Test passing an already validated request."""
        request = PeriodRequest(period_type="quarter", year=2023, quarter=4)

        assert compute_period(request) == FiscalPeriod("2024-01-01", "2024-03-31")

    def test_as_dates(self):
        """Test converting a period to date objects."""
        start, end = compute_period({"periodType": "year", "year": 2025}).as_dates()

        assert start == date(2025, 4, 1)
        assert end == date(2026, 3, 31)

    @pytest.mark.parametrize("selector", [
        {"periodType": "week", "year": 2025},
        {"periodType": "quarter", "year": 2025},
        {"periodType": "quarter", "year": 2025, "quarter": 5},
        {"periodType": "month", "year": 2025},
        {"periodType": "month", "year": 2025, "month": 13},
        {"periodType": "month", "year": 2025, "month": 0},
    ])
    def test_invalid_selectors(self, selector):
        """Test that unusable selectors raise InvalidPeriodError."""
        with pytest.raises(InvalidPeriodError):
            compute_period(selector)

    def test_malformed_payload_is_invalid_period(self):
        """Test that schema failures also surface as InvalidPeriodError."""
        with pytest.raises(InvalidPeriodError) as exc_info:
            compute_period({"periodType": "year"})

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.status_code == 422


class TestFiscalYearOf:
    """Tests for finding the fiscal year of a date."""

    @pytest.mark.parametrize("day,expected", [
        (date(2025, 4, 1), 2025),
        (date(2025, 12, 31), 2025),
        (date(2026, 1, 1), 2025),
        (date(2026, 3, 31), 2025),
    ])
    def test_fiscal_year_boundaries(self, day, expected):
        """Test dates on either side of the April 1 boundary."""
        assert fiscal_year_of(day) == expected
