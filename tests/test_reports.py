"""Tests for stock reports."""
import pytest
from datetime import datetime
from decimal import Decimal
from freezegun import freeze_time

from shopledger.error_handlers import InvalidPeriodError
from shopledger.inventory.stock import adjust_stock, issue_sale, receive_purchase, return_sale
from shopledger.reports.queries import (
    adjustment_summary,
    inventory_valuation,
    list_transactions,
    period_stock_summary,
)


@pytest.fixture
def movements(test_db, rice, paracetamol):
    """Stock movements spread over fiscal year 2024 and 2025."""
    with freeze_time("2024-05-10 11:00:00"):
        receive_purchase(test_db, {"productId": 1, "quantity": 5, "rate": 50})
    with freeze_time("2025-01-20 16:30:00"):
        issue_sale(test_db, {"productId": 1, "quantity": 3})
        return_sale(test_db, {"productId": 1, "quantity": 1})
    with freeze_time("2025-03-31 21:00:00"):
        adjust_stock(test_db, {"productId": 1, "adjustment": -2, "category": "Damaged"})
        adjust_stock(test_db, {"productId": 2, "adjustment": 4, "category": "Stocktaking"})
    with freeze_time("2025-04-01 09:00:00"):
        receive_purchase(test_db, {"productId": 2, "quantity": 10, "rate": "11.25"})
        adjust_stock(test_db, {"productId": 2, "adjustment": -1, "category": "Damaged"})


class TestPeriodStockSummary:
    """Tests for GST period movement totals."""

    def test_fiscal_year_totals(self, test_db, movements):
        """Test totals for April 2024 to March 2025."""
        summary = period_stock_summary(test_db, {"periodType": "year", "year": 2024})

        assert summary.start_date == "2024-04-01"
        assert summary.end_date == "2025-03-31"
        assert summary.purchased_quantity == 5
        assert summary.purchased_value == Decimal("250.00")
        assert summary.sold_quantity == 3
        assert summary.returned_quantity == 1
        assert summary.adjusted_quantity == 2
        assert summary.transaction_count == 5

    def test_quarter_excludes_neighbouring_days(self, test_db, movements):
        """Test that Q1 of 2025 starts exactly on April 1."""
        summary = period_stock_summary(test_db, {"periodType": "quarter", "year": 2025, "quarter": 1})

        assert summary.purchased_quantity == 10
        assert summary.purchased_value == Decimal("112.50")
        assert summary.adjusted_quantity == -1
        assert summary.sold_quantity == 0
        assert summary.transaction_count == 2

    def test_q4_rolls_into_next_calendar_year(self, test_db, movements):
        """Test that Q4 of fiscal 2024 covers January to March 2025."""
        summary = period_stock_summary(test_db, {"periodType": "quarter", "year": 2024, "quarter": 4})

        assert summary.start_date == "2025-01-01"
        assert summary.sold_quantity == 3
        assert summary.transaction_count == 4

    def test_empty_period(self, test_db, movements):
        """Test a month with no movements."""
        summary = period_stock_summary(test_db, {"periodType": "month", "year": 2024, "month": 8})

        assert summary.transaction_count == 0
        assert summary.purchased_value == Decimal("0.00")

    def test_invalid_period(self, test_db):
        """Test that an invalid selector is rejected before querying."""
        with pytest.raises(InvalidPeriodError):
            period_stock_summary(test_db, {"periodType": "quarter", "year": 2024})


class TestListTransactions:
    """Tests for listing stock movements."""

    def test_custom_range_newest_first(self, test_db, movements):
        """Test an inclusive date range."""
        rows = list_transactions(test_db, {"from": "2025-01-20", "to": "2025-03-31"})

        assert [r.transaction_type for r in rows] == [
            "adjustment", "adjustment", "sale_return", "sale"
        ]

    def test_filter_by_product(self, test_db, movements):
        """Test narrowing to one product."""
        rows = list_transactions(test_db, {}, product_id=2)

        assert {r.product_id for r in rows} == {2}
        assert len(rows) == 3

    def test_filter_by_type(self, test_db, movements):
        """Test narrowing to one movement type."""
        rows = list_transactions(test_db, None, transaction_type="purchase")

        assert len(rows) == 2

    @freeze_time("2025-04-01 18:00:00")
    def test_today(self, test_db, movements):
        """Test the 'today' shortcut."""
        rows = list_transactions(test_db, {"filter": "today"})

        assert len(rows) == 2
        assert all(r.created_at.date() == datetime(2025, 4, 1).date() for r in rows)

    @freeze_time("2025-01-31")
    def test_this_month(self, test_db, movements):
        """Test the 'month' shortcut."""
        rows = list_transactions(test_db, {"filter": "month"})

        assert [r.transaction_type for r in rows] == ["sale_return", "sale"]


class TestAdjustmentSummary:
    """Tests for the adjustment breakdown."""

    def test_breakdown_by_category(self, test_db, movements):
        """Test net quantity per adjustment category."""
        summary = adjustment_summary(test_db)

        assert summary.total_quantity == 1
        by_category = {row.category: row for row in summary.breakdown}
        assert by_category["Damaged"].count == 2
        assert by_category["Damaged"].quantity_change == -3
        assert by_category["Stocktaking"].quantity_change == 4

    def test_breakdown_within_range(self, test_db, movements):
        """Test that the date filter applies to adjustments."""
        summary = adjustment_summary(test_db, {"from": "2025-04-01", "to": "2025-04-30"})

        assert summary.total_quantity == -1
        assert [row.category for row in summary.breakdown] == ["Damaged"]


class TestInventoryValuation:
    """Tests for valuing stock at weighted-average cost."""

    def test_values_stock_on_hand(self, test_db, sample_products):
        """Test quantity times average cost across products."""
        valuation = inventory_valuation(test_db)

        # 10 * 20 + 50 * 12.5 + 3 * 15000
        assert valuation.stock_value_cost == Decimal("45825.00")
        assert valuation.total_products == 3
        assert valuation.total_quantity == 63
        assert valuation.low_stock_count == 0
        assert valuation.out_of_stock_count == 0

    def test_low_and_out_of_stock_counts(self, test_db, sample_products):
        """Test products at or below their threshold."""
        issue_sale(test_db, {"productId": 1, "quantity": 6})
        issue_sale(test_db, {"productId": 3, "quantity": 3})

        valuation = inventory_valuation(test_db)

        assert valuation.low_stock_count == 1
        assert valuation.out_of_stock_count == 1
        assert valuation.stock_value_cost == Decimal("705.00")
