"""Tests for the weighted-average cost engine."""
import pytest
from decimal import Decimal

from shopledger.error_handlers import NotFoundError, ValidationError
from shopledger.inventory.costing import (
    CostUpdate,
    apply_cost_update,
    recompute,
    recompute_for_product,
    weighted_average,
)
from shopledger.models import Product


class TestWeightedAverage:
    """Tests for the pure weighted-average calculation."""

    def test_blends_purchase_into_existing_average(self):
        """Test 10 units @ 20 plus 5 units @ 50 averages to 30."""
        result = weighted_average(10, Decimal("20"), 5, Decimal("50"))

        assert result.new_total_quantity == 15
        assert result.new_average_cost == Decimal("30")

    def test_first_purchase_sets_the_rate(self):
        """Test that a product with no stock takes the purchase rate as its cost."""
        result = weighted_average(0, 0, 12, "8.75")

        assert result == CostUpdate(new_average_cost=Decimal("8.75"), new_total_quantity=12)

    def test_zero_total_quantity_returns_zero_cost(self):
        """Test that no stock and no purchase gives exactly {0, 0}."""
        result = weighted_average(0, Decimal("99"), 0, Decimal("10"))

        assert result.new_average_cost == Decimal("0")
        assert result.new_total_quantity == 0

    def test_zero_quantity_purchase_is_pass_through(self):
        """Test that receiving nothing leaves quantity and cost unchanged."""
        result = weighted_average(10, Decimal("20"), 0, Decimal("500"))

        assert result.new_total_quantity == 10
        assert result.new_average_cost == Decimal("20")

    @pytest.mark.parametrize("old_qty,old_avg,in_qty,in_rate", [
        (1, "10", 2, "13"),
        (7, "3.3333", 11, "4.1"),
        (250, "0", 3, "199.99"),
        (0, "0", 1, "0.01"),
    ])
    def test_matches_formula(self, old_qty, old_avg, in_qty, in_rate):
        """Test the result against (oldQty*oldAvg + inQty*inRate) / total."""
        result = weighted_average(old_qty, old_avg, in_qty, in_rate)

        total = old_qty + in_qty
        expected = (Decimal(old_qty) * Decimal(old_avg) + Decimal(in_qty) * Decimal(in_rate)) / Decimal(total)
        assert result.new_total_quantity == total
        assert result.new_average_cost == expected

    def test_float_inputs_do_not_leak_binary_error(self):
        """Test that float rates are converted through their string form."""
        result = weighted_average(1, 0.1, 1, 0.2)

        assert result.new_average_cost == Decimal("0.15")

    def test_negative_quantity_rejected(self):
        """Test that a negative incoming quantity is a validation error."""
        with pytest.raises(ValidationError):
            weighted_average(10, Decimal("20"), -1, Decimal("5"))

    def test_negative_rate_rejected(self):
        """Test that a negative incoming rate is a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            weighted_average(10, Decimal("20"), 1, Decimal("-5"))

        assert exc_info.value.status_code == 422


class TestRecompute:
    """Tests for recomputing against product state."""

    def test_reads_product_state(self):
        """Test that recompute uses the product's quantity and average cost."""
        product = Product(name="Sugar 1kg", product_code="SUG-1", quantity=10,
                          average_purchase_price=Decimal("20"))

        result = recompute(product, 5, Decimal("50"))

        assert result.new_average_cost == Decimal("30")
        assert result.new_total_quantity == 15

    def test_missing_state_defaults_to_zero(self):
        """Test that an unsaved product without quantity or cost counts as empty."""
        product = Product(name="Salt 1kg", product_code="SALT-1")

        result = recompute(product, 4, Decimal("9"))

        assert result.new_total_quantity == 4
        assert result.new_average_cost == Decimal("9")

    def test_recompute_is_pure(self):
        """Test that recompute does not modify the product."""
        product = Product(name="Tea 250g", product_code="TEA-250", quantity=10,
                          average_purchase_price=Decimal("20"))

        recompute(product, 5, Decimal("50"))

        assert product.quantity == 10
        assert product.average_purchase_price == Decimal("20")

    def test_recompute_for_product_loads_from_db(self, test_db, rice):
        """Test recomputing by product id."""
        result = recompute_for_product(test_db, rice.id, 5, Decimal("50"))

        assert result.new_total_quantity == 15
        assert result.new_average_cost == Decimal("30")

    def test_recompute_for_unknown_product(self, test_db):
        """Test that an unknown product id raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            recompute_for_product(test_db, 999, 1, Decimal("1"))

        assert exc_info.value.status_code == 404


class TestApplyCostUpdate:
    """Tests for writing a cost update onto a product."""

    def test_rounds_to_four_places(self):
        """Test that the stored average is rounded half-up to 4 decimals."""
        product = Product(name="Oil 1L", product_code="OIL-1", quantity=2,
                          average_purchase_price=Decimal("10"))

        apply_cost_update(product, recompute(product, 1, Decimal("11")))

        assert product.quantity == 3
        assert product.average_purchase_price == Decimal("10.3333")

    def test_zero_update_clears_cost(self):
        """Test applying an empty-stock update."""
        product = Product(name="Dal 1kg", product_code="DAL-1", quantity=0,
                          average_purchase_price=Decimal("0"))

        apply_cost_update(product, CostUpdate(Decimal("0"), 0))

        assert product.quantity == 0
        assert product.average_purchase_price == Decimal("0.0000")
