"""
Weighted-average cost engine.

Every purchase blends into a single running per-unit cost:

    new_avg = (old_qty * old_avg + in_qty * in_rate) / (old_qty + in_qty)

The calculation is pure. Persisting the result is left to the caller so it
happens inside the same transaction as the purchase or adjustment.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from sqlalchemy.orm import Session

from shopledger.error_handlers import NotFoundError, ValidationError
from shopledger.models.product import Product

Number = Union[int, float, str, Decimal]

ZERO = Decimal("0")
STORED_PRECISION = Decimal("0.0001")


@dataclass(frozen=True)
class CostUpdate:
    new_average_cost: Decimal
    new_total_quantity: int


def _decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def weighted_average(
    old_qty: int,
    old_avg_cost: Number,
    incoming_qty: int,
    incoming_rate: Number,
) -> CostUpdate:
    """Blend an incoming quantity/rate into an existing quantity/average cost."""
    if incoming_qty < 0:
        raise ValidationError("Incoming quantity must not be negative", errors=[
            {"field": "quantity", "message": "must be >= 0", "type": "value_error"}
        ])
    if _decimal(incoming_rate) < ZERO:
        raise ValidationError("Incoming rate must not be negative", errors=[
            {"field": "rate", "message": "must be >= 0", "type": "value_error"}
        ])

    old_value = _decimal(old_qty) * _decimal(old_avg_cost)
    new_value = _decimal(incoming_qty) * _decimal(incoming_rate)
    new_total_quantity = old_qty + incoming_qty
    total_value = old_value + new_value

    if new_total_quantity == 0:
        # No stock left means no defined cost
        return CostUpdate(new_average_cost=ZERO, new_total_quantity=0)

    return CostUpdate(
        new_average_cost=total_value / _decimal(new_total_quantity),
        new_total_quantity=new_total_quantity,
    )


def recompute(product: Product, incoming_qty: int, incoming_rate: Number) -> CostUpdate:
    """Cost update for ``product`` receiving ``incoming_qty`` units at ``incoming_rate``."""
    old_qty = product.quantity if product.quantity is not None else 0
    old_avg_cost = (
        product.average_purchase_price if product.average_purchase_price is not None else ZERO
    )
    return weighted_average(old_qty, old_avg_cost, incoming_qty, incoming_rate)


def recompute_for_product(
    db: Session, product_id: int, incoming_qty: int, incoming_rate: Number
) -> CostUpdate:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return recompute(product, incoming_qty, incoming_rate)


def apply_cost_update(product: Product, update: CostUpdate) -> None:
    """Write a cost update onto the product, rounded to the stored precision."""
    product.quantity = update.new_total_quantity
    product.average_purchase_price = update.new_average_cost.quantize(
        STORED_PRECISION, rounding=ROUND_HALF_UP
    )
