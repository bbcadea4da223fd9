"""
Report queries over stock movements and current stock.
"""
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopledger.models.product import Product
from shopledger.models.stock import (
    StockTransaction, TX_ADJUSTMENT, TX_PURCHASE, TX_SALE, TX_SALE_RETURN
)
from shopledger.reports.date_filters import build_date_filter, date_range_filter
from shopledger.reports.periods import compute_period
from shopledger.schemas.common import parse_input
from shopledger.schemas.report import (
    AdjustmentCategoryTotal,
    AdjustmentSummary,
    DateFilterRequest,
    InventoryValuation,
    PeriodRequest,
    PeriodStockSummary,
)

MOVEMENT_TYPES = (TX_PURCHASE, TX_SALE, TX_SALE_RETURN, TX_ADJUSTMENT)


def _as_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _transactions_filter(request: Union[DateFilterRequest, dict, None]):
    """Date filter bound to the stock_transactions table."""
    request = parse_input(DateFilterRequest, request or {})
    request = request.model_copy(update={"column_alias": StockTransaction.__tablename__})
    return build_date_filter(request).as_clause()


def period_stock_summary(db: Session, request: Union[PeriodRequest, dict]) -> PeriodStockSummary:
    """Purchase, sale, return and adjustment totals within a GST period."""
    period = compute_period(request)
    start, end = period.as_dates()
    clause = date_range_filter(start, end, StockTransaction.__tablename__).as_clause()

    rows = db.execute(
        select(
            StockTransaction.transaction_type,
            func.count(StockTransaction.id),
            func.coalesce(func.sum(StockTransaction.quantity), 0),
            func.sum(StockTransaction.quantity * StockTransaction.unit_cost),
        )
        .where(clause, StockTransaction.transaction_type.in_(MOVEMENT_TYPES))
        .group_by(StockTransaction.transaction_type)
    ).all()
    totals = {row[0]: row for row in rows}

    def quantity(tx_type: str) -> int:
        return int(totals[tx_type][2]) if tx_type in totals else 0

    purchased_value = _as_decimal(totals[TX_PURCHASE][3]) if TX_PURCHASE in totals else Decimal("0")

    return PeriodStockSummary(
        start_date=period.start_date,
        end_date=period.end_date,
        purchased_quantity=quantity(TX_PURCHASE),
        purchased_value=purchased_value.quantize(Decimal("0.01")),
        sold_quantity=-quantity(TX_SALE),
        returned_quantity=quantity(TX_SALE_RETURN),
        adjusted_quantity=quantity(TX_ADJUSTMENT),
        transaction_count=sum(int(row[1]) for row in rows),
    )


def list_transactions(
    db: Session,
    request: Union[DateFilterRequest, dict, None] = None,
    product_id: Optional[int] = None,
    transaction_type: Optional[str] = None,
    limit: int = 100,
) -> list[StockTransaction]:
    """Stock movements matching a date filter, newest first."""
    query = select(StockTransaction).where(_transactions_filter(request))

    if product_id:
        query = query.where(StockTransaction.product_id == product_id)
    if transaction_type:
        query = query.where(StockTransaction.transaction_type == transaction_type)

    query = query.order_by(StockTransaction.created_at.desc(), StockTransaction.id.desc()).limit(limit)
    return list(db.scalars(query))


def adjustment_summary(
    db: Session, request: Union[DateFilterRequest, dict, None] = None
) -> AdjustmentSummary:
    """Net adjusted quantity and its breakdown by adjustment category."""
    rows = db.execute(
        select(
            StockTransaction.category,
            func.count(StockTransaction.id),
            func.coalesce(func.sum(StockTransaction.quantity), 0),
        )
        .where(
            _transactions_filter(request),
            StockTransaction.transaction_type == TX_ADJUSTMENT,
        )
        .group_by(StockTransaction.category)
        .order_by(StockTransaction.category)
    ).all()

    breakdown = [
        AdjustmentCategoryTotal(
            category=category or "Uncategorized",
            count=int(count),
            quantity_change=int(total),
        )
        for category, count, total in rows
    ]
    return AdjustmentSummary(
        total_quantity=sum(item.quantity_change for item in breakdown),
        breakdown=breakdown,
    )


def inventory_valuation(db: Session) -> InventoryValuation:
    """Value of stock on hand at weighted-average cost."""
    products = db.scalars(select(Product).where(Product.is_active.is_(True))).all()

    stock_value = sum(
        (p.quantity * _as_decimal(p.average_purchase_price) for p in products),
        Decimal("0"),
    )
    return InventoryValuation(
        total_products=len(products),
        total_quantity=sum(p.quantity for p in products),
        stock_value_cost=stock_value.quantize(Decimal("0.01")),
        low_stock_count=sum(1 for p in products if p.quantity > 0 and p.is_low_stock),
        out_of_stock_count=sum(1 for p in products if p.quantity == 0),
    )
