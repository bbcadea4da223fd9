"""
Pydantic schemas for report selectors and report results.
"""
from typing import Optional
from datetime import date
from decimal import Decimal
from pydantic import BaseModel, Field

from shopledger.schemas.common import InputModel


class PeriodRequest(InputModel):
    """GST period selector. Combinations are checked when the period is computed."""
    period_type: str
    year: int = Field(..., ge=1900, le=9998)
    month: Optional[int] = None
    quarter: Optional[int] = None


class DateFilterRequest(InputModel):
    """Named report filter or an explicit date range."""
    filter: Optional[str] = None
    date_from: Optional[date] = Field(None, alias="from")
    date_to: Optional[date] = Field(None, alias="to")
    column_alias: Optional[str] = Field(None, alias="alias", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")


class FiscalPeriodResponse(BaseModel):
    start_date: str
    end_date: str


class PeriodStockSummary(BaseModel):
    """Stock movement totals for one fiscal period."""
    start_date: str
    end_date: str
    purchased_quantity: int
    purchased_value: Decimal
    sold_quantity: int
    returned_quantity: int
    adjusted_quantity: int
    transaction_count: int


class AdjustmentCategoryTotal(BaseModel):
    category: str
    count: int
    quantity_change: int


class AdjustmentSummary(BaseModel):
    total_quantity: int
    breakdown: list[AdjustmentCategoryTotal]


class InventoryValuation(BaseModel):
    total_products: int
    total_quantity: int
    stock_value_cost: Decimal
    low_stock_count: int
    out_of_stock_count: int
