"""
Pydantic schemas for purchase receipts, sales and stock adjustments.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from shopledger.schemas.common import InputModel, SerialList


class PurchaseReceiptInput(InputModel):
    """One received purchase line."""
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=0)
    rate: Decimal = Field(..., ge=0)

    # Optional tracking details for the received stock
    batch_number: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=50)
    serials: SerialList = Field(default_factory=list)
    expiry_date: Optional[date] = None
    mfg_date: Optional[date] = None
    mrp: Optional[Decimal] = Field(None, ge=0)
    mop: Optional[Decimal] = Field(None, ge=0)
    mfw_price: Optional[Decimal] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_tracking(self):
        if self.serials and not self.batch_number:
            raise ValueError("batch_number is required when serials are supplied")
        if self.batch_number and self.quantity == 0:
            raise ValueError("a batch cannot be received with zero quantity")
        if len(set(self.serials)) != len(self.serials):
            raise ValueError("serials contain duplicates")
        return self


class SaleIssueInput(InputModel):
    """Stock leaving (or coming back from) a sale."""
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    batch_uid: Optional[str] = Field(None, max_length=32)
    serial_number: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def check_serial_quantity(self):
        if self.serial_number and self.quantity != 1:
            raise ValueError("a serial number always moves exactly one unit")
        return self


class StockAdjustmentInput(InputModel):
    """Manual correction of stock, e.g. damage or a stocktake difference."""
    product_id: int = Field(..., gt=0)
    adjustment: int
    category: str = Field(default="Manual Adjustment", min_length=1, max_length=50)
    reason: Optional[str] = None
    batch_uid: Optional[str] = Field(None, max_length=32)
    # Serial-tracked batches are adjusted unit by unit
    serials: SerialList = Field(default_factory=list)
    unit_cost: Optional[Decimal] = Field(None, ge=0)

    @field_validator("adjustment")
    @classmethod
    def non_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("adjustment must not be zero")
        return value

    @model_validator(mode="after")
    def check_serials(self):
        if self.serials and not self.batch_uid:
            raise ValueError("batch_uid is required when serials are supplied")
        if self.serials and len(self.serials) != abs(self.adjustment):
            raise ValueError("number of serials must equal the adjustment size")
        if len(set(self.serials)) != len(self.serials):
            raise ValueError("serials contain duplicates")
        return self


class CostUpdateResponse(BaseModel):
    """Result of a weighted-average cost recomputation."""
    new_average_cost: Decimal
    new_total_quantity: int


class ProductStockResponse(BaseModel):
    """Product stock position after an operation."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    product_code: str
    quantity: int
    average_purchase_price: Decimal
    tracking_type: str
    stock_status: str


class StockTransactionResponse(BaseModel):
    """Schema for stock transaction response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    batch_id: Optional[int] = None
    serial_id: Optional[int] = None
    transaction_type: str
    quantity: int
    quantity_before: int
    quantity_after: int
    unit_cost: Optional[Decimal] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class PurchaseReceiptResponse(BaseModel):
    """Outcome of a purchase receipt."""
    product: ProductStockResponse
    cost: CostUpdateResponse
    batch_uid: Optional[str] = None
    transaction_id: int
