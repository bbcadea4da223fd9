"""
Pydantic schemas for batch assignment, release and lookups.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, model_validator

from shopledger.schemas.common import InputModel, SerialList
from shopledger.schemas.stock import ProductStockResponse


class BatchAssignmentInput(InputModel):
    """Move untracked stock of a product into a batch (and serials)."""
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    batch_number: str = Field(..., min_length=1, max_length=100)
    barcode: Optional[str] = Field(None, max_length=50)
    serials: SerialList = Field(default_factory=list)
    location: Optional[str] = Field(None, max_length=255)
    expiry_date: Optional[date] = None
    mfg_date: Optional[date] = None
    mrp: Optional[Decimal] = Field(None, ge=0)
    mop: Optional[Decimal] = Field(None, ge=0)
    mfw_price: Optional[Decimal] = Field(None, ge=0)


class BatchReleaseInput(InputModel):
    """Move stock out of a batch back into the untracked pool."""
    product_id: int = Field(..., gt=0)
    batch_uid: str = Field(..., min_length=1, max_length=32)
    quantity: Optional[int] = Field(None, gt=0)
    serials: SerialList = Field(default_factory=list)

    @model_validator(mode="after")
    def check_amount(self):
        if self.quantity is None and not self.serials:
            raise ValueError("either quantity or serials must be supplied")
        if self.quantity is not None and self.serials and self.quantity != len(self.serials):
            raise ValueError("quantity does not match the number of serials")
        if len(set(self.serials)) != len(self.serials):
            raise ValueError("serials contain duplicates")
        return self


class TrackingTypeUpdate(InputModel):
    tracking_type: str = Field(..., pattern="^(none|batch|serial)$")


class SerialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    batch_id: int
    serial_number: str
    status: str


class BatchResponse(BaseModel):
    """Schema for batch response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    batch_uid: str
    batch_number: str
    barcode: Optional[str] = None
    quantity: int
    expiry_date: Optional[date] = None
    mfg_date: Optional[date] = None
    mrp: Optional[Decimal] = None
    mop: Optional[Decimal] = None
    mfw_price: Optional[Decimal] = None
    location: Optional[str] = None
    is_active: bool
    created_at: datetime


class BatchAssignmentResponse(BaseModel):
    """Outcome of an assignment or release."""
    batch: BatchResponse
    serials: list[SerialResponse]
    untracked_quantity: int
    product_quantity: int


class UntrackedStockResponse(BaseModel):
    product_id: int
    quantity: int
    tracked_quantity: int
    untracked_quantity: int


class SerialTraceResponse(BaseModel):
    """Where a serial number sits: product, batch and status."""
    serial: SerialResponse
    batch: BatchResponse
    product_id: int
    product_name: str


class ScanResponse(BaseModel):
    """What a scanned barcode resolved to: a serial, a batch or a product."""
    type: str
    product: ProductStockResponse
    batch: Optional[BatchResponse] = None
    serial: Optional[SerialResponse] = None
