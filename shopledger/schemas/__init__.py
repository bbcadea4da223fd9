"""
Pydantic schemas for request/response validation.
"""
from shopledger.schemas.common import InputModel, SerialList, parse_input
from shopledger.schemas.stock import (
    PurchaseReceiptInput, SaleIssueInput, StockAdjustmentInput,
    CostUpdateResponse, ProductStockResponse, StockTransactionResponse, PurchaseReceiptResponse
)
from shopledger.schemas.batch import (
    BatchAssignmentInput, BatchReleaseInput, TrackingTypeUpdate,
    SerialResponse, BatchResponse, BatchAssignmentResponse,
    UntrackedStockResponse, SerialTraceResponse, ScanResponse
)
from shopledger.schemas.report import (
    PeriodRequest, DateFilterRequest, FiscalPeriodResponse,
    PeriodStockSummary, AdjustmentCategoryTotal, AdjustmentSummary, InventoryValuation
)

__all__ = [
    # Shared
    "InputModel", "SerialList", "parse_input",

    # Stock schemas
    "PurchaseReceiptInput", "SaleIssueInput", "StockAdjustmentInput",
    "CostUpdateResponse", "ProductStockResponse", "StockTransactionResponse", "PurchaseReceiptResponse",

    # Batch schemas
    "BatchAssignmentInput", "BatchReleaseInput", "TrackingTypeUpdate",
    "SerialResponse", "BatchResponse", "BatchAssignmentResponse",
    "UntrackedStockResponse", "SerialTraceResponse", "ScanResponse",

    # Report schemas
    "PeriodRequest", "DateFilterRequest", "FiscalPeriodResponse",
    "PeriodStockSummary", "AdjustmentCategoryTotal", "AdjustmentSummary", "InventoryValuation",
]
