"""
Batch and serial tracking API endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopledger.core.database import get_db
from shopledger.inventory import ledger
from shopledger.schemas.batch import (
    BatchAssignmentInput,
    BatchAssignmentResponse,
    BatchReleaseInput,
    BatchResponse,
    SerialResponse,
    SerialTraceResponse,
    ScanResponse,
    TrackingTypeUpdate,
    UntrackedStockResponse,
)
from shopledger.schemas.stock import ProductStockResponse

router = APIRouter(tags=["Batches & Serials"])


def _ledger_response(result: ledger.LedgerResult) -> BatchAssignmentResponse:
    return BatchAssignmentResponse(
        batch=BatchResponse.model_validate(result.batch),
        serials=[SerialResponse.model_validate(s) for s in result.serials],
        untracked_quantity=result.untracked_quantity,
        product_quantity=result.product_quantity,
    )


@router.post(
    "/batches/assign",
    response_model=BatchAssignmentResponse,
    status_code=status.HTTP_201_CREATED
)
def assign_to_batch(payload: BatchAssignmentInput, db: Session = Depends(get_db)):
    """
    Move untracked stock into a batch.

    - **productId**: Product to convert
    - **quantity**: Units to move, at most the untracked quantity
    - **batchNumber**: Supplier lot number; an open batch with it is topped up
    - **serials**: One serial number per unit for serial-tracked products
    """
    return _ledger_response(ledger.assign_to_batch(db, payload))


@router.post("/batches/release", response_model=BatchAssignmentResponse)
def release_to_untracked(payload: BatchReleaseInput, db: Session = Depends(get_db)):
    """Move units out of a batch back into untracked stock."""
    return _ledger_response(ledger.release_to_untracked(db, payload))


@router.get("/products/{product_id}/batches", response_model=list[BatchResponse])
def list_batches(product_id: int, db: Session = Depends(get_db)):
    """Batches with stock, earliest expiry first."""
    return ledger.list_batches(db, product_id)


@router.get("/products/{product_id}/serials", response_model=list[SerialResponse])
def list_serials(product_id: int, db: Session = Depends(get_db)):
    return ledger.list_serials(db, product_id)


@router.get("/products/{product_id}/untracked", response_model=UntrackedStockResponse)
def get_untracked_stock(product_id: int, db: Session = Depends(get_db)):
    """Split of the product's quantity into tracked and untracked stock."""
    product = ledger.load_product(db, product_id, lock_row=False)
    tracked = ledger.tracked_quantity(db, product_id)
    return UntrackedStockResponse(
        product_id=product.id,
        quantity=product.quantity,
        tracked_quantity=tracked,
        untracked_quantity=product.quantity - tracked,
    )


@router.put("/products/{product_id}/tracking", response_model=ProductStockResponse)
def update_tracking_type(
    product_id: int,
    payload: TrackingTypeUpdate,
    db: Session = Depends(get_db)
):
    """
    Change how a product's stock is tracked.

    Only allowed while none of its stock sits in batches.
    """
    return ledger.set_tracking_type(db, product_id, payload.tracking_type)


@router.get("/serials/{serial_number}", response_model=SerialTraceResponse)
def trace_serial(serial_number: str, db: Session = Depends(get_db)):
    """Find the product and batch a serial number belongs to."""
    trace = ledger.trace_serial(db, serial_number)
    return SerialTraceResponse(
        serial=SerialResponse.model_validate(trace.serial),
        batch=BatchResponse.model_validate(trace.batch),
        product_id=trace.product.id,
        product_name=trace.product.name,
    )


@router.get("/scan/{code}", response_model=ScanResponse)
def scan_code(code: str, db: Session = Depends(get_db)):
    """
    Resolve a scanned barcode.

    Checked in order: serial number, batch (UID or printed barcode),
    product (barcode or product code).
    """
    result = ledger.scan_code(db, code)
    return ScanResponse(
        type=result.kind,
        product=ProductStockResponse.model_validate(result.product),
        batch=BatchResponse.model_validate(result.batch) if result.batch else None,
        serial=SerialResponse.model_validate(result.serial) if result.serial else None,
    )
