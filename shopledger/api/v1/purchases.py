"""
Purchase receipt API endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopledger.core.database import get_db
from shopledger.inventory.stock import receive_purchase
from shopledger.schemas.stock import (
    CostUpdateResponse,
    ProductStockResponse,
    PurchaseReceiptInput,
    PurchaseReceiptResponse,
)

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.post(
    "/receipts",
    response_model=PurchaseReceiptResponse,
    status_code=status.HTTP_201_CREATED
)
def receive_purchase_line(payload: PurchaseReceiptInput, db: Session = Depends(get_db)):
    """
    Receive one purchase line into stock.

    - **productId**: Product received
    - **quantity**: Units received
    - **rate**: Purchase rate per unit, blended into the weighted-average cost
    - **batchNumber** / **serials**: Optional, put the units straight into a batch
    """
    result = receive_purchase(db, payload)
    return PurchaseReceiptResponse(
        product=ProductStockResponse.model_validate(result.product),
        cost=CostUpdateResponse(
            new_average_cost=result.cost.new_average_cost,
            new_total_quantity=result.cost.new_total_quantity,
        ),
        batch_uid=result.batch.batch_uid if result.batch else None,
        transaction_id=result.transaction.id,
    )
