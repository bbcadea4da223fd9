"""
Stock movement API endpoints: sales, sale returns and manual adjustments.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopledger.core.database import get_db
from shopledger.inventory import stock
from shopledger.schemas.stock import (
    SaleIssueInput,
    StockAdjustmentInput,
    StockTransactionResponse,
)

router = APIRouter(prefix="/stock", tags=["Stock Management"])


@router.post("/sales", response_model=StockTransactionResponse, status_code=status.HTTP_201_CREATED)
def issue_sale(payload: SaleIssueInput, db: Session = Depends(get_db)):
    """
    Take sold units out of stock.

    - **serialNumber**: Sell one specific unit of a serial-tracked product
    - **batchUid**: Sell from a batch
    - neither: Sell from untracked stock
    """
    return stock.issue_sale(db, payload).transaction


@router.post("/returns", response_model=StockTransactionResponse, status_code=status.HTTP_201_CREATED)
def return_sale(payload: SaleIssueInput, db: Session = Depends(get_db)):
    """Put returned units back into stock."""
    return stock.return_sale(db, payload).transaction


@router.post("/adjustments", response_model=StockTransactionResponse, status_code=status.HTTP_201_CREATED)
def adjust_stock(payload: StockAdjustmentInput, db: Session = Depends(get_db)):
    """
    Manually correct stock.

    - **adjustment**: Signed change, e.g. -2 for two damaged units
    - **category**: Damaged, Theft, Stocktaking, ...
    - **reason**: Free text kept with the movement
    """
    return stock.adjust_stock(db, payload).transaction
