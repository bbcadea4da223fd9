"""API v1 Router."""
from fastapi import APIRouter

from shopledger.api.v1 import batches, purchases, reports, stock

api_router = APIRouter(prefix="/api/v1")

# Include all route modules
api_router.include_router(purchases.router)
api_router.include_router(batches.router)
api_router.include_router(stock.router)
api_router.include_router(reports.router)

__all__ = ["api_router"]
