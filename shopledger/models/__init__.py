"""
SQLAlchemy models for the Shop Ledger application.
Import all models here to ensure they're registered with SQLAlchemy.
"""
from shopledger.models.product import Product
from shopledger.models.batch import Batch, BatchSequence, Serial
from shopledger.models.stock import StockTransaction
from shopledger.models.audit import AuditLog

__all__ = [
    "Product",
    "Batch",
    "BatchSequence",
    "Serial",
    "StockTransaction",
    "AuditLog",
]
