"""Core application modules."""
from shopledger.core.config import settings, get_settings
from shopledger.core.database import (
    Base,
    atomic,
    get_db,
    get_db_context,
    init_db,
    close_db,
)
from shopledger.core.locks import product_locks

__all__ = [
    "settings",
    "get_settings",
    "Base",
    "atomic",
    "get_db",
    "get_db_context",
    "init_db",
    "close_db",
    "product_locks",
]
