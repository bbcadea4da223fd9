"""
Batch UID generation.

Format: BAT-<productId>-<4-digit sequence>, e.g. BAT-101-0005.
"""
from typing import Optional

BATCH_UID_PREFIX = "BAT-"


def generate_batch_uid(product_id: int, sequence_number: Optional[int] = None) -> str:
    """
    Build the batch UID for a product's n-th batch.

    The generator does not check uniqueness; callers pass a sequence number
    allocated per product (see ``ledger.allocate_batch_sequence``).
    """
    seq = sequence_number or 0
    return f"{BATCH_UID_PREFIX}{product_id}-{seq:04d}"


def is_batch_uid(code: Optional[str]) -> bool:
    """True when a scanned code looks like a batch UID."""
    return bool(code) and code.startswith(BATCH_UID_PREFIX)
