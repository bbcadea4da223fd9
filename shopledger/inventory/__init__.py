"""
Inventory core: cost engine, batch identifiers, tracking ledger and stock services.
"""
from shopledger.inventory.batch_ids import generate_batch_uid, is_batch_uid
from shopledger.inventory.costing import CostUpdate, recompute, recompute_for_product, weighted_average
from shopledger.inventory.ledger import (
    assign_to_batch,
    available_untracked,
    check_consistency,
    list_batches,
    list_serials,
    release_to_untracked,
    scan_code,
    set_tracking_type,
    trace_serial,
)
from shopledger.inventory.stock import adjust_stock, issue_sale, receive_purchase, return_sale

__all__ = [
    "generate_batch_uid",
    "is_batch_uid",
    "CostUpdate",
    "recompute",
    "recompute_for_product",
    "weighted_average",
    "assign_to_batch",
    "available_untracked",
    "check_consistency",
    "list_batches",
    "list_serials",
    "release_to_untracked",
    "scan_code",
    "set_tracking_type",
    "trace_serial",
    "adjust_stock",
    "issue_sale",
    "receive_purchase",
    "return_sale",
]
