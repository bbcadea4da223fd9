"""
Stock services: purchase receipts, sales, sale returns and adjustments.

Each service runs its whole read-compute-write cycle under the product lock
and inside one transaction.
"""
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopledger.core.database import atomic
from shopledger.core.locks import product_locks
from shopledger.error_handlers import NotFoundError, ValidationError
from shopledger.inventory.costing import CostUpdate, apply_cost_update, recompute
from shopledger.inventory.ledger import (
    check_tracking_request,
    add_to_batch,
    credit_batch,
    get_batch,
    load_product,
    record_transaction,
    remove_serials,
    tracked_quantity,
)
from shopledger.logging_config import get_logger
from shopledger.models.batch import Batch, Serial, SERIAL_ACTIVE, SERIAL_SOLD
from shopledger.models.product import Product, TRACKING_NONE, TRACKING_SERIAL
from shopledger.models.stock import (
    StockTransaction, TX_ADJUSTMENT, TX_PURCHASE, TX_SALE, TX_SALE_RETURN
)
from shopledger.schemas.common import parse_input
from shopledger.schemas.stock import PurchaseReceiptInput, SaleIssueInput, StockAdjustmentInput

logger = get_logger("stock")


@dataclass
class StockResult:
    product: Product
    transaction: StockTransaction
    batch: Optional[Batch] = None
    serial: Optional[Serial] = None
    cost: Optional[CostUpdate] = None


def _insufficient(message: str, field: str = "quantity") -> ValidationError:
    return ValidationError(message, errors=[
        {"field": field, "message": message, "type": "insufficient_stock"}
    ])


def _get_serial(db: Session, product_id: int, serial_number: str) -> Serial:
    serial = db.execute(
        select(Serial).where(
            Serial.product_id == product_id, Serial.serial_number == serial_number
        )
    ).scalar_one_or_none()
    if serial is None:
        raise NotFoundError("Serial", serial_number)
    return serial


def _untracked(db: Session, product: Product) -> int:
    return product.quantity - tracked_quantity(db, product.id)


def receive_purchase(db: Session, data: Union[PurchaseReceiptInput, dict]) -> StockResult:
    """
    Receive a purchase line: blend its rate into the average cost and add
    the units to stock, straight into a batch when one is named.
    """
    payload = parse_input(PurchaseReceiptInput, data)

    with product_locks.hold(payload.product_id), atomic(db):
        product = load_product(db, payload.product_id)
        if payload.batch_number:
            check_tracking_request(db, product, payload.quantity, payload.serials)
        elif product.tracking_type == TRACKING_SERIAL and payload.quantity:
            logger.info(
                f"[STOCK] Serial product_id={product.id} received {payload.quantity} units "
                f"without serials; they stay untracked"
            )

        quantity_before = product.quantity
        update = recompute(product, payload.quantity, payload.rate)
        apply_cost_update(product, update)

        batch = None
        if payload.batch_number:
            batch, _ = credit_batch(
                db,
                product,
                payload.quantity,
                payload.batch_number,
                payload.serials,
                barcode=payload.barcode,
                location=payload.location,
                expiry_date=payload.expiry_date,
                mfg_date=payload.mfg_date,
                mrp=payload.mrp,
                mop=payload.mop,
                mfw_price=payload.mfw_price,
            )

        transaction = record_transaction(
            db, product, TX_PURCHASE, payload.quantity, quantity_before,
            batch=batch,
            unit_cost=payload.rate,
            notes=f"Purchase of {payload.quantity} @ {payload.rate}",
        )

    logger.info(
        f"[STOCK] Purchase product_id={product.id} qty={payload.quantity} rate={payload.rate} "
        f"-> qty={product.quantity} avg={product.average_purchase_price}"
    )
    return StockResult(product=product, transaction=transaction, batch=batch, cost=update)


def issue_sale(db: Session, data: Union[SaleIssueInput, dict]) -> StockResult:
    """Take sold units out of stock. The average cost is not touched."""
    payload = parse_input(SaleIssueInput, data)

    with product_locks.hold(payload.product_id), atomic(db):
        product = load_product(db, payload.product_id)
        quantity_before = product.quantity
        batch = None
        serial = None

        if payload.serial_number:
            serial = _get_serial(db, product.id, payload.serial_number)
            if serial.status != SERIAL_ACTIVE:
                raise ValidationError(
                    f"Serial '{payload.serial_number}' is {serial.status}",
                    errors=[{"field": "serial_number", "message": "not on hand", "type": "serial_state"}]
                )
            batch = db.get(Batch, serial.batch_id)
            if payload.batch_uid and batch.batch_uid != payload.batch_uid:
                raise ValidationError(
                    f"Serial '{payload.serial_number}' is not in batch {payload.batch_uid}",
                    errors=[{"field": "batch_uid", "message": "serial belongs to another batch", "type": "mismatch"}]
                )
            serial.status = SERIAL_SOLD
            batch.quantity -= 1
        elif payload.batch_uid:
            if product.tracking_type == TRACKING_SERIAL:
                raise ValidationError(
                    "Serial-tracked batches are sold by serial number",
                    errors=[{"field": "serial_number", "message": "required", "type": "missing"}]
                )
            batch = get_batch(db, product.id, payload.batch_uid)
            if payload.quantity > batch.quantity:
                raise _insufficient(
                    f"Batch {batch.batch_uid} holds only {batch.quantity} units"
                )
            batch.quantity -= payload.quantity
        else:
            untracked = _untracked(db, product)
            if payload.quantity > untracked:
                raise _insufficient(
                    f"Insufficient untracked stock: requested {payload.quantity}, available {untracked}"
                )

        product.quantity -= payload.quantity
        transaction = record_transaction(
            db, product, TX_SALE, -payload.quantity, quantity_before,
            batch=batch,
            serial=serial,
            unit_cost=product.average_purchase_price,
        )

    logger.info(
        f"[STOCK] Sale product_id={product.id} qty={payload.quantity} "
        f"{quantity_before} -> {product.quantity}"
    )
    return StockResult(product=product, transaction=transaction, batch=batch, serial=serial)


def return_sale(db: Session, data: Union[SaleIssueInput, dict]) -> StockResult:
    """Put units from a returned sale back where they were sold from."""
    payload = parse_input(SaleIssueInput, data)

    with product_locks.hold(payload.product_id), atomic(db):
        product = load_product(db, payload.product_id)
        quantity_before = product.quantity
        batch = None
        serial = None

        if payload.serial_number:
            serial = _get_serial(db, product.id, payload.serial_number)
            if serial.status != SERIAL_SOLD:
                raise ValidationError(
                    f"Serial '{payload.serial_number}' was not sold",
                    errors=[{"field": "serial_number", "message": f"status is {serial.status}", "type": "serial_state"}]
                )
            batch = db.get(Batch, serial.batch_id)
            serial.status = SERIAL_ACTIVE
            batch.quantity += 1
            batch.is_active = True
        elif payload.batch_uid:
            if product.tracking_type == TRACKING_SERIAL:
                raise ValidationError(
                    "Serial-tracked batches are returned by serial number",
                    errors=[{"field": "serial_number", "message": "required", "type": "missing"}]
                )
            batch = get_batch(db, product.id, payload.batch_uid)
            batch.quantity += payload.quantity
            batch.is_active = True

        product.quantity += payload.quantity
        transaction = record_transaction(
            db, product, TX_SALE_RETURN, payload.quantity, quantity_before,
            batch=batch,
            serial=serial,
            unit_cost=product.average_purchase_price,
        )

    logger.info(
        f"[STOCK] Sale return product_id={product.id} qty={payload.quantity} "
        f"{quantity_before} -> {product.quantity}"
    )
    return StockResult(product=product, transaction=transaction, batch=batch, serial=serial)


def adjust_stock(db: Session, data: Union[StockAdjustmentInput, dict]) -> StockResult:
    """
    Signed correction of stock against the untracked pool or one batch.

    Positive adjustments are valued at ``unit_cost``, defaulting to the
    current average so the average does not move.
    """
    payload = parse_input(StockAdjustmentInput, data)

    with product_locks.hold(payload.product_id), atomic(db):
        product = load_product(db, payload.product_id)
        quantity_before = product.quantity
        amount = abs(payload.adjustment)
        batch = None
        update = None

        if payload.batch_uid:
            if product.tracking_type == TRACKING_NONE:
                raise ValidationError(
                    f"Product {product.id} does not track batches",
                    errors=[{"field": "batch_uid", "message": "tracking_type is 'none'", "type": "tracking"}]
                )
            batch = get_batch(db, product.id, payload.batch_uid)
            if product.tracking_type == TRACKING_SERIAL and not payload.serials:
                raise ValidationError(
                    "Serial-tracked batches are adjusted by serial number",
                    errors=[{"field": "serials", "message": "required", "type": "missing"}]
                )
            if payload.adjustment > 0:
                check_tracking_request(db, product, amount, payload.serials)
            elif amount > batch.quantity:
                raise _insufficient(
                    f"Batch {batch.batch_uid} holds only {batch.quantity} units",
                    field="adjustment",
                )
        elif payload.adjustment < 0:
            untracked = _untracked(db, product)
            if amount > untracked:
                raise _insufficient(
                    f"Adjustment of {payload.adjustment} exceeds untracked stock of {untracked}",
                    field="adjustment",
                )

        if payload.adjustment > 0:
            unit_cost = (
                payload.unit_cost if payload.unit_cost is not None
                else product.average_purchase_price
            )
            update = recompute(product, amount, unit_cost)
            apply_cost_update(product, update)
            if batch is not None:
                add_to_batch(db, batch, amount, payload.serials)
        else:
            unit_cost = product.average_purchase_price
            if batch is not None:
                if payload.serials:
                    remove_serials(db, batch, payload.serials)
                batch.quantity -= amount
            product.quantity -= amount

        transaction = record_transaction(
            db, product, TX_ADJUSTMENT, payload.adjustment, quantity_before,
            batch=batch,
            unit_cost=unit_cost,
            category=payload.category,
            notes=payload.reason,
        )

    logger.info(
        f"[STOCK] Adjusted product_id={product.id} ({payload.category}): "
        f"{quantity_before} -> {product.quantity}. Reason: {payload.reason}"
    )
    return StockResult(product=product, transaction=transaction, batch=batch, cost=update)
