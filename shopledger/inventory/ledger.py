"""
Stock-tracking ledger.

A product's ``quantity`` is split between an untracked pool and its batches:

    untracked = product.quantity - sum(batch.quantity)

Serial-tracked stock always lives inside a batch, one active serial per
unit, so the same formula holds for batch and serial products. Assigning and
releasing only move units between the pools; the product quantity is left
alone.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopledger.core.database import atomic
from shopledger.core.locks import product_locks
from shopledger.error_handlers import NotFoundError, ValidationError
from shopledger.inventory.batch_ids import generate_batch_uid, is_batch_uid
from shopledger.logging_config import get_logger
from shopledger.models.batch import (
    Batch, BatchSequence, Serial, SERIAL_ACTIVE, SERIAL_REMOVED
)
from shopledger.models.product import (
    Product, TRACKING_BATCH, TRACKING_NONE, TRACKING_SERIAL, TRACKING_TYPES
)
from shopledger.models.stock import StockTransaction, TX_ASSIGN, TX_RELEASE
from shopledger.schemas.batch import BatchAssignmentInput, BatchReleaseInput
from shopledger.schemas.common import parse_input

logger = get_logger("ledger")

DEFAULT_BATCH_NUMBER = "DEFAULT"


@dataclass
class LedgerResult:
    batch: Batch
    serials: list[Serial] = field(default_factory=list)
    untracked_quantity: int = 0
    product_quantity: int = 0


@dataclass
class SerialTrace:
    serial: Serial
    batch: Batch
    product: Product


@dataclass
class ScanResult:
    kind: str  # serial | batch | product
    product: Product
    batch: Optional[Batch] = None
    serial: Optional[Serial] = None


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def load_product(db: Session, product_id: int, lock_row: bool = True) -> Product:
    """Fetch a product with fresh column values, row-locked where the database supports it."""
    stmt = select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
    if lock_row:
        stmt = stmt.with_for_update()
    product = db.execute(stmt).scalar_one_or_none()
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def get_batch(db: Session, product_id: int, batch_uid: str) -> Batch:
    batch = db.execute(
        select(Batch)
        .where(Batch.product_id == product_id, Batch.batch_uid == batch_uid)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if batch is None:
        raise NotFoundError("Batch", batch_uid)
    return batch


def tracked_quantity(db: Session, product_id: int) -> int:
    """Units of the product held in batches."""
    total = db.scalar(
        select(func.coalesce(func.sum(Batch.quantity), 0)).where(Batch.product_id == product_id)
    )
    return int(total or 0)


def available_untracked(db: Session, product_id: int) -> int:
    """Units of the product not assigned to any batch."""
    product = load_product(db, product_id, lock_row=False)
    return product.quantity - tracked_quantity(db, product_id)


def list_batches(db: Session, product_id: int) -> list[Batch]:
    """Active batches still holding stock, earliest expiry first."""
    load_product(db, product_id, lock_row=False)
    return list(db.scalars(
        select(Batch)
        .where(Batch.product_id == product_id, Batch.is_active.is_(True), Batch.quantity > 0)
        .order_by(Batch.expiry_date.asc().nulls_last(), Batch.id)
    ))


def list_serials(db: Session, product_id: int) -> list[Serial]:
    """Serials of the product that are on hand."""
    load_product(db, product_id, lock_row=False)
    return list(db.scalars(
        select(Serial)
        .where(Serial.product_id == product_id, Serial.status == SERIAL_ACTIVE)
        .order_by(Serial.id)
    ))


def trace_serial(db: Session, serial_number: str) -> SerialTrace:
    serial = db.scalars(
        select(Serial).where(Serial.serial_number == serial_number).order_by(Serial.id)
    ).first()
    if serial is None:
        raise NotFoundError("Serial", serial_number)
    batch = db.get(Batch, serial.batch_id)
    product = db.get(Product, serial.product_id)
    return SerialTrace(serial=serial, batch=batch, product=product)


def scan_code(db: Session, code: str) -> ScanResult:
    """
    Resolve a scanned barcode.

    Serial numbers win over batches, batches over products. Batch UIDs are
    looked up by UID, other codes by the batch's printed barcode. Products
    match on barcode or product code.
    """
    code = (code or "").strip()
    if not code:
        raise ValidationError(
            "No code provided",
            errors=[{"field": "code", "message": "must not be empty", "type": "missing"}]
        )

    serial = db.scalars(
        select(Serial).where(Serial.serial_number == code).order_by(Serial.id)
    ).first()
    if serial is not None:
        return ScanResult(
            kind="serial",
            product=db.get(Product, serial.product_id),
            batch=db.get(Batch, serial.batch_id),
            serial=serial,
        )

    batch_column = Batch.batch_uid if is_batch_uid(code) else Batch.barcode
    batch = db.scalars(select(Batch).where(batch_column == code).order_by(Batch.id)).first()
    if batch is not None:
        return ScanResult(kind="batch", product=db.get(Product, batch.product_id), batch=batch)

    product = db.scalars(
        select(Product)
        .where((Product.barcode == code) | (Product.product_code == code))
        .order_by(Product.id)
    ).first()
    if product is not None:
        return ScanResult(kind="product", product=product)

    raise NotFoundError("Code", code)


def check_consistency(db: Session, product_id: int) -> list[str]:
    """Return every tracking invariant the product currently violates."""
    product = load_product(db, product_id, lock_row=False)
    problems = []

    in_batches = tracked_quantity(db, product_id)
    if in_batches > product.quantity:
        problems.append(
            f"batches hold {in_batches} units but product quantity is {product.quantity}"
        )
    if product.tracking_type == TRACKING_NONE and in_batches:
        problems.append(f"untracked product has {in_batches} units in batches")

    if product.tracking_type == TRACKING_SERIAL:
        active_counts = dict(db.execute(
            select(Serial.batch_id, func.count(Serial.id))
            .where(Serial.product_id == product_id, Serial.status == SERIAL_ACTIVE)
            .group_by(Serial.batch_id)
        ).all())
        for batch in db.scalars(select(Batch).where(Batch.product_id == product_id)):
            active = active_counts.get(batch.id, 0)
            if active != batch.quantity:
                problems.append(
                    f"batch {batch.batch_uid} holds {batch.quantity} units but has {active} active serials"
                )
    return problems


# ---------------------------------------------------------------------------
# Building blocks shared with the stock services
# ---------------------------------------------------------------------------

def allocate_batch_sequence(db: Session, product_id: int) -> int:
    """
    Next batch sequence number for a product.

    Runs inside the caller's transaction, so the counter and the batch that
    uses it are committed or rolled back together.
    """
    sequence = db.execute(
        select(BatchSequence)
        .where(BatchSequence.product_id == product_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()

    if sequence is None:
        # Products that had batches before the counter existed continue after them
        existing = db.scalar(select(func.count(Batch.id)).where(Batch.product_id == product_id))
        sequence = BatchSequence(product_id=product_id, last_value=existing or 0)
        db.add(sequence)

    sequence.last_value += 1
    db.flush()
    return sequence.last_value


def existing_serials(db: Session, product_id: int, serials: Iterable[str]) -> set[str]:
    """Subset of ``serials`` already known for the product, in any status."""
    serials = list(serials)
    if not serials:
        return set()
    return set(db.scalars(
        select(Serial.serial_number).where(
            Serial.product_id == product_id, Serial.serial_number.in_(serials)
        )
    ))


def check_tracking_request(db: Session, product: Product, quantity: int, serials: list[str]) -> None:
    """Validate that ``quantity`` units (and ``serials``) may enter a batch of the product."""
    if product.tracking_type not in (TRACKING_BATCH, TRACKING_SERIAL):
        raise ValidationError(
            f"Product {product.id} does not track batches or serials",
            errors=[{"field": "product_id", "message": "tracking_type is 'none'", "type": "tracking"}]
        )

    if product.tracking_type == TRACKING_BATCH:
        if serials:
            raise ValidationError(
                "Serial numbers can only be given for serial-tracked products",
                errors=[{"field": "serials", "message": "not allowed for batch tracking", "type": "tracking"}]
            )
        return

    if len(serials) != quantity:
        raise ValidationError(
            f"Expected {quantity} serial numbers, got {len(serials)}",
            errors=[{"field": "serials", "message": "count must equal quantity", "type": "serial_count"}]
        )
    if len(set(serials)) != len(serials):
        raise ValidationError(
            "Serial numbers must be unique",
            errors=[{"field": "serials", "message": "duplicates in request", "type": "serial_duplicate"}]
        )
    duplicates = existing_serials(db, product.id, serials)
    if duplicates:
        raise ValidationError(
            "Serial numbers already exist for this product",
            errors=[
                {"field": "serials", "message": f"'{sn}' already exists", "type": "serial_duplicate"}
                for sn in sorted(duplicates)
            ]
        )


def credit_batch(
    db: Session,
    product: Product,
    quantity: int,
    batch_number: Optional[str],
    serials: list[str],
    **attributes,
) -> tuple[Batch, list[Serial]]:
    """
    Put ``quantity`` units into the product's open batch with ``batch_number``,
    creating the batch when there is none. Callers validate first.
    """
    batch_number = batch_number or DEFAULT_BATCH_NUMBER
    batch = db.scalars(
        select(Batch)
        .where(
            Batch.product_id == product.id,
            Batch.batch_number == batch_number,
            Batch.is_active.is_(True),
        )
        .order_by(Batch.id.desc())
    ).first()

    overrides = {key: value for key, value in attributes.items() if value is not None}
    if batch is None:
        sequence = allocate_batch_sequence(db, product.id)
        batch = Batch(
            product_id=product.id,
            batch_uid=generate_batch_uid(product.id, sequence),
            batch_number=batch_number,
            quantity=0,
            **overrides,
        )
        db.add(batch)
        db.flush()
    else:
        for key, value in overrides.items():
            setattr(batch, key, value)

    return batch, add_to_batch(db, batch, quantity, serials)


def add_to_batch(db: Session, batch: Batch, quantity: int, serials: list[str]) -> list[Serial]:
    """Increase a batch and register its new serials as active."""
    batch.quantity += quantity
    batch.is_active = True

    created = []
    for serial_number in serials:
        serial = Serial(
            product_id=batch.product_id,
            batch_id=batch.id,
            serial_number=serial_number,
            status=SERIAL_ACTIVE,
        )
        db.add(serial)
        created.append(serial)
    db.flush()
    return created


def record_transaction(
    db: Session,
    product: Product,
    transaction_type: str,
    quantity: int,
    quantity_before: int,
    *,
    batch: Optional[Batch] = None,
    serial: Optional[Serial] = None,
    unit_cost=None,
    category: Optional[str] = None,
    notes: Optional[str] = None,
) -> StockTransaction:
    """Append a movement row; ``quantity_after`` is read from the product."""
    transaction = StockTransaction(
        product_id=product.id,
        batch_id=batch.id if batch is not None else None,
        serial_id=serial.id if serial is not None else None,
        transaction_type=transaction_type,
        quantity=quantity,
        quantity_before=quantity_before,
        quantity_after=product.quantity,
        unit_cost=unit_cost,
        category=category,
        notes=notes,
    )
    db.add(transaction)
    db.flush()
    return transaction


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def assign_to_batch(db: Session, data: Union[BatchAssignmentInput, dict]) -> LedgerResult:
    """
    Move untracked units of a product into a batch, creating serials for
    serial-tracked products. All-or-nothing: on any error nothing changes.
    """
    payload = parse_input(BatchAssignmentInput, data)

    with product_locks.hold(payload.product_id), atomic(db):
        product = load_product(db, payload.product_id)
        check_tracking_request(db, product, payload.quantity, payload.serials)

        untracked = product.quantity - tracked_quantity(db, product.id)
        if payload.quantity > untracked:
            raise ValidationError(
                f"Insufficient untracked stock: requested {payload.quantity}, available {untracked}",
                errors=[{
                    "field": "quantity",
                    "message": f"only {untracked} untracked units available",
                    "type": "insufficient_stock",
                }]
            )

        batch, serials = credit_batch(
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
        record_transaction(
            db, product, TX_ASSIGN, payload.quantity, product.quantity,
            batch=batch,
            notes=f"Assigned {payload.quantity} untracked units to {batch.batch_uid}",
        )

    logger.info(
        f"[LEDGER] Assigned {payload.quantity} units of product_id={product.id} "
        f"to {batch.batch_uid} ({len(serials)} serials)"
    )
    return LedgerResult(
        batch=batch,
        serials=serials,
        untracked_quantity=untracked - payload.quantity,
        product_quantity=product.quantity,
    )


def release_to_untracked(db: Session, data: Union[BatchReleaseInput, dict]) -> LedgerResult:
    """Move units out of a batch back into the untracked pool."""
    payload = parse_input(BatchReleaseInput, data)

    with product_locks.hold(payload.product_id), atomic(db):
        product = load_product(db, payload.product_id)
        batch = get_batch(db, product.id, payload.batch_uid)

        released_serials: list[Serial] = []
        if product.tracking_type == TRACKING_SERIAL:
            if not payload.serials:
                raise ValidationError(
                    "Serial-tracked stock is released by serial number",
                    errors=[{"field": "serials", "message": "required", "type": "missing"}]
                )
            released_serials = active_serials_in_batch(db, batch, payload.serials)
            quantity = len(released_serials)
        else:
            if payload.serials:
                raise ValidationError(
                    "Serial numbers can only be given for serial-tracked products",
                    errors=[{"field": "serials", "message": "not allowed", "type": "tracking"}]
                )
            quantity = payload.quantity

        if quantity > batch.quantity:
            raise ValidationError(
                f"Batch {batch.batch_uid} holds only {batch.quantity} units",
                errors=[{"field": "quantity", "message": "exceeds batch quantity", "type": "insufficient_stock"}]
            )

        batch.quantity -= quantity
        # Released serials go back to being anonymous stock
        for serial in released_serials:
            db.delete(serial)
        record_transaction(
            db, product, TX_RELEASE, -quantity, product.quantity,
            batch=batch,
            notes=f"Released {quantity} units from {batch.batch_uid} to untracked stock",
        )
        untracked = product.quantity - tracked_quantity(db, product.id)

    logger.info(
        f"[LEDGER] Released {quantity} units of product_id={product.id} from {batch.batch_uid}"
    )
    return LedgerResult(
        batch=batch,
        serials=[],
        untracked_quantity=untracked,
        product_quantity=product.quantity,
    )


def set_tracking_type(db: Session, product_id: int, tracking_type: str) -> Product:
    """Switch a product between untracked, batch and serial tracking."""
    if tracking_type not in TRACKING_TYPES:
        raise ValidationError(
            f"Unknown tracking type '{tracking_type}'",
            errors=[{"field": "tracking_type", "message": f"must be one of {TRACKING_TYPES}", "type": "enum"}]
        )

    with product_locks.hold(product_id), atomic(db):
        product = load_product(db, product_id)
        if product.tracking_type != tracking_type:
            in_batches = tracked_quantity(db, product_id)
            if in_batches:
                raise ValidationError(
                    f"Cannot change tracking while {in_batches} units are held in batches; release them first",
                    errors=[{"field": "tracking_type", "message": "batches hold stock", "type": "tracking"}]
                )
            logger.info(
                f"[LEDGER] product_id={product_id} tracking {product.tracking_type} -> {tracking_type}"
            )
            product.tracking_type = tracking_type
    return product


def active_serials_in_batch(db: Session, batch: Batch, serials: list[str]) -> list[Serial]:
    """The named serials of a batch, each of which must be on hand and named once."""
    if len(set(serials)) != len(serials):
        raise ValidationError(
            "Serial numbers must be unique",
            errors=[{"field": "serials", "message": "duplicates in request", "type": "serial_duplicate"}]
        )
    found = {
        s.serial_number: s
        for s in db.scalars(
            select(Serial).where(Serial.batch_id == batch.id, Serial.serial_number.in_(serials))
        )
    }
    not_active = [
        sn for sn in serials if sn not in found or found[sn].status != SERIAL_ACTIVE
    ]
    if not_active:
        raise ValidationError(
            f"Serial numbers are not on hand in batch {batch.batch_uid}",
            errors=[
                {"field": "serials", "message": f"'{sn}' is not active", "type": "serial_state"}
                for sn in not_active
            ]
        )
    return [found[sn] for sn in serials]


def remove_serials(db: Session, batch: Batch, serials: list[str]) -> list[Serial]:
    """Mark on-hand serials of a batch as removed, e.g. damaged or lost units."""
    removed = active_serials_in_batch(db, batch, serials)
    for serial in removed:
        serial.status = SERIAL_REMOVED
    return removed
