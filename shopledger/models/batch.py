"""
Batch (lot) and serial number models for tracked stock.
"""
from typing import Optional
from datetime import date
from decimal import Decimal
from sqlalchemy import (
    String, Integer, Numeric, Boolean, Date, ForeignKey, CheckConstraint, Index, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopledger.core.database import Base


SERIAL_ACTIVE = "active"
SERIAL_SOLD = "sold"
SERIAL_REMOVED = "removed"


class Batch(Base):
    """A lot of one product sharing expiry, prices and location."""

    __tablename__ = "product_batches"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Identification: batch_uid is generated, batch_number is what the user typed
    batch_uid: Mapped[str] = mapped_column(String(32), nullable=False)
    batch_number: Mapped[str] = mapped_column(String(100), nullable=False)
    # Printed label code, when the lot carries its own barcode
    barcode: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)

    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    mfg_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Price overrides
    mrp: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    mop: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    mfw_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    product = relationship("Product", back_populates="batches")
    serials = relationship("Serial", back_populates="batch", order_by="Serial.id")

    __table_args__ = (
        UniqueConstraint("product_id", "batch_uid", name="uq_product_batches_product_batch_uid"),
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        Index("idx_product_batches_number", "product_id", "batch_number"),
        Index("idx_product_batches_expiry", "expiry_date"),
    )

    def __repr__(self) -> str:
        return f"<Batch(id={self.id}, uid={self.batch_uid}, qty={self.quantity})>"


class BatchSequence(Base):
    """Last batch sequence number handed out for a product."""

    __tablename__ = "batch_sequences"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    last_value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<BatchSequence(product_id={self.product_id}, last={self.last_value})>"


class Serial(Base):
    """One physical unit of a serial-tracked product."""

    __tablename__ = "product_serials"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    batch_id: Mapped[int] = mapped_column(
        ForeignKey("product_batches.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    serial_number: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=SERIAL_ACTIVE, nullable=False)

    # Relationships
    batch = relationship("Batch", back_populates="serials")

    __table_args__ = (
        UniqueConstraint(
            "product_id", "serial_number", name="uq_product_serials_product_serial_number"
        ),
        CheckConstraint("status IN ('active', 'sold', 'removed')", name="status_valid"),
        Index("idx_product_serials_status", "product_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Serial(id={self.id}, serial={self.serial_number}, status={self.status})>"
