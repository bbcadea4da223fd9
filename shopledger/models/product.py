"""
Product model for inventory management.
"""
from typing import Optional
from decimal import Decimal
from sqlalchemy import String, Integer, Numeric, Boolean, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopledger.core.database import Base


TRACKING_NONE = "none"
TRACKING_BATCH = "batch"
TRACKING_SERIAL = "serial"
TRACKING_TYPES = (TRACKING_NONE, TRACKING_BATCH, TRACKING_SERIAL)


class Product(Base):
    """Product inventory model."""

    __tablename__ = "products"

    # Product identification
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    product_code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    hsn: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    barcode: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)

    # Stock information. quantity spans every tracking mode: untracked stock
    # plus whatever sits in batches (and, for serial products, their serials).
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    average_purchase_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 4), default=Decimal("0"), nullable=False
    )
    tracking_type: Mapped[str] = mapped_column(String(10), default=TRACKING_NONE, nullable=False)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Pricing
    mrp: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    mop: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    mfw_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    gst_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    batches = relationship("Batch", back_populates="product", order_by="Batch.id")
    stock_transactions = relationship("StockTransaction", back_populates="product")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("average_purchase_price >= 0", name="average_price_non_negative"),
        CheckConstraint(
            "tracking_type IN ('none', 'batch', 'serial')", name="tracking_type_valid"
        ),
        Index("idx_products_low_stock", "quantity", "low_stock_threshold"),
    )

    def __repr__(self) -> str:
        return (
            f"<Product(id={self.id}, code={self.product_code}, "
            f"qty={self.quantity}, tracking={self.tracking_type})>"
        )

    @property
    def is_low_stock(self) -> bool:
        """Check if product stock is at or below its threshold."""
        return self.quantity <= self.low_stock_threshold

    @property
    def stock_status(self) -> str:
        """Get human-readable stock status."""
        if self.quantity == 0:
            return "out_of_stock"
        elif self.is_low_stock:
            return "low_stock"
        else:
            return "in_stock"
