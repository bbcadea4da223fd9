"""
Stock transaction model for inventory tracking and movement history.
"""
from typing import Optional
from decimal import Decimal
from sqlalchemy import String, Integer, Numeric, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopledger.core.database import Base


TX_PURCHASE = "purchase"
TX_SALE = "sale"
TX_SALE_RETURN = "sale_return"
TX_ADJUSTMENT = "adjustment"
TX_ASSIGN = "assign"
TX_RELEASE = "release"


class StockTransaction(Base):
    """One row per stock movement or tracking conversion. Never updated."""

    __tablename__ = "stock_transactions"

    # Foreign keys
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    batch_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("product_batches.id", ondelete="SET NULL"),
        nullable=True
    )
    serial_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("product_serials.id", ondelete="SET NULL"),
        nullable=True
    )

    # Transaction details
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)  # signed
    # Product-level quantity around the movement
    quantity_before: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_after: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4), nullable=True)

    # Adjustment category, e.g. 'Damaged', 'Theft', 'Stocktaking'
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    product = relationship("Product", back_populates="stock_transactions")

    # Indexes
    __table_args__ = (
        Index("idx_stock_transactions_type", "transaction_type"),
        Index("idx_stock_transactions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<StockTransaction(id={self.id}, type={self.transaction_type}, qty={self.quantity})>"
