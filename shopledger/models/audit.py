"""
Audit log model. Rows are appended by the audit recorder and never changed.
"""
from datetime import datetime
from sqlalchemy import String, Text, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from shopledger.core.database import Base


class AuditLog(Base):
    """Audit log for tracking every inbound request."""

    __tablename__ = "audit_logs"

    method: Mapped[str] = mapped_column(String(10), nullable=False)
    endpoint: Mapped[str] = mapped_column(String(2048), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    # Note: No relationships, entries must survive deletion of whatever they mention

    __table_args__ = (
        Index("idx_audit_logs_timestamp", "timestamp"),
        Index("idx_audit_logs_endpoint", "endpoint"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, method={self.method}, endpoint={self.endpoint})>"
