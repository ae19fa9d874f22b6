"""
Operation journal model.

One row per business event (tournament creation, registration, result
declaration, prize release, deposit, withdraw). The row is committed as
``pending`` before the event's own transaction starts and records which saga
steps were applied and which were compensated.
"""

from sqlalchemy import Column, String, DateTime, Text, Index
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import UUID
from tourneyhub.core.timeutils import utcnow, isoformat
from tourneyhub.db.base import Base
from tourneyhub.models.enums import OperationStatus
import uuid


class LedgerOperation(Base):
    __tablename__ = "ledger_operations"

    pk = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    id = Column(String(64), nullable=False, unique=True)
    kind = Column(String(32), nullable=False)
    reference = Column(String(128), nullable=False)
    status = Column(String(16), nullable=False, default=OperationStatus.PENDING.value)
    steps = Column(JSON, nullable=False, default=list)
    compensated = Column(JSON, nullable=False, default=list)
    error = Column(Text, nullable=True)
    op_metadata = Column('metadata', JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_ledger_operations_status_created', 'status', 'created_at'),
    )

    def __repr__(self):
        return f"<LedgerOperation(id={self.id}, kind={self.kind}, status={self.status})>"

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind,
            "reference": self.reference,
            "status": self.status,
            "steps": list(self.steps or []),
            "compensated": list(self.compensated or []),
            "error": self.error,
            "meta": self.op_metadata or {},
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
