"""
Ledger transaction model
"""

from sqlalchemy import Column, String, Integer, BigInteger, DateTime, CheckConstraint, Index
from sqlalchemy import JSON
from tourneyhub.core.timeutils import utcnow, isoformat
from tourneyhub.db.base import Base


class Transaction(Base):
    """Append-only ledger entry for one balance-affecting event"""
    __tablename__ = "transactions"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), nullable=False, unique=True)
    user_id = Column(String(64), nullable=False)
    user_type = Column(String(16), nullable=False)
    tx_type = Column(String(32), nullable=False)
    amount = Column(BigInteger, nullable=False)
    currency = Column(String(16), nullable=False, default='INR')
    reference = Column(String(128), nullable=False, default='')
    operation_id = Column(String(64), nullable=True, index=True)
    tx_metadata = Column('metadata', JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint('amount >= 0', name='chk_transaction_amount_nonneg'),
        Index('idx_transactions_user_created', 'user_id', 'user_type', 'created_at'),
        Index('idx_transactions_user_reference', 'user_id', 'reference'),
    )

    def __repr__(self):
        return f"<Transaction(id={self.id}, user_id={self.user_id}, type={self.tx_type}, amount={self.amount})>"

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "userType": self.user_type,
            "type": self.tx_type,
            "amount": self.amount,
            "currency": self.currency,
            "reference": self.reference,
            "operationId": self.operation_id,
            "meta": self.tx_metadata or {},
            "timestamp": isoformat(self.created_at),
        }
