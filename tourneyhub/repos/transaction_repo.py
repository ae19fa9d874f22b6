"""
Transaction repository for the append-only ledger
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, desc

from tourneyhub.core.config import settings
from tourneyhub.core.ids import TRANSACTION_PREFIX, generate_id
from tourneyhub.models.enums import TransactionType, UserType
from tourneyhub.models.transaction import Transaction


async def create_transaction(
    session: AsyncSession,
    user_id: str,
    user_type: UserType,
    tx_type: TransactionType,
    amount: int,
    reference: str = '',
    tx_metadata: Optional[dict] = None,
    operation_id: Optional[str] = None,
    currency: Optional[str] = None
) -> Transaction:
    """
    Append a ledger entry.

    Args:
        session: Database session
        user_id: Wallet owner id
        user_type: Player or organizer
        tx_type: Ledger entry type
        amount: Non-negative amount in minor units
        reference: Key used to locate the entry for audit or compensation
        tx_metadata: Additional metadata (optional)
        operation_id: Journal entry that produced this record (optional)
        currency: Currency code (default: settings.currency)

    Returns:
        Created Transaction instance (flushed, not committed)
    """
    transaction = Transaction(
        id=generate_id(TRANSACTION_PREFIX),
        user_id=user_id,
        user_type=user_type.value,
        tx_type=tx_type.value,
        amount=amount,
        currency=currency or settings.currency,
        reference=reference,
        operation_id=operation_id,
        tx_metadata=tx_metadata or {}
    )
    session.add(transaction)
    await session.flush()
    return transaction


async def get_transaction_by_id(session: AsyncSession, transaction_id: str) -> Optional[Transaction]:
    result = await session.execute(
        select(Transaction).where(Transaction.id == transaction_id)
    )
    return result.scalar_one_or_none()


async def get_transaction_by_reference(
    session: AsyncSession,
    user_id: str,
    reference: str,
    tx_type: Optional[TransactionType] = None
) -> Optional[Transaction]:
    """
    Get the most recent ledger entry for a user with the given reference.

    Args:
        session: Database session
        user_id: Wallet owner id
        reference: Reference key
        tx_type: Restrict to one entry type (optional)

    Returns:
        Transaction instance or None if not found
    """
    query = select(Transaction).where(
        Transaction.user_id == user_id,
        Transaction.reference == reference
    )
    if tx_type is not None:
        query = query.where(Transaction.tx_type == tx_type.value)

    result = await session.execute(query.order_by(desc(Transaction.seq)).limit(1))
    return result.scalar_one_or_none()


async def delete_transaction_by_reference(
    session: AsyncSession,
    user_id: str,
    reference: str,
    tx_type: TransactionType
) -> int:
    """
    Delete a just-created ledger entry located by its reference.

    Only compensation steps call this.

    Returns:
        Number of entries deleted
    """
    result = await session.execute(
        delete(Transaction).where(
            Transaction.user_id == user_id,
            Transaction.reference == reference,
            Transaction.tx_type == tx_type.value
        )
    )
    return result.rowcount


async def get_transactions_by_user(
    session: AsyncSession,
    user_id: str,
    user_type: UserType,
    limit: int = 50,
    offset: int = 0
) -> List[Transaction]:
    """
    Get ledger entries for a wallet owner, newest first.
    """
    result = await session.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id, Transaction.user_type == user_type.value)
        .order_by(desc(Transaction.created_at), desc(Transaction.seq))
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()


async def get_transactions_by_operation(session: AsyncSession, operation_id: str) -> List[Transaction]:
    result = await session.execute(
        select(Transaction)
        .where(Transaction.operation_id == operation_id)
        .order_by(Transaction.seq)
    )
    return result.scalars().all()
