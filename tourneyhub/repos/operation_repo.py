"""
Operation journal repository.

Unlike the other repositories these functions commit: the journal row must be
durable independently of the business transaction it describes.
"""

from datetime import datetime
from typing import List, Optional, Sequence
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from tourneyhub.core.ids import OPERATION_PREFIX, generate_id
from tourneyhub.core.timeutils import utcnow
from tourneyhub.db.session import unit_of_work
from tourneyhub.models.enums import OperationKind, OperationStatus
from tourneyhub.models.ledger_operation import LedgerOperation

# Configure logging
logger = logging.getLogger(__name__)


async def open_operation(
    session: AsyncSession,
    kind: OperationKind,
    reference: str,
    meta: Optional[dict] = None
) -> str:
    """
    Commit a ``pending`` journal entry for an operation about to run.

    Returns:
        The operation id
    """
    operation_id = generate_id(OPERATION_PREFIX)
    async with unit_of_work(session):
        session.add(LedgerOperation(
            id=operation_id,
            kind=kind.value,
            reference=reference,
            status=OperationStatus.PENDING.value,
            steps=[],
            compensated=[],
            op_metadata=meta or {}
        ))
    logger.debug(f"Opened operation {operation_id} ({kind.value}, {reference})")
    return operation_id


async def set_operation_state(
    session: AsyncSession,
    operation_id: str,
    status: OperationStatus,
    steps: Optional[Sequence[str]] = None,
    compensated: Optional[Sequence[str]] = None,
    error: Optional[str] = None
) -> None:
    """
    Update a journal entry inside the caller's transaction.
    """
    values = {"status": status.value, "updated_at": utcnow()}
    if steps is not None:
        values["steps"] = list(steps)
    if compensated is not None:
        values["compensated"] = list(compensated)
    if error is not None:
        values["error"] = error

    await session.execute(
        update(LedgerOperation)
        .where(LedgerOperation.id == operation_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


async def close_operation(
    session: AsyncSession,
    operation_id: str,
    status: OperationStatus,
    steps: Optional[Sequence[str]] = None,
    compensated: Optional[Sequence[str]] = None,
    error: Optional[str] = None
) -> None:
    """
    Update a journal entry in its own transaction, after the business
    transaction has already committed or rolled back.
    """
    async with unit_of_work(session):
        await set_operation_state(session, operation_id, status, steps, compensated, error)


async def get_operation(session: AsyncSession, operation_id: str) -> Optional[LedgerOperation]:
    result = await session.execute(
        select(LedgerOperation)
        .where(LedgerOperation.id == operation_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_operations_by_status(
    session: AsyncSession,
    statuses: Sequence[OperationStatus],
    older_than: Optional[datetime] = None,
    limit: int = 100
) -> List[LedgerOperation]:
    """
    Get journal entries in the given statuses, oldest first.

    Args:
        session: Database session
        statuses: Statuses to match
        older_than: Only entries created before this instant (optional)
        limit: Maximum number of entries to return
    """
    query = select(LedgerOperation).where(
        LedgerOperation.status.in_([s.value for s in statuses])
    )
    if older_than is not None:
        query = query.where(LedgerOperation.created_at < older_than)

    result = await session.execute(
        query.order_by(LedgerOperation.created_at).limit(limit)
    )
    return result.scalars().all()
