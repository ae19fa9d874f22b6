"""
Reconciliation of the operation journal.

An entry still ``pending`` well after it was opened means the process died
between committing the intent and finishing the business transaction. Ledger
entries tagged with the operation id prove the transaction committed, so the
entry is marked ``applied``; otherwise nothing was written and it is marked
``abandoned``. Entries flagged ``reconcile`` need a human and are only
reported.
"""

from datetime import datetime, timedelta
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.config import settings
from tourneyhub.core.metrics import RECONCILED_COUNT
from tourneyhub.core.timeutils import utcnow
from tourneyhub.models.enums import OperationStatus
from tourneyhub.repos.operation_repo import close_operation, get_operations_by_status
from tourneyhub.repos.transaction_repo import get_transactions_by_operation

# Configure logging
logger = logging.getLogger(__name__)


async def reconcile_operations(
    session: AsyncSession,
    now: Optional[datetime] = None,
    older_than_minutes: Optional[int] = None,
    limit: int = 100
) -> dict:
    """
    Resolve stale pending journal entries.

    Args:
        session: Database session
        now: Current time (default: now, UTC)
        older_than_minutes: Age after which a pending entry is stale
            (default: settings.reconcile_after_minutes)
        limit: Maximum entries to resolve in one run

    Returns:
        Summary with the ids resolved as applied or abandoned and the ids
        awaiting manual reconciliation
    """
    now = now or utcnow()
    minutes = settings.reconcile_after_minutes if older_than_minutes is None else older_than_minutes
    cutoff = now - timedelta(minutes=minutes)

    stale = await get_operations_by_status(session, [OperationStatus.PENDING], older_than=cutoff, limit=limit)
    stale_ids = [op.id for op in stale]

    applied, abandoned = [], []
    for operation_id in stale_ids:
        evidence = await get_transactions_by_operation(session, operation_id)
        if evidence:
            await close_operation(
                session, operation_id, OperationStatus.APPLIED,
                error="Resolved by reconciliation: ledger entries found"
            )
            applied.append(operation_id)
        else:
            await close_operation(
                session, operation_id, OperationStatus.ABANDONED,
                error="Resolved by reconciliation: no ledger entries found"
            )
            abandoned.append(operation_id)

    flagged = await get_operations_by_status(session, [OperationStatus.RECONCILE], limit=limit)
    manual = [op.id for op in flagged]
    if session.in_transaction():
        await session.commit()

    RECONCILED_COUNT.labels(status=OperationStatus.APPLIED.value).inc(len(applied))
    RECONCILED_COUNT.labels(status=OperationStatus.ABANDONED.value).inc(len(abandoned))
    if applied or abandoned:
        logger.warning(
            f"Reconciled {len(applied)} pending operations as applied, {len(abandoned)} as abandoned"
        )
    for operation_id in manual:
        logger.critical(f"Operation {operation_id} still requires manual reconciliation")

    return {"applied": applied, "abandoned": abandoned, "manual": manual}
