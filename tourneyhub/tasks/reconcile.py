"""
Ledger reconciliation tasks
"""

import asyncio
import logging

from tourneyhub.celery_app import celery
from tourneyhub.core.config import settings
from tourneyhub.db.session import build_engine, build_session_factory
from tourneyhub.services.reconciliation import reconcile_operations

logger = logging.getLogger(__name__)


@celery.task(bind=True, acks_late=True)
def reconcile_ledger(self, older_than_minutes=None):
    """
    Resolve stale pending journal entries and report entries that need
    manual reconciliation.

    Args:
        older_than_minutes: Override for settings.reconcile_after_minutes
    """
    try:
        result = asyncio.run(reconcile_ledger_async(older_than_minutes))
        logger.info(
            f"Reconciliation finished: {len(result['applied'])} applied, "
            f"{len(result['abandoned'])} abandoned, {len(result['manual'])} awaiting manual review"
        )
        return result
    except Exception as e:
        logger.error(f"Error reconciling ledger: {e}")
        raise


async def reconcile_ledger_async(older_than_minutes=None, database_url=None):
    """
    Async helper for reconciliation.

    A dedicated engine is used because each Celery run gets a new event loop.
    """
    engine = build_engine(database_url or settings.database_url)
    session_factory = build_session_factory(engine)
    try:
        async with session_factory() as session:
            return await reconcile_operations(session, older_than_minutes=older_than_minutes)
    finally:
        await engine.dispose()
