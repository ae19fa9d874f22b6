"""
Integration tests for the operation journal reconciliation sweep
"""

from datetime import timedelta

import pytest

from tourneyhub.core.timeutils import utcnow
from tourneyhub.db.session import unit_of_work
from tourneyhub.models.enums import OperationKind, OperationStatus, TransactionType, UserType
from tourneyhub.repos.operation_repo import close_operation, get_operation, open_operation
from tourneyhub.repos.transaction_repo import create_transaction
from tourneyhub.services.reconciliation import reconcile_operations
from tests.fixtures.database import create_test_player


@pytest.mark.integration
@pytest.mark.asyncio
async def test_stale_pending_operations_are_resolved(async_session):
    player_id = await create_test_player(async_session)

    committed = await open_operation(async_session, OperationKind.DEPOSIT, player_id)
    async with unit_of_work(async_session):
        await create_transaction(
            async_session, player_id, UserType.PLAYER, TransactionType.DEPOSIT, 100,
            reference="manual_deposit", operation_id=committed
        )
    lost = await open_operation(async_session, OperationKind.WITHDRAW, player_id)

    summary = await reconcile_operations(async_session, now=utcnow() + timedelta(hours=1))

    assert summary == {"applied": [committed], "abandoned": [lost], "manual": []}
    assert (await get_operation(async_session, committed)).status == OperationStatus.APPLIED.value
    assert (await get_operation(async_session, lost)).status == OperationStatus.ABANDONED.value


@pytest.mark.integration
@pytest.mark.asyncio
async def test_recent_pending_operations_are_left_alone(async_session):
    operation_id = await open_operation(async_session, OperationKind.REGISTER, "trn_recent")

    summary = await reconcile_operations(async_session, older_than_minutes=10)

    assert summary == {"applied": [], "abandoned": [], "manual": []}
    assert (await get_operation(async_session, operation_id)).status == OperationStatus.PENDING.value


@pytest.mark.integration
@pytest.mark.asyncio
async def test_flagged_operations_are_reported(async_session):
    operation_id = await open_operation(async_session, OperationKind.DECLARE_RESULT, "trn_broken")
    await close_operation(
        async_session, operation_id, OperationStatus.RECONCILE,
        steps=["credit-winner-1"], error="compensation failed"
    )

    summary = await reconcile_operations(async_session, now=utcnow() + timedelta(hours=1))

    assert summary["manual"] == [operation_id]
    assert (await get_operation(async_session, operation_id)).status == OperationStatus.RECONCILE.value
