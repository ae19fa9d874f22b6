"""
Integration tests for the wallet primitives and manual deposits/withdrawals

These tests verify the non-negative balance invariant, ledger entry emission
and the operation journal against a real database.
"""

import pytest

from tourneyhub.core.errors import (
    InsufficientEscrow, InsufficientFunds, InvalidInput, PlayerNotFound, UserNotFound,
)
from tourneyhub.db.session import unit_of_work
from tourneyhub.models.enums import OperationStatus, TransactionType, UserType
from tourneyhub.repos.transaction_repo import (
    create_transaction, delete_transaction_by_reference, get_transaction_by_reference,
)
from tourneyhub.repos.wallet_repo import adjust_balance, adjust_locked_pool
from tourneyhub.services.wallet import deposit, get_balance, get_transactions, withdraw
from tests.fixtures.database import (
    create_test_organizer, create_test_player, fetch_operations, fetch_organizer,
    fetch_player, fetch_transactions,
)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_adjust_balance_credit_and_debit(async_session):
    """Balance changes persist and return the new balance."""
    player_id = await create_test_player(async_session, wallet_balance=500)

    async with unit_of_work(async_session):
        assert await adjust_balance(async_session, UserType.PLAYER, player_id, 250) == 750
        assert await adjust_balance(async_session, UserType.PLAYER, player_id, -700) == 50

    player = await fetch_player(async_session, player_id)
    assert player.wallet_balance == 50


@pytest.mark.integration
@pytest.mark.asyncio
async def test_adjust_balance_never_goes_negative(async_session):
    player_id = await create_test_player(async_session, wallet_balance=100)

    with pytest.raises(InsufficientFunds):
        async with unit_of_work(async_session):
            await adjust_balance(async_session, UserType.PLAYER, player_id, -101)

    player = await fetch_player(async_session, player_id)
    assert player.wallet_balance == 100


@pytest.mark.integration
@pytest.mark.asyncio
async def test_adjust_balance_unknown_owner(async_session):
    with pytest.raises(PlayerNotFound):
        async with unit_of_work(async_session):
            await adjust_balance(async_session, UserType.PLAYER, "ply_missing", 10)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_locked_pool_never_goes_negative(async_session):
    organizer_id = await create_test_organizer(async_session, wallet_balance=0)

    async with unit_of_work(async_session):
        assert await adjust_locked_pool(async_session, organizer_id, 300) == 300

    with pytest.raises(InsufficientEscrow):
        async with unit_of_work(async_session):
            await adjust_locked_pool(async_session, organizer_id, -301)

    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.locked_prize_pool == 300


@pytest.mark.integration
@pytest.mark.asyncio
async def test_version_increments_on_every_write(async_session):
    player_id = await create_test_player(async_session, wallet_balance=0)
    before = (await fetch_player(async_session, player_id)).version

    async with unit_of_work(async_session):
        await adjust_balance(async_session, UserType.PLAYER, player_id, 10)
        await adjust_balance(async_session, UserType.PLAYER, player_id, 10)

    assert (await fetch_player(async_session, player_id)).version == before + 2


@pytest.mark.integration
@pytest.mark.asyncio
async def test_transaction_reference_lookup_and_delete(async_session):
    player_id = await create_test_player(async_session)

    async with unit_of_work(async_session):
        await create_transaction(
            async_session, player_id, UserType.PLAYER, TransactionType.DEDUCT, 200,
            reference="entry_fee_trn_x"
        )

    found = await get_transaction_by_reference(async_session, player_id, "entry_fee_trn_x", TransactionType.DEDUCT)
    assert found is not None
    assert found.amount == 200
    assert found.currency == "INR"

    async with unit_of_work(async_session):
        deleted = await delete_transaction_by_reference(
            async_session, player_id, "entry_fee_trn_x", TransactionType.DEDUCT
        )
    assert deleted == 1
    assert await fetch_transactions(async_session, player_id) == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_deposit_and_withdraw(async_session):
    player_id = await create_test_player(async_session)

    result = await deposit(async_session, player_id, "player", 1000)
    assert result["balance"] == 1000
    assert result["transaction"]["type"] == "deposit"
    assert result["transaction"]["reference"] == "manual_deposit"

    result = await withdraw(async_session, player_id, "player", 400)
    assert result["balance"] == 600
    assert result["transaction"]["type"] == "withdraw"

    player = await fetch_player(async_session, player_id)
    assert player.wallet_balance == 600

    applied = await fetch_operations(async_session, OperationStatus.APPLIED)
    assert [op.kind for op in applied] == ["deposit", "withdraw"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_withdraw_more_than_balance(async_session):
    organizer_id = await create_test_organizer(async_session, wallet_balance=100)

    with pytest.raises(InsufficientFunds):
        await withdraw(async_session, organizer_id, "organizer", 101)

    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.wallet_balance == 100
    assert await fetch_transactions(async_session, organizer_id) == []

    rejected = await fetch_operations(async_session, OperationStatus.REJECTED)
    assert len(rejected) == 1


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -5])
async def test_non_positive_amount_rejected(async_session, amount):
    player_id = await create_test_player(async_session)
    with pytest.raises(InvalidInput):
        await deposit(async_session, player_id, "player", amount)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unknown_user_and_bad_user_type(async_session):
    with pytest.raises(UserNotFound):
        await deposit(async_session, "ply_missing", "player", 10)
    with pytest.raises(InvalidInput):
        await deposit(async_session, "ply_missing", "admin", 10)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_balance_and_history_newest_first(async_session):
    organizer_id = await create_test_organizer(async_session, wallet_balance=0)
    await deposit(async_session, organizer_id, "organizer", 500)
    await deposit(async_session, organizer_id, "organizer", 300)
    await withdraw(async_session, organizer_id, "organizer", 100)

    balance = await get_balance(async_session, organizer_id, "organizer")
    assert balance == {
        "userId": organizer_id,
        "userType": "organizer",
        "walletBalance": 700,
        "lockedPrizePool": 0,
    }

    history = await get_transactions(async_session, organizer_id, "organizer")
    assert [(t["type"], t["amount"]) for t in history] == [("withdraw", 100), ("deposit", 300), ("deposit", 500)]
