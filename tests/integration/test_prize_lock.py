"""
Integration tests for prize locking at tournament creation and prize release
"""

import pytest

from tourneyhub.core.errors import (
    AlreadyReleased, Forbidden, InsufficientFunds, InvalidInput, InvalidTransition,
    LedgerError, NothingLocked, OrganizerNotFound,
)
from tourneyhub.models.enums import OperationStatus, TransactionType
from tourneyhub.services.prize_lock import release_prize
from tourneyhub.services.results import ExplicitWinners, WinnerEntry, declare_result
from tests.fixtures.database import (
    after_end, before_deadline, create_test_organizer, create_test_player, create_test_tournament,
    fetch_operations, fetch_organizer, fetch_tournament, fetch_transactions, finished_schedule,
    open_schedule, register_players, total_money,
)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_tournament_locks_prize(async_session):
    """Organizer with 10000 creates a tournament with a 3000 prize pool."""
    organizer_id = await create_test_organizer(async_session, wallet_balance=10000)

    tournament = await create_test_tournament(async_session, organizer_id, prize_pool=3000)

    assert tournament["prizeLocked"] == 3000
    assert tournament["prizePool"] == 3000
    assert tournament["status"] == "registration-open"
    assert tournament["participants"] == []

    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.wallet_balance == 7000
    assert organizer.locked_prize_pool == 3000
    assert organizer.tournaments_organized == 1
    assert organizer.total_prize_pools == 3000

    locks = await fetch_transactions(async_session, organizer_id, TransactionType.LOCK)
    assert len(locks) == 1
    assert locks[0].amount == 3000
    assert locks[0].reference == f"prize_lock_{tournament['id']}"

    operations = await fetch_operations(async_session)
    assert len(operations) == 1
    assert operations[0].status == OperationStatus.APPLIED.value
    assert operations[0].steps == ["lock-funds", "create-tournament", "record-lock", "organizer-stats"]
    assert locks[0].operation_id == operations[0].id


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_tournament_insufficient_funds(async_session):
    organizer_id = await create_test_organizer(async_session, wallet_balance=2000)

    with pytest.raises(InsufficientFunds):
        await create_test_tournament(async_session, organizer_id, prize_pool=3000)

    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.wallet_balance == 2000
    assert organizer.locked_prize_pool == 0
    assert await fetch_transactions(async_session, organizer_id) == []

    operations = await fetch_operations(async_session)
    assert [op.status for op in operations] == [OperationStatus.REJECTED.value]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_tournament_unknown_organizer(async_session):
    with pytest.raises(OrganizerNotFound):
        await create_test_tournament(async_session, "org_missing")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_create_tournament_validation(async_session):
    organizer_id = await create_test_organizer(async_session, wallet_balance=10000)
    schedule = open_schedule()

    with pytest.raises(InvalidInput):
        await create_test_tournament(async_session, organizer_id, prize_pool=999)

    bad_dates = dict(schedule, end_date=schedule["start_date"])
    with pytest.raises(InvalidInput):
        await create_test_tournament(async_session, organizer_id, schedule=bad_dates)

    late_deadline = dict(schedule, registration_deadline=schedule["start_date"])
    with pytest.raises(InvalidInput):
        await create_test_tournament(async_session, organizer_id, schedule=late_deadline)

    with pytest.raises(InvalidInput):
        await create_test_tournament(async_session, organizer_id, prize_distribution="60-thirty")

    with pytest.raises(InvalidInput):
        await create_test_tournament(async_session, organizer_id, game="chess")

    with pytest.raises(InvalidInput):
        await create_test_tournament(async_session, organizer_id, status="completed")

    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.wallet_balance == 10000
    assert organizer.locked_prize_pool == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_failed_tournament_insert_is_compensated(async_session, monkeypatch):
    """A failure after the funds moved puts them back."""
    import tourneyhub.services.prize_lock as prize_lock

    organizer_id = await create_test_organizer(async_session, wallet_balance=10000)

    async def broken_create_transaction(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(prize_lock, "create_transaction", broken_create_transaction)

    with pytest.raises(LedgerError) as exc_info:
        await create_test_tournament(async_session, organizer_id, prize_pool=3000)
    assert exc_info.value.status_code == 500

    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.wallet_balance == 10000
    assert organizer.locked_prize_pool == 0

    operations = await fetch_operations(async_session)
    assert operations[0].status == OperationStatus.COMPENSATED.value
    assert operations[0].compensated == ["create-tournament", "lock-funds"]


async def _completed_with_remainder(session):
    """Tournament with 3000 locked where only 2700 was paid out."""
    schedule = finished_schedule()
    organizer_id = await create_test_organizer(session, wallet_balance=10000)
    tournament = await create_test_tournament(session, organizer_id, prize_pool=3000, schedule=schedule)
    players = [await create_test_player(session) for _ in range(3)]
    await register_players(session, tournament["id"], players, before_deadline(schedule))
    await declare_result(
        session, tournament["id"], organizer_id,
        ExplicitWinners([
            WinnerEntry(position=1, player_id=players[0]),
            WinnerEntry(position=2, player_id=players[1]),
        ]),
        now=after_end(schedule)
    )
    return organizer_id, tournament["id"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_release_prize_returns_remainder(async_session):
    organizer_id, tournament_id = await _completed_with_remainder(async_session)
    money_before = await total_money(async_session)

    result = await release_prize(async_session, tournament_id, organizer_id, note="Third place no-show")

    assert result["released"] == 300
    assert result["tournament"]["prizeLocked"] == 0
    assert result["tournament"]["prizeReleaseNote"] == "Third place no-show"
    assert result["tournament"]["prizeReleasedAt"] is not None

    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.wallet_balance == 7300
    assert organizer.locked_prize_pool == 0

    releases = await fetch_transactions(async_session, organizer_id, TransactionType.RELEASE)
    assert [t.amount for t in releases] == [300]
    assert await total_money(async_session) == money_before


@pytest.mark.integration
@pytest.mark.asyncio
async def test_release_prize_only_once(async_session):
    organizer_id, tournament_id = await _completed_with_remainder(async_session)
    await release_prize(async_session, tournament_id, organizer_id)

    with pytest.raises(AlreadyReleased):
        await release_prize(async_session, tournament_id, organizer_id)

    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.wallet_balance == 7300


@pytest.mark.integration
@pytest.mark.asyncio
async def test_release_prize_requires_organizer(async_session):
    organizer_id, tournament_id = await _completed_with_remainder(async_session)
    other_id = await create_test_organizer(async_session, name="Other")

    with pytest.raises(Forbidden):
        await release_prize(async_session, tournament_id, other_id)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_release_prize_before_results(async_session):
    organizer_id = await create_test_organizer(async_session, wallet_balance=10000)
    tournament = await create_test_tournament(async_session, organizer_id)

    with pytest.raises(InvalidTransition):
        await release_prize(async_session, tournament["id"], organizer_id)

    stored = await fetch_tournament(async_session, tournament["id"])
    assert stored.prize_locked == 3000


@pytest.mark.integration
@pytest.mark.asyncio
async def test_release_prize_nothing_left(async_session):
    schedule = finished_schedule()
    organizer_id = await create_test_organizer(async_session, wallet_balance=10000)
    tournament = await create_test_tournament(async_session, organizer_id, prize_pool=3000, schedule=schedule)
    players = [await create_test_player(async_session) for _ in range(3)]
    await register_players(async_session, tournament["id"], players, before_deadline(schedule))
    await declare_result(
        async_session, tournament["id"], organizer_id,
        ExplicitWinners([WinnerEntry(position=1, player_id=players[0], prize=3000)]),
        now=after_end(schedule)
    )

    with pytest.raises(NothingLocked):
        await release_prize(async_session, tournament["id"], organizer_id)
