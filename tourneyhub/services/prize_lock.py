"""
Prize lock manager.

Tournament creation moves the prize pool out of the organizer's wallet into
the organizer's locked prize pool and records it on the tournament as
``prize_locked``. After results are declared the organizer can release
whatever is left back to the wallet.
"""

from datetime import datetime
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.config import settings
from tourneyhub.core.errors import InsufficientFunds, InvalidInput
from tourneyhub.core.ids import TOURNAMENT_PREFIX, generate_id
from tourneyhub.core.timeutils import ensure_utc, utcnow
from tourneyhub.models.enums import (
    Game, GameMode, OperationKind, TournamentFormat, TournamentStatus, TransactionType, UserType,
)
from tourneyhub.models.tournament import Tournament
from tourneyhub.repos.tournament_repo import flush_tournament, get_tournament_by_id, lock_tournament
from tourneyhub.repos.transaction_repo import create_transaction, delete_transaction_by_reference
from tourneyhub.repos.wallet_repo import adjust_balance, adjust_locked_pool, lock_wallet_owner
from tourneyhub.services.distribution import parse_distribution
from tourneyhub.services.lifecycle import ensure_releasable, validate_schedule
from tourneyhub.services.saga import Saga, run_operation

# Configure logging
logger = logging.getLogger(__name__)

INITIAL_STATUSES = {TournamentStatus.UPCOMING, TournamentStatus.REGISTRATION_OPEN}


def lock_reference(tournament_id: str) -> str:
    return f"prize_lock_{tournament_id}"


def release_reference(tournament_id: str) -> str:
    return f"prize_release_{tournament_id}"


def _enum_value(enum_cls, value, field: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        raise InvalidInput(f"Invalid {field}: {value}")


async def create_tournament(
    session: AsyncSession,
    organizer_id: str,
    tournament_name: str,
    game: str,
    mode: str,
    start_date: datetime,
    registration_deadline: datetime,
    max_teams: int,
    prize_pool: int,
    end_date: Optional[datetime] = None,
    format: str = TournamentFormat.BATTLE_ROYALE.value,
    prize_distribution: Optional[str] = None,
    has_entry_fee: bool = False,
    entry_fee: int = 0,
    min_age: int = 13,
    region: str = 'global',
    rules: Optional[str] = None,
    description: str = '',
    stream_url: str = '',
    discord_url: str = '',
    status: str = TournamentStatus.REGISTRATION_OPEN.value
) -> dict:
    """
    Create a tournament and lock its prize pool.

    Args:
        session: Database session
        organizer_id: Organizer funding the prize pool
        prize_pool: Amount to lock, in minor units
        (remaining arguments are the tournament's descriptive fields)

    Returns:
        The created tournament as a dictionary

    Raises:
        InvalidInput: bad dates, prize pool below the minimum, bad distribution
        OrganizerNotFound: organizer does not exist
        InsufficientFunds: organizer wallet below the prize pool
    """
    tournament_name = (tournament_name or '').strip()
    distribution = prize_distribution or settings.default_prize_distribution

    async def body(saga: Saga) -> dict:
        if not tournament_name:
            raise InvalidInput("Tournament name is required")
        validate_schedule(start_date, end_date, registration_deadline)
        if prize_pool < settings.min_prize_pool:
            raise InvalidInput(f"Prize pool must be at least {settings.min_prize_pool}")
        if max_teams < 2:
            raise InvalidInput("Tournament must allow at least 2 teams")
        if entry_fee < 0:
            raise InvalidInput("Entry fee cannot be negative")
        parse_distribution(distribution)
        initial_status = TournamentStatus(_enum_value(TournamentStatus, status, "status"))
        if initial_status not in INITIAL_STATUSES:
            raise InvalidInput(f"A new tournament cannot start as {initial_status.value}")
        game_value = _enum_value(Game, game, "game")
        mode_value = _enum_value(GameMode, mode, "mode")
        format_value = _enum_value(TournamentFormat, format, "format")

        organizer = await lock_wallet_owner(session, UserType.ORGANIZER, organizer_id)
        if organizer.wallet_balance < prize_pool:
            logger.warning(
                f"Organizer {organizer_id} cannot lock {prize_pool}: balance {organizer.wallet_balance}"
            )
            raise InsufficientFunds(
                "Insufficient wallet balance to lock the prize pool",
                organizer_id=organizer_id
            )
        organizer_name = organizer.organization_name or organizer.name
        tournament_id = generate_id(TOURNAMENT_PREFIX)

        async def lock_funds():
            await adjust_balance(session, UserType.ORGANIZER, organizer_id, -prize_pool)
            await adjust_locked_pool(session, organizer_id, prize_pool)

        async def unlock_funds():
            await adjust_locked_pool(session, organizer_id, -prize_pool)
            await adjust_balance(session, UserType.ORGANIZER, organizer_id, prize_pool)

        await saga.step("lock-funds", lock_funds, unlock_funds)

        async def persist_tournament():
            session.add(Tournament(
                id=tournament_id,
                tournament_name=tournament_name,
                organizer_id=organizer_id,
                organizer_name=organizer_name,
                game=game_value,
                mode=mode_value,
                format=format_value,
                start_date=ensure_utc(start_date),
                end_date=ensure_utc(end_date),
                registration_deadline=ensure_utc(registration_deadline),
                max_teams=max_teams,
                current_participants=0,
                prize_pool=prize_pool,
                prize_distribution=distribution,
                has_entry_fee=has_entry_fee,
                entry_fee=entry_fee if has_entry_fee else 0,
                min_age=min_age,
                region=region,
                rules=rules or 'Standard tournament rules apply.',
                description=description,
                stream_url=stream_url,
                discord_url=discord_url,
                status=initial_status.value,
                entry_fee_collected=0,
                prize_locked=prize_pool
            ))
            await flush_tournament(session, tournament_id)

        async def discard_tournament():
            tournament = await lock_tournament(session, tournament_id)
            await session.delete(tournament)
            await session.flush()

        await saga.step("create-tournament", persist_tournament, discard_tournament)

        async def record_lock():
            await create_transaction(
                session, organizer_id, UserType.ORGANIZER, TransactionType.LOCK, prize_pool,
                reference=lock_reference(tournament_id),
                tx_metadata={"tournamentId": tournament_id, "tournamentName": tournament_name},
                operation_id=saga.operation_id
            )

        async def discard_lock_record():
            await delete_transaction_by_reference(
                session, organizer_id, lock_reference(tournament_id), TransactionType.LOCK
            )

        await saga.step("record-lock", record_lock, discard_lock_record)

        async def update_organizer_stats():
            owner = await lock_wallet_owner(session, UserType.ORGANIZER, organizer_id)
            owner.tournaments_organized += 1
            owner.total_prize_pools += prize_pool
            await session.flush()

        await saga.step("organizer-stats", update_organizer_stats)

        tournament = await get_tournament_by_id(session, tournament_id)
        return tournament.to_dict(participants=[], winners=[])

    data = await run_operation(
        session, OperationKind.CREATE_TOURNAMENT, organizer_id, body,
        meta={"prizePool": prize_pool, "tournamentName": tournament_name}
    )
    logger.info(f"Organizer {organizer_id} created tournament {data['id']} with {prize_pool} locked")
    return data


async def release_prize(
    session: AsyncSession,
    tournament_id: str,
    organizer_id: str,
    note: Optional[str] = None,
    now: Optional[datetime] = None
) -> dict:
    """
    Return the undistributed remainder of a completed tournament's prize to
    the organizer's wallet.

    Raises:
        TournamentNotFound, Forbidden, AlreadyReleased, NothingLocked,
        InvalidTransition (results not declared yet)
    """

    async def body(saga: Saga) -> dict:
        tournament = await lock_tournament(session, tournament_id)
        ensure_releasable(tournament, organizer_id)
        amount = tournament.prize_locked
        await lock_wallet_owner(session, UserType.ORGANIZER, organizer_id)
        released_at = now or utcnow()

        async def close_escrow():
            locked = await lock_tournament(session, tournament_id)
            locked.prize_locked -= amount
            locked.prize_released_at = released_at
            locked.prize_release_note = (note or '').strip()
            await flush_tournament(session, tournament_id)

        async def reopen_escrow():
            locked = await lock_tournament(session, tournament_id)
            locked.prize_locked += amount
            locked.prize_released_at = None
            locked.prize_release_note = ''
            await flush_tournament(session, tournament_id)

        await saga.step("close-escrow", close_escrow, reopen_escrow)

        async def return_funds():
            await adjust_locked_pool(session, organizer_id, -amount)
            await adjust_balance(session, UserType.ORGANIZER, organizer_id, amount)

        async def take_back_funds():
            await adjust_balance(session, UserType.ORGANIZER, organizer_id, -amount)
            await adjust_locked_pool(session, organizer_id, amount)

        await saga.step("return-funds", return_funds, take_back_funds)

        async def record_release():
            await create_transaction(
                session, organizer_id, UserType.ORGANIZER, TransactionType.RELEASE, amount,
                reference=release_reference(tournament_id),
                tx_metadata={"tournamentId": tournament_id, "note": (note or '').strip()},
                operation_id=saga.operation_id
            )

        await saga.step("record-release", record_release)

        released = await get_tournament_by_id(session, tournament_id)
        return {"tournament": released.to_dict(), "released": amount}

    result = await run_operation(session, OperationKind.RELEASE_PRIZE, tournament_id, body)
    logger.info(f"Released {result['released']} of tournament {tournament_id} to organizer {organizer_id}")
    return result
