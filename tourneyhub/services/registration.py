"""
Tournament registration with entry-fee transfer.

The fee moves from the player's wallet to the organizer's wallet before the
player is added to the participant list. If anything after the player debit
fails, the saga refunds the player and deletes the ``deduct`` ledger entry.
"""

from datetime import datetime
from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.errors import (
    AlreadyRegistered, InsufficientFunds, InvalidInput, LedgerError, TournamentFull,
)
from tourneyhub.core.metrics import REGISTRATION_COUNT
from tourneyhub.models.enums import OperationKind, TransactionType, UserType
from tourneyhub.repos.tournament_repo import (
    add_participant, count_participants, flush_tournament, get_participant,
    get_participants, get_tournament_by_id, lock_tournament,
)
from tourneyhub.repos.transaction_repo import create_transaction, delete_transaction_by_reference
from tourneyhub.repos.wallet_repo import adjust_balance, lock_wallet_owner
from tourneyhub.services.lifecycle import ensure_registration_open
from tourneyhub.services.saga import Saga, run_operation

# Configure logging
logger = logging.getLogger(__name__)


def fee_reference(tournament_id: str) -> str:
    return f"entry_fee_{tournament_id}"


def fee_credit_reference(tournament_id: str, player_id: str) -> str:
    return f"entry_fee_{tournament_id}_{player_id}"


async def _debit_player_fee(session: AsyncSession, tournament_id: str, player_id: str, fee: int, operation_id: str):
    await adjust_balance(session, UserType.PLAYER, player_id, -fee)
    await create_transaction(
        session, player_id, UserType.PLAYER, TransactionType.DEDUCT, fee,
        reference=fee_reference(tournament_id),
        tx_metadata={"tournamentId": tournament_id},
        operation_id=operation_id
    )


async def _refund_player_fee(session: AsyncSession, tournament_id: str, player_id: str, fee: int):
    await adjust_balance(session, UserType.PLAYER, player_id, fee)
    deleted = await delete_transaction_by_reference(
        session, player_id, fee_reference(tournament_id), TransactionType.DEDUCT
    )
    logger.error(
        f"Refunded entry fee {fee} to player {player_id} for tournament {tournament_id} "
        f"({deleted} deduct entries removed)"
    )


async def _credit_organizer_fee(
    session: AsyncSession,
    tournament_id: str,
    organizer_id: str,
    player_id: str,
    fee: int,
    operation_id: str
):
    await adjust_balance(session, UserType.ORGANIZER, organizer_id, fee)
    await create_transaction(
        session, organizer_id, UserType.ORGANIZER, TransactionType.FEE_CREDIT, fee,
        reference=fee_credit_reference(tournament_id, player_id),
        tx_metadata={"tournamentId": tournament_id, "playerId": player_id},
        operation_id=operation_id
    )


async def _reverse_organizer_fee(
    session: AsyncSession,
    tournament_id: str,
    organizer_id: str,
    player_id: str,
    fee: int
):
    await adjust_balance(session, UserType.ORGANIZER, organizer_id, -fee)
    await delete_transaction_by_reference(
        session, organizer_id, fee_credit_reference(tournament_id, player_id), TransactionType.FEE_CREDIT
    )


async def register_player(
    session: AsyncSession,
    tournament_id: str,
    player_id: str,
    player_name: Optional[str] = None,
    team_name: Optional[str] = None,
    now: Optional[datetime] = None
) -> dict:
    """
    Register a player for a tournament, collecting the entry fee if any.

    Args:
        session: Database session
        tournament_id: Tournament to join
        player_id: Registering player
        player_name: Display name (default: the player's full name)
        team_name: Team name (default: the player name)
        now: Current time, for deadline checks

    Returns:
        Dictionary with the updated tournament, the new participant and the
        fee paid

    Raises:
        AlreadyRegistered: player is already a participant (checked first)
        RegistrationClosed, RegistrationDeadlinePassed, TournamentFull
        PlayerNotFound, InsufficientFunds
    """

    async def body(saga: Saga) -> dict:
        tournament = await lock_tournament(session, tournament_id)

        if await get_participant(session, tournament_id, player_id) is not None:
            raise AlreadyRegistered(tournament_id=tournament_id, player_id=player_id)

        ensure_registration_open(tournament, now)

        organizer_id = tournament.organizer_id
        await lock_wallet_owner(session, UserType.ORGANIZER, organizer_id)
        player = await lock_wallet_owner(session, UserType.PLAYER, player_id)

        if player.age < tournament.min_age:
            raise InvalidInput(f"Players must be at least {tournament.min_age} years old")

        fee = tournament.entry_fee if tournament.has_entry_fee and tournament.entry_fee > 0 else 0
        if fee and player.wallet_balance < fee:
            logger.warning(
                f"Player {player_id} cannot pay entry fee {fee} for {tournament_id}: "
                f"balance {player.wallet_balance}"
            )
            raise InsufficientFunds(
                "Insufficient wallet balance to pay the entry fee",
                player_id=player_id
            )

        name = (player_name or '').strip() or player.display_name
        team = (team_name or '').strip() or name

        if fee:
            await saga.step(
                "deduct-fee",
                lambda: _debit_player_fee(session, tournament_id, player_id, fee, saga.operation_id),
                lambda: _refund_player_fee(session, tournament_id, player_id, fee)
            )
            await saga.step(
                "credit-organizer",
                lambda: _credit_organizer_fee(
                    session, tournament_id, organizer_id, player_id, fee, saga.operation_id
                ),
                lambda: _reverse_organizer_fee(session, tournament_id, organizer_id, player_id, fee)
            )

            async def collect_fee():
                locked = await lock_tournament(session, tournament_id)
                locked.entry_fee_collected += fee
                await flush_tournament(session, tournament_id)

            async def uncollect_fee():
                locked = await lock_tournament(session, tournament_id)
                locked.entry_fee_collected -= fee
                await flush_tournament(session, tournament_id)

            await saga.step("collect-fee", collect_fee, uncollect_fee)

        async def append_participant():
            try:
                await add_participant(session, tournament_id, player_id, name, team)
            except IntegrityError:
                raise AlreadyRegistered(tournament_id=tournament_id, player_id=player_id)

            locked = await lock_tournament(session, tournament_id)
            total = await count_participants(session, tournament_id)
            if total > locked.max_teams:
                raise TournamentFull(tournament_id=tournament_id)
            locked.current_participants = total
            await flush_tournament(session, tournament_id)

        async def remove_participant():
            participant = await get_participant(session, tournament_id, player_id)
            if participant is not None:
                await session.delete(participant)
                await session.flush()
            locked = await lock_tournament(session, tournament_id)
            locked.current_participants = await count_participants(session, tournament_id)
            await flush_tournament(session, tournament_id)

        await saga.step("add-participant", append_participant, remove_participant)

        async def update_player_stats():
            owner = await lock_wallet_owner(session, UserType.PLAYER, player_id)
            owner.tournaments_participated += 1
            await session.flush()

        await saga.step("player-stats", update_player_stats)

        updated = await get_tournament_by_id(session, tournament_id)
        participants = await get_participants(session, tournament_id)
        participant = next(p for p in participants if p.player_id == player_id)
        return {
            "tournament": updated.to_dict(participants=participants),
            "participant": participant.to_dict(),
            "entryFeePaid": fee,
        }

    try:
        result = await run_operation(
            session, OperationKind.REGISTER, tournament_id, body, meta={"playerId": player_id}
        )
    except LedgerError as exc:
        REGISTRATION_COUNT.labels(status=exc.code).inc()
        raise

    REGISTRATION_COUNT.labels(status="success").inc()
    logger.info(
        f"Player {player_id} registered for tournament {tournament_id} "
        f"(entry fee {result['entryFeePaid']})"
    )
    return result
