"""
Result declaration and prize distribution.

Winners are either supplied by the organizer (ExplicitWinners) or drawn
uniformly at random from the participants (RandomWinners). Either way the
prizes are paid out of the tournament's locked prize, the organizer's locked
pool is debited by the same total and the tournament becomes completed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Union
import logging
import random

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.config import settings
from tourneyhub.core.errors import InsufficientEscrow, InvalidInput
from tourneyhub.core.metrics import PRIZE_DISTRIBUTED
from tourneyhub.core.timeutils import utcnow
from tourneyhub.models.enums import (
    OperationKind, TournamentStatus, TransactionType, UserType, WinnerSelection,
)
from tourneyhub.models.tournament import TournamentWinner
from tourneyhub.repos.tournament_repo import (
    add_winner, flush_tournament, get_participants, get_tournament_by_id, get_winners, lock_tournament,
)
from tourneyhub.repos.transaction_repo import create_transaction, delete_transaction_by_reference
from tourneyhub.repos.wallet_repo import adjust_balance, adjust_locked_pool, lock_wallet_owner
from tourneyhub.services.distribution import compute_prizes, parse_distribution
from tourneyhub.services.lifecycle import ensure_declarable
from tourneyhub.services.saga import Saga, run_operation

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class WinnerEntry:
    """One organizer-supplied winner; prize defaults to the distribution amount"""
    position: int
    player_id: str
    prize: Optional[int] = None


@dataclass
class ExplicitWinners:
    winners: List[WinnerEntry]


@dataclass
class RandomWinners:
    count: Optional[int] = None
    rng: Optional[random.Random] = field(default=None, repr=False)


WinnerSelectionMode = Union[ExplicitWinners, RandomWinners]


@dataclass
class PlannedWinner:
    position: int
    player_id: str
    player_name: str
    team_name: str
    prize: int


def build_selection(
    mode: Optional[str] = None,
    winners: Optional[Sequence[dict]] = None,
    count: Optional[int] = None
) -> WinnerSelectionMode:
    """
    Turn request fields into a selection mode.

    ``mode`` defaults to settings.default_winner_selection.
    """
    try:
        selection = WinnerSelection(mode or settings.default_winner_selection)
    except ValueError:
        raise InvalidInput(f"Unknown winner selection mode: {mode}")

    if selection is WinnerSelection.RANDOM:
        return RandomWinners(count=count)

    if not winners:
        raise InvalidInput("Winners are required for explicit result declaration")
    entries = []
    for item in winners:
        try:
            entries.append(WinnerEntry(
                position=int(item["position"]),
                player_id=str(item["playerId"]),
                prize=None if item.get("prize") is None else int(item["prize"])
            ))
        except (KeyError, TypeError, ValueError):
            raise InvalidInput("Each winner needs a position and a playerId")
    return ExplicitWinners(winners=entries)


def plan_winners(
    selection: WinnerSelectionMode,
    participants: Sequence,
    amounts: List[int],
    prize_locked: int
) -> List[PlannedWinner]:
    """
    Resolve winners and prizes without touching any balance.

    Raises:
        InvalidInput: duplicate positions or players, unknown players,
            negative prizes, bad count, or prizes above the locked budget
    """
    by_player = {p.player_id: p for p in participants}

    def amount_for(position: int) -> int:
        return amounts[position - 1] if position <= len(amounts) else 0

    if isinstance(selection, RandomWinners):
        count = selection.count if selection.count is not None else len(amounts)
        if count < 1 or count > len(participants):
            raise InvalidInput(f"Cannot pick {count} winners from {len(participants)} participants")
        rng = selection.rng or random
        drawn = rng.sample(list(participants), count)
        planned = [
            PlannedWinner(index + 1, p.player_id, p.player_name, p.team_name, amount_for(index + 1))
            for index, p in enumerate(drawn)
        ]
    else:
        positions = [entry.position for entry in selection.winners]
        players = [entry.player_id for entry in selection.winners]
        if not selection.winners:
            raise InvalidInput("At least one winner is required")
        if len(set(positions)) != len(positions):
            raise InvalidInput("Winner positions must be unique")
        if len(set(players)) != len(players):
            raise InvalidInput("A player can only hold one winning position")

        planned = []
        for entry in sorted(selection.winners, key=lambda e: e.position):
            if entry.position < 1:
                raise InvalidInput("Winner positions start at 1")
            participant = by_player.get(entry.player_id)
            if participant is None:
                raise InvalidInput(f"Player {entry.player_id} is not a participant")
            prize = amount_for(entry.position) if entry.prize is None else entry.prize
            if prize < 0:
                raise InvalidInput("Prizes cannot be negative")
            planned.append(PlannedWinner(
                entry.position, participant.player_id, participant.player_name, participant.team_name, prize
            ))

    total = sum(w.prize for w in planned)
    if total > prize_locked:
        raise InvalidInput(f"Total prize {total} exceeds the locked prize {prize_locked}")
    return planned


def prize_reference(tournament_id: str, position: int) -> str:
    return f"prize_{tournament_id}_{position}"


async def _credit_winner(
    session: AsyncSession,
    tournament_id: str,
    winner: PlannedWinner,
    operation_id: str
):
    await adjust_balance(session, UserType.PLAYER, winner.player_id, winner.prize)
    if winner.prize > 0:
        await create_transaction(
            session, winner.player_id, UserType.PLAYER, TransactionType.PRIZE_CREDIT, winner.prize,
            reference=prize_reference(tournament_id, winner.position),
            tx_metadata={"tournamentId": tournament_id, "position": winner.position},
            operation_id=operation_id
        )
    player = await lock_wallet_owner(session, UserType.PLAYER, winner.player_id)
    player.total_earnings += winner.prize
    if winner.position == 1:
        player.tournaments_won += 1
    await session.flush()


async def _reverse_winner(session: AsyncSession, tournament_id: str, winner: PlannedWinner):
    player = await lock_wallet_owner(session, UserType.PLAYER, winner.player_id)
    player.total_earnings -= winner.prize
    if winner.position == 1:
        player.tournaments_won -= 1
    await session.flush()
    await adjust_balance(session, UserType.PLAYER, winner.player_id, -winner.prize)
    await delete_transaction_by_reference(
        session, winner.player_id, prize_reference(tournament_id, winner.position), TransactionType.PRIZE_CREDIT
    )


async def declare_result(
    session: AsyncSession,
    tournament_id: str,
    organizer_id: str,
    selection: WinnerSelectionMode,
    now: Optional[datetime] = None
) -> dict:
    """
    Declare results and distribute the locked prize.

    Preconditions, first failure wins: caller is the organizer, results not
    declared yet, the match has finished, enough participants.

    Args:
        session: Database session
        tournament_id: Tournament id
        organizer_id: Caller; must be the tournament's organizer
        selection: ExplicitWinners or RandomWinners
        now: Current time (default: now, UTC)

    Returns:
        Dictionary with the completed tournament, its winners and the total
        prize distributed
    """
    declared_at = now or utcnow()

    async def body(saga: Saga) -> dict:
        tournament = await lock_tournament(session, tournament_id)
        participants = await get_participants(session, tournament_id)
        ensure_declarable(tournament, organizer_id, len(participants), declared_at)

        percentages = parse_distribution(tournament.prize_distribution)
        amounts = compute_prizes(tournament.prize_locked, percentages)
        planned = plan_winners(selection, participants, amounts, tournament.prize_locked)
        total_prize = sum(w.prize for w in planned)
        previous_status = tournament.status

        organizer = await lock_wallet_owner(session, UserType.ORGANIZER, organizer_id)
        if organizer.locked_prize_pool < total_prize:
            logger.warning(
                f"Organizer {organizer_id} locked pool {organizer.locked_prize_pool} "
                f"cannot cover {total_prize} for tournament {tournament_id}"
            )
            raise InsufficientEscrow(organizer_id=organizer_id, tournament_id=tournament_id)

        for player_id in sorted({w.player_id for w in planned}):
            await lock_wallet_owner(session, UserType.PLAYER, player_id)

        for winner in planned:
            await saga.step(
                f"credit-winner-{winner.position}",
                lambda winner=winner: _credit_winner(session, tournament_id, winner, saga.operation_id),
                lambda winner=winner: _reverse_winner(session, tournament_id, winner)
            )

        async def debit_escrow():
            await adjust_locked_pool(session, organizer_id, -total_prize)
            locked = await lock_tournament(session, tournament_id)
            locked.prize_locked -= total_prize
            await flush_tournament(session, tournament_id)

        async def restore_escrow():
            locked = await lock_tournament(session, tournament_id)
            locked.prize_locked += total_prize
            await flush_tournament(session, tournament_id)
            await adjust_locked_pool(session, organizer_id, total_prize)

        await saga.step("debit-escrow", debit_escrow, restore_escrow)

        async def complete_tournament():
            for winner in planned:
                await add_winner(
                    session, tournament_id, winner.position, winner.player_id,
                    winner.player_name, winner.team_name, winner.prize
                )
            locked = await lock_tournament(session, tournament_id)
            locked.result_declared_at = declared_at
            locked.status = TournamentStatus.COMPLETED.value
            await flush_tournament(session, tournament_id)

        async def reopen_tournament():
            await session.execute(
                delete(TournamentWinner).where(TournamentWinner.tournament_id == tournament_id)
            )
            locked = await lock_tournament(session, tournament_id)
            locked.result_declared_at = None
            locked.status = previous_status
            await flush_tournament(session, tournament_id)

        await saga.step("complete-tournament", complete_tournament, reopen_tournament)

        async def record_distribution():
            await create_transaction(
                session, organizer_id, UserType.ORGANIZER, TransactionType.PRIZE_DISTRIBUTE, total_prize,
                reference=f"prize_distribute_{tournament_id}",
                tx_metadata={
                    "tournamentId": tournament_id,
                    "winners": [{"position": w.position, "playerId": w.player_id, "prize": w.prize} for w in planned],
                },
                operation_id=saga.operation_id
            )

        await saga.step("record-distribution", record_distribution)

        completed = await get_tournament_by_id(session, tournament_id)
        winners = await get_winners(session, tournament_id)
        return {
            "tournament": completed.to_dict(participants=participants, winners=winners),
            "winners": [w.to_dict() for w in winners],
            "totalPrize": total_prize,
        }

    mode = WinnerSelection.RANDOM if isinstance(selection, RandomWinners) else WinnerSelection.EXPLICIT
    result = await run_operation(
        session, OperationKind.DECLARE_RESULT, tournament_id, body,
        meta={"organizerId": organizer_id, "mode": mode.value}
    )
    PRIZE_DISTRIBUTED.inc(result["totalPrize"])
    logger.info(
        f"Declared results for tournament {tournament_id}: "
        f"{len(result['winners'])} winners, {result['totalPrize']} distributed"
    )
    return result
