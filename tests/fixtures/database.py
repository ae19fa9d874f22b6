"""
Database-specific test fixtures and utilities
"""

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.timeutils import utcnow
from tourneyhub.db.session import unit_of_work
from tourneyhub.models.enums import OperationStatus, TransactionType
from tourneyhub.models.ledger_operation import LedgerOperation
from tourneyhub.models.organizer import Organizer
from tourneyhub.models.player import Player
from tourneyhub.models.tournament import Tournament, TournamentParticipant
from tourneyhub.models.transaction import Transaction
from tourneyhub.repos.organizer_repo import create_organizer
from tourneyhub.repos.player_repo import create_player
from tourneyhub.services.prize_lock import create_tournament
from tourneyhub.services.registration import register_player


async def create_test_organizer(session: AsyncSession, wallet_balance: int = 10000, name: str = "Test Organizer") -> str:
    """Create an organizer with a funded wallet and return its id."""
    async with unit_of_work(session):
        organizer = await create_organizer(
            session,
            name=name,
            email=f"org-{uuid4().hex[:10]}@example.com",
            phone="+910000000000",
            experience="Five years of LAN events",
            organization_name=f"{name} Esports",
            wallet_balance=wallet_balance
        )
        organizer_id = organizer.id
    return organizer_id


async def create_test_player(
    session: AsyncSession,
    wallet_balance: int = 0,
    first_name: str = "Test",
    last_name: str = "Player",
    age: int = 21
) -> str:
    """Create a player with the given wallet balance and return its id."""
    async with unit_of_work(session):
        player = await create_player(
            session,
            first_name=first_name,
            last_name=last_name,
            email=f"ply-{uuid4().hex[:10]}@example.com",
            phone="+910000000000",
            age=age,
            country="India",
            gender="male",
            wallet_balance=wallet_balance
        )
        player_id = player.id
    return player_id


def open_schedule(now: Optional[datetime] = None) -> dict:
    """Dates for a tournament whose registration is still open."""
    now = now or utcnow()
    return {
        "registration_deadline": now + timedelta(days=1),
        "start_date": now + timedelta(days=2),
        "end_date": now + timedelta(days=2, hours=3),
    }


def finished_schedule(now: Optional[datetime] = None) -> dict:
    """Dates for a tournament that has already ended."""
    now = now or utcnow()
    return {
        "registration_deadline": now - timedelta(days=3),
        "start_date": now - timedelta(days=2),
        "end_date": now - timedelta(days=2) + timedelta(hours=3),
    }


def before_deadline(schedule: dict) -> datetime:
    return schedule["registration_deadline"] - timedelta(hours=1)


def after_end(schedule: dict) -> datetime:
    return schedule["end_date"] + timedelta(hours=1)


async def create_test_tournament(
    session: AsyncSession,
    organizer_id: str,
    prize_pool: int = 3000,
    entry_fee: int = 0,
    max_teams: int = 16,
    schedule: Optional[dict] = None,
    **kwargs
) -> dict:
    """Create a tournament through the prize lock service."""
    schedule = schedule or open_schedule()
    return await create_tournament(
        session,
        organizer_id=organizer_id,
        tournament_name=kwargs.pop("tournament_name", "Test Cup"),
        game=kwargs.pop("game", "pubg"),
        mode=kwargs.pop("mode", "squad"),
        max_teams=max_teams,
        prize_pool=prize_pool,
        has_entry_fee=entry_fee > 0,
        entry_fee=entry_fee,
        **schedule,
        **kwargs
    )


async def fetch_player(session: AsyncSession, player_id: str) -> Player:
    """Re-read a player from the database."""
    result = await session.execute(
        select(Player).where(Player.id == player_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def fetch_organizer(session: AsyncSession, organizer_id: str) -> Organizer:
    result = await session.execute(
        select(Organizer).where(Organizer.id == organizer_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def fetch_tournament(session: AsyncSession, tournament_id: str) -> Tournament:
    result = await session.execute(
        select(Tournament).where(Tournament.id == tournament_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def count_participants(session: AsyncSession, tournament_id: str) -> int:
    return await session.scalar(
        select(func.count()).select_from(TournamentParticipant)
        .where(TournamentParticipant.tournament_id == tournament_id)
    )


async def fetch_transactions(
    session: AsyncSession,
    user_id: str,
    tx_type: Optional[TransactionType] = None
) -> List[Transaction]:
    query = select(Transaction).where(Transaction.user_id == user_id)
    if tx_type is not None:
        query = query.where(Transaction.tx_type == tx_type.value)
    result = await session.execute(query.order_by(Transaction.seq).execution_options(populate_existing=True))
    return result.scalars().all()


async def fetch_operations(session: AsyncSession, status: Optional[OperationStatus] = None) -> List[LedgerOperation]:
    query = select(LedgerOperation)
    if status is not None:
        query = query.where(LedgerOperation.status == status.value)
    result = await session.execute(
        query.order_by(LedgerOperation.created_at).execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def total_money(session: AsyncSession) -> int:
    """Sum of every wallet balance plus every locked prize pool."""
    players = await session.scalar(select(func.coalesce(func.sum(Player.wallet_balance), 0)))
    organizers = await session.scalar(
        select(func.coalesce(func.sum(Organizer.wallet_balance + Organizer.locked_prize_pool), 0))
    )
    return int(players) + int(organizers)


async def register_players(session: AsyncSession, tournament_id: str, player_ids: List[str], now: datetime):
    """Register several players, in order."""
    for player_id in player_ids:
        await register_player(session, tournament_id, player_id, now=now)


async def run_in_session(session_factory, fn, *args, **kwargs):
    """Call ``fn`` with a short-lived session, for seeding data around API calls."""
    async with session_factory() as session:
        return await fn(session, *args, **kwargs)
