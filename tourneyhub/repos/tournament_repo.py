"""
Tournament repository for tournament, participant and winner rows
"""

from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, desc
from sqlalchemy.orm.exc import StaleDataError

from tourneyhub.core.errors import ConcurrentModification, TournamentNotFound
from tourneyhub.models.tournament import Tournament, TournamentParticipant, TournamentWinner


async def get_tournament_by_id(
    session: AsyncSession,
    tournament_id: str,
    for_update: bool = False
) -> Optional[Tournament]:
    """
    Get tournament by application id.

    Args:
        session: Database session
        tournament_id: Tournament id
        for_update: Lock the row for the rest of the transaction

    Returns:
        Tournament instance or None if not found
    """
    query = select(Tournament).where(Tournament.id == tournament_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def lock_tournament(session: AsyncSession, tournament_id: str) -> Tournament:
    tournament = await get_tournament_by_id(session, tournament_id, for_update=True)
    if tournament is None:
        raise TournamentNotFound(tournament_id=tournament_id)
    return tournament


async def flush_tournament(session: AsyncSession, tournament_id: str) -> None:
    """Flush pending tournament changes under the optimistic version check"""
    try:
        await session.flush()
    except StaleDataError:
        raise ConcurrentModification(tournament_id=tournament_id)


async def list_tournaments(
    session: AsyncSession,
    search: Optional[str] = None,
    game: Optional[str] = None,
    status: Optional[str] = None,
    organizer_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> Tuple[List[Tournament], int]:
    """
    List tournaments, newest first.

    Returns:
        (page of tournaments, total matching count)
    """
    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(
            Tournament.tournament_name.ilike(pattern),
            Tournament.organizer_name.ilike(pattern)
        ))
    if game:
        conditions.append(Tournament.game == game)
    if status:
        conditions.append(Tournament.status == status)
    if organizer_id:
        conditions.append(Tournament.organizer_id == organizer_id)

    total = await session.scalar(select(func.count()).select_from(Tournament).where(*conditions))
    result = await session.execute(
        select(Tournament)
        .where(*conditions)
        .order_by(desc(Tournament.created_at))
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all(), total or 0


async def get_participants(session: AsyncSession, tournament_id: str) -> List[TournamentParticipant]:
    """Participants in registration order"""
    result = await session.execute(
        select(TournamentParticipant)
        .where(TournamentParticipant.tournament_id == tournament_id)
        .order_by(TournamentParticipant.seq)
    )
    return result.scalars().all()


async def get_participant(
    session: AsyncSession,
    tournament_id: str,
    player_id: str
) -> Optional[TournamentParticipant]:
    result = await session.execute(
        select(TournamentParticipant).where(
            TournamentParticipant.tournament_id == tournament_id,
            TournamentParticipant.player_id == player_id
        )
    )
    return result.scalar_one_or_none()


async def count_participants(session: AsyncSession, tournament_id: str) -> int:
    total = await session.scalar(
        select(func.count())
        .select_from(TournamentParticipant)
        .where(TournamentParticipant.tournament_id == tournament_id)
    )
    return total or 0


async def add_participant(
    session: AsyncSession,
    tournament_id: str,
    player_id: str,
    player_name: str,
    team_name: str
) -> TournamentParticipant:
    participant = TournamentParticipant(
        tournament_id=tournament_id,
        player_id=player_id,
        player_name=player_name,
        team_name=team_name
    )
    session.add(participant)
    await session.flush()
    return participant


async def get_winners(session: AsyncSession, tournament_id: str) -> List[TournamentWinner]:
    result = await session.execute(
        select(TournamentWinner)
        .where(TournamentWinner.tournament_id == tournament_id)
        .order_by(TournamentWinner.position)
    )
    return result.scalars().all()


async def add_winner(
    session: AsyncSession,
    tournament_id: str,
    position: int,
    player_id: str,
    player_name: str,
    team_name: str,
    prize: int
) -> TournamentWinner:
    winner = TournamentWinner(
        tournament_id=tournament_id,
        position=position,
        player_id=player_id,
        player_name=player_name,
        team_name=team_name,
        prize=prize
    )
    session.add(winner)
    await session.flush()
    return winner


async def delete_tournament_row(session: AsyncSession, tournament: Tournament) -> None:
    tournament_id = tournament.id
    await session.delete(tournament)
    await flush_tournament(session, tournament_id)
