"""
Tournament API endpoints
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.api.responses import ok, page_count
from tourneyhub.core.errors import InvalidInput, TournamentNotFound
from tourneyhub.db.session import get_db
from tourneyhub.models.enums import TournamentFormat, TournamentStatus
from tourneyhub.repos.tournament_repo import get_participants, get_tournament_by_id, get_winners, list_tournaments
from tourneyhub.services.lifecycle import change_status, delete_tournament, update_details, update_links
from tourneyhub.services.prize_lock import create_tournament, release_prize
from tourneyhub.services.registration import register_player
from tourneyhub.services.results import build_selection, declare_result

router = APIRouter()


class TournamentCreate(BaseModel):
    """Tournament creation request model"""
    organizer_id: str = Field(..., alias="organizerId", description="Organizer funding the prize pool")
    tournament_name: str = Field(..., alias="tournamentName", min_length=1, max_length=255)
    game: str = Field(..., description="pubg, valorant or cod")
    mode: str = Field(..., description="solo, duo or squad")
    format: str = Field(default=TournamentFormat.BATTLE_ROYALE.value)
    start_date: datetime = Field(..., alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    registration_deadline: datetime = Field(..., alias="registrationDeadline")
    max_teams: int = Field(..., alias="maxTeams", ge=2)
    prize_pool: int = Field(..., alias="prizePool", description="Prize pool in minor units")
    prize_distribution: Optional[str] = Field(None, alias="prizeDistribution", description="e.g. 60-30-10")
    has_entry_fee: bool = Field(default=False, alias="hasEntryFee")
    entry_fee: int = Field(default=0, alias="entryFee", ge=0)
    min_age: int = Field(default=13, alias="minAge", ge=13, le=99)
    region: str = Field(default='global')
    rules: Optional[str] = None
    description: str = ''
    stream_url: str = Field(default='', alias="streamUrl")
    discord_url: str = Field(default='', alias="discordUrl")
    status: str = Field(default=TournamentStatus.REGISTRATION_OPEN.value)

    class Config:
        populate_by_name = True


class RegistrationRequest(BaseModel):
    """Registration request model"""
    player_id: str = Field(..., alias="playerId")
    player_name: Optional[str] = Field(None, alias="playerName")
    team_name: Optional[str] = Field(None, alias="teamName")

    class Config:
        populate_by_name = True


class TournamentUpdate(BaseModel):
    """Descriptive fields only; prize, fees, capacity, dates and status are not editable here"""
    organizer_id: str = Field(..., alias="organizerId")
    tournament_name: Optional[str] = Field(None, alias="tournamentName", min_length=1, max_length=255)
    description: Optional[str] = None
    rules: Optional[str] = None
    region: Optional[str] = Field(None, min_length=1, max_length=64)
    format: Optional[str] = None

    class Config:
        populate_by_name = True


class LinksUpdate(BaseModel):
    organizer_id: str = Field(..., alias="organizerId")
    stream_url: Optional[str] = Field(None, alias="streamUrl")
    discord_url: Optional[str] = Field(None, alias="discordUrl")

    class Config:
        populate_by_name = True


class StatusUpdate(BaseModel):
    organizer_id: str = Field(..., alias="organizerId")
    status: str

    class Config:
        populate_by_name = True


class WinnerInput(BaseModel):
    """Explicit winner entry"""
    position: int = Field(..., ge=1)
    player_id: str = Field(..., alias="playerId")
    prize: Optional[int] = Field(None, ge=0, description="Defaults to the distribution amount")

    class Config:
        populate_by_name = True


class DeclareResultRequest(BaseModel):
    """Result declaration request model"""
    organizer_id: str = Field(..., alias="organizerId")
    mode: Optional[str] = Field(None, description="explicit or random")
    winners: Optional[List[WinnerInput]] = Field(None, description="Winners for explicit mode")
    count: Optional[int] = Field(None, ge=1, description="Number of winners for random mode")

    class Config:
        populate_by_name = True


class ReleasePrizeRequest(BaseModel):
    organizer_id: str = Field(..., alias="organizerId")
    note: Optional[str] = Field(None, max_length=1000)

    class Config:
        populate_by_name = True


@router.post("/tournaments", status_code=status.HTTP_201_CREATED)
async def create_tournament_endpoint(
    request: TournamentCreate,
    session: AsyncSession = Depends(get_db)
):
    """
    Create a tournament and lock its prize pool from the organizer's wallet.
    """
    tournament = await create_tournament(
        session,
        organizer_id=request.organizer_id,
        tournament_name=request.tournament_name,
        game=request.game,
        mode=request.mode,
        start_date=request.start_date,
        registration_deadline=request.registration_deadline,
        max_teams=request.max_teams,
        prize_pool=request.prize_pool,
        end_date=request.end_date,
        format=request.format,
        prize_distribution=request.prize_distribution,
        has_entry_fee=request.has_entry_fee,
        entry_fee=request.entry_fee,
        min_age=request.min_age,
        region=request.region,
        rules=request.rules,
        description=request.description,
        stream_url=request.stream_url,
        discord_url=request.discord_url,
        status=request.status
    )
    return ok(tournament, message="Tournament created and prize pool locked")


@router.get("/tournaments")
async def list_tournaments_endpoint(
    search: Optional[str] = Query(None),
    game: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    organizer_id: Optional[str] = Query(None, alias="organizerId"),
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    session: AsyncSession = Depends(get_db)
):
    """
    List tournaments with filters and pagination.
    """
    tournaments, total = await list_tournaments(
        session,
        search=search,
        game=game,
        status=status,
        organizer_id=organizer_id,
        limit=limit,
        offset=(page - 1) * limit
    )
    return ok(
        [t.to_dict() for t in tournaments],
        total=total,
        page=page,
        totalPages=page_count(total, limit)
    )


@router.get("/tournaments/{tournament_id}")
async def get_tournament_endpoint(tournament_id: str, session: AsyncSession = Depends(get_db)):
    tournament = await get_tournament_by_id(session, tournament_id)
    if tournament is None:
        raise TournamentNotFound(tournament_id=tournament_id)

    participants = await get_participants(session, tournament_id)
    winners = await get_winners(session, tournament_id)
    return ok(tournament.to_dict(participants=participants, winners=winners))


@router.put("/tournaments/{tournament_id}")
async def update_tournament_endpoint(
    tournament_id: str,
    request: TournamentUpdate,
    session: AsyncSession = Depends(get_db)
):
    fields = request.model_dump(exclude={"organizer_id"}, exclude_none=True)
    if not fields:
        raise InvalidInput("No updatable fields supplied")

    tournament = await update_details(session, tournament_id, request.organizer_id, **fields)
    return ok(tournament, message="Tournament updated successfully")


@router.delete("/tournaments/{tournament_id}")
async def delete_tournament_endpoint(
    tournament_id: str,
    organizer_id: str = Query(..., alias="organizerId"),
    session: AsyncSession = Depends(get_db)
):
    """
    Delete a tournament with no locked prize and no participants.
    """
    await delete_tournament(session, tournament_id, organizer_id)
    return ok(message="Tournament deleted successfully")


@router.post("/tournaments/{tournament_id}/register")
async def register_endpoint(
    tournament_id: str,
    request: RegistrationRequest,
    session: AsyncSession = Depends(get_db)
):
    """
    Register a player, transferring the entry fee to the organizer if the
    tournament charges one.
    """
    result = await register_player(
        session,
        tournament_id,
        request.player_id,
        player_name=request.player_name,
        team_name=request.team_name
    )
    return ok(result, message="Successfully registered for tournament")


@router.put("/tournaments/{tournament_id}/links")
async def update_links_endpoint(
    tournament_id: str,
    request: LinksUpdate,
    session: AsyncSession = Depends(get_db)
):
    tournament = await update_links(
        session,
        tournament_id,
        request.organizer_id,
        stream_url=request.stream_url,
        discord_url=request.discord_url
    )
    return ok(tournament, message="Tournament links updated")


@router.put("/tournaments/{tournament_id}/status")
async def update_status_endpoint(
    tournament_id: str,
    request: StatusUpdate,
    session: AsyncSession = Depends(get_db)
):
    tournament = await change_status(session, tournament_id, request.organizer_id, request.status)
    return ok(tournament, message=f"Tournament status changed to {tournament['status']}")


@router.post("/tournaments/{tournament_id}/declare-result")
async def declare_result_endpoint(
    tournament_id: str,
    request: DeclareResultRequest,
    session: AsyncSession = Depends(get_db)
):
    """
    Declare results and distribute the locked prize.

    ``mode`` selects explicit winners (``winners`` required) or a random draw
    of ``count`` participants; omitted, the configured default applies.
    """
    winners = None
    if request.winners is not None:
        winners = [w.model_dump(by_alias=True) for w in request.winners]
    selection = build_selection(request.mode, winners, request.count)

    result = await declare_result(session, tournament_id, request.organizer_id, selection)
    return ok(result, message="Results declared and prizes distributed")


@router.post("/tournaments/{tournament_id}/release-prize")
async def release_prize_endpoint(
    tournament_id: str,
    request: ReleasePrizeRequest,
    session: AsyncSession = Depends(get_db)
):
    """
    Release the undistributed prize of a completed tournament back to the
    organizer's wallet.
    """
    result = await release_prize(session, tournament_id, request.organizer_id, note=request.note)
    return ok(result, message="Prize released to organizer wallet")
