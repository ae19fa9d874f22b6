"""
Player API endpoints
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.api.responses import ok, page_count
from tourneyhub.core.errors import AccountInUse, DuplicateEntity, InvalidInput, PlayerNotFound
from tourneyhub.db.session import get_db, unit_of_work
from tourneyhub.models.enums import Gender, PlayerStatus
from tourneyhub.repos.player_repo import (
    create_player, delete_player, get_player_by_email, get_player_by_id, get_player_stats,
    list_players, update_player,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class PlayerCreate(BaseModel):
    """Player registration request model"""
    first_name: str = Field(..., alias="firstName", min_length=2, max_length=50)
    last_name: str = Field(..., alias="lastName", min_length=2, max_length=50)
    email: str = Field(..., max_length=255)
    phone: str = Field(..., min_length=5, max_length=32)
    age: int = Field(..., ge=13, le=99)
    country: str = Field(..., min_length=2)
    gender: str = Field(..., description="male, female or other")

    class Config:
        populate_by_name = True


class PlayerUpdate(BaseModel):
    """Profile fields a player update may change; the wallet is not one of them"""
    first_name: Optional[str] = Field(None, alias="firstName", min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, alias="lastName", min_length=2, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, min_length=5, max_length=32)
    age: Optional[int] = Field(None, ge=13, le=99)
    country: Optional[str] = Field(None, min_length=2)
    gender: Optional[str] = None
    status: Optional[str] = Field(None, description="active, suspended or banned")

    class Config:
        populate_by_name = True


def _normalize_gender(value: str) -> str:
    try:
        return Gender(value.lower()).value
    except ValueError:
        raise InvalidInput(f"Invalid gender: {value}")


@router.post("/players", status_code=status.HTTP_201_CREATED)
async def create_player_endpoint(request: PlayerCreate, session: AsyncSession = Depends(get_db)):
    """
    Create a player with an empty wallet.
    """
    if "@" not in request.email:
        raise InvalidInput("Invalid email address")
    gender = _normalize_gender(request.gender)

    if await get_player_by_email(session, request.email) is not None:
        raise DuplicateEntity("Player with this email already exists")

    try:
        async with unit_of_work(session):
            player = await create_player(
                session,
                first_name=request.first_name,
                last_name=request.last_name,
                email=request.email,
                phone=request.phone,
                age=request.age,
                country=request.country,
                gender=gender
            )
    except IntegrityError:
        raise DuplicateEntity("Player with this email already exists")

    logger.info(f"Created player {player.id}")
    return ok(player.to_dict(), message="Player registered successfully")


@router.get("/players")
async def list_players_endpoint(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    session: AsyncSession = Depends(get_db)
):
    players, total = await list_players(
        session, search=search, status=status, limit=limit, offset=(page - 1) * limit
    )
    return ok(
        [p.to_dict() for p in players],
        total=total,
        page=page,
        totalPages=page_count(total, limit)
    )


@router.get("/players/{player_id}")
async def get_player_endpoint(player_id: str, session: AsyncSession = Depends(get_db)):
    player = await get_player_by_id(session, player_id)
    if player is None:
        raise PlayerNotFound(player_id=player_id)
    return ok(player.to_dict())


@router.put("/players/{player_id}")
async def update_player_endpoint(
    player_id: str,
    request: PlayerUpdate,
    session: AsyncSession = Depends(get_db)
):
    """
    Update a player's profile or status. Wallet fields are ignored.
    """
    fields = request.model_dump(exclude_none=True)
    if not fields:
        raise InvalidInput("No updatable fields supplied")

    if "email" in fields:
        if "@" not in fields["email"]:
            raise InvalidInput("Invalid email address")
        fields["email"] = fields["email"].strip().lower()
        existing = await get_player_by_email(session, fields["email"])
        if existing is not None and existing.id != player_id:
            raise DuplicateEntity("Player with this email already exists")
    if "gender" in fields:
        fields["gender"] = _normalize_gender(fields["gender"])
    if "status" in fields:
        try:
            fields["status"] = PlayerStatus(fields["status"]).value
        except ValueError:
            raise InvalidInput(f"Invalid player status: {fields['status']}")

    try:
        async with unit_of_work(session):
            player = await get_player_by_id(session, player_id, for_update=True)
            if player is None:
                raise PlayerNotFound(player_id=player_id)
            await update_player(session, player, **fields)
            data = player.to_dict()
    except IntegrityError:
        raise DuplicateEntity("Player with this email already exists")

    logger.info(f"Updated player {player_id}: {sorted(fields)}")
    return ok(data, message="Player updated successfully")


@router.delete("/players/{player_id}")
async def delete_player_endpoint(player_id: str, session: AsyncSession = Depends(get_db)):
    """
    Delete a player whose wallet is empty.
    """
    async with unit_of_work(session):
        player = await get_player_by_id(session, player_id, for_update=True)
        if player is None:
            raise PlayerNotFound(player_id=player_id)
        if player.wallet_balance != 0:
            raise AccountInUse(
                "Player wallet must be empty before deletion",
                player_id=player_id,
                balance=player.wallet_balance
            )
        await delete_player(session, player)

    logger.info(f"Deleted player {player_id}")
    return ok(message="Player deleted successfully")


@router.get("/players/stats/overview")
async def player_stats_endpoint(session: AsyncSession = Depends(get_db)):
    return ok(await get_player_stats(session))
