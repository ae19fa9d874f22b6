"""
Player repository
"""

from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, desc
from sqlalchemy.orm.exc import StaleDataError

from tourneyhub.core.errors import ConcurrentModification, InvalidInput
from tourneyhub.core.ids import PLAYER_PREFIX, generate_id
from tourneyhub.models.enums import PlayerStatus
from tourneyhub.models.player import Player

# Columns a profile update may touch; wallet_balance is not one of them
PROFILE_FIELDS = frozenset({
    "first_name", "last_name", "email", "phone", "age", "country", "gender", "status",
})


async def create_player(
    session: AsyncSession,
    first_name: str,
    last_name: str,
    email: str,
    phone: str,
    age: int,
    country: str,
    gender: str,
    player_id: Optional[str] = None,
    wallet_balance: int = 0
) -> Player:
    """
    Create a new player (flushed, not committed).

    ``wallet_balance`` is only for seeding; live balances change through
    the wallet repository.
    """
    player = Player(
        id=player_id or generate_id(PLAYER_PREFIX),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email.strip().lower(),
        phone=phone.strip(),
        age=age,
        country=country.strip(),
        gender=gender,
        wallet_balance=wallet_balance
    )
    session.add(player)
    await session.flush()
    return player


async def get_player_by_id(session: AsyncSession, player_id: str, for_update: bool = False) -> Optional[Player]:
    query = select(Player).where(Player.id == player_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_player_by_email(session: AsyncSession, email: str) -> Optional[Player]:
    result = await session.execute(
        select(Player).where(Player.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def list_players(
    session: AsyncSession,
    search: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> Tuple[List[Player], int]:
    """
    List players, newest first.

    Returns:
        (page of players, total matching count)
    """
    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(
            Player.first_name.ilike(pattern),
            Player.last_name.ilike(pattern),
            Player.email.ilike(pattern)
        ))
    if status:
        conditions.append(Player.status == status)

    total = await session.scalar(select(func.count()).select_from(Player).where(*conditions))
    result = await session.execute(
        select(Player).where(*conditions).order_by(desc(Player.created_at)).limit(limit).offset(offset)
    )
    return result.scalars().all(), total or 0


async def update_player(session: AsyncSession, player: Player, **fields) -> Player:
    """
    Apply profile changes to a player (flushed, not committed).

    Raises:
        InvalidInput: for a field outside PROFILE_FIELDS
        ConcurrentModification: if the row changed since it was loaded
    """
    for name, value in fields.items():
        if name not in PROFILE_FIELDS:
            raise InvalidInput(f"Field {name} cannot be updated")
        setattr(player, name, value.strip() if isinstance(value, str) else value)

    try:
        await session.flush()
    except StaleDataError:
        raise ConcurrentModification(player_id=player.id)
    return player


async def delete_player(session: AsyncSession, player: Player) -> None:
    await session.delete(player)
    try:
        await session.flush()
    except StaleDataError:
        raise ConcurrentModification(player_id=player.id)


async def get_player_stats(session: AsyncSession, top_countries: int = 10) -> dict:
    """
    Player counts grouped by status and by country.

    Returns:
        Dictionary with total, active, byStatus and topCountries
    """
    result = await session.execute(
        select(Player.status, func.count()).group_by(Player.status)
    )
    by_status = {status: count for status, count in result.all()}

    country_count = func.count().label("count")
    result = await session.execute(
        select(Player.country, country_count)
        .group_by(Player.country)
        .order_by(desc(country_count), Player.country)
        .limit(top_countries)
    )
    countries = [{"country": country, "count": count} for country, count in result.all()]

    return {
        "total": sum(by_status.values()),
        "active": by_status.get(PlayerStatus.ACTIVE.value, 0),
        "byStatus": by_status,
        "topCountries": countries,
    }
