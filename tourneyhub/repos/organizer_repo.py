"""
Organizer repository
"""

from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, desc
from sqlalchemy.orm.exc import StaleDataError

from tourneyhub.core.errors import ConcurrentModification, InvalidInput
from tourneyhub.core.ids import ORGANIZER_PREFIX, generate_id
from tourneyhub.models.enums import OrganizerStatus
from tourneyhub.models.organizer import Organizer
from tourneyhub.models.tournament import Tournament

# Columns a profile update may touch; wallet and escrow are not among them
PROFILE_FIELDS = frozenset({
    "name", "email", "phone", "experience", "organization_name", "status",
})


async def create_organizer(
    session: AsyncSession,
    name: str,
    email: str,
    phone: str,
    experience: str,
    organization_name: str = '',
    organizer_id: Optional[str] = None,
    wallet_balance: int = 0
) -> Organizer:
    """
    Create a new organizer (flushed, not committed).
    """
    organizer = Organizer(
        id=organizer_id or generate_id(ORGANIZER_PREFIX),
        name=name.strip(),
        email=email.strip().lower(),
        phone=phone.strip(),
        experience=experience,
        organization_name=organization_name.strip(),
        wallet_balance=wallet_balance,
        locked_prize_pool=0
    )
    session.add(organizer)
    await session.flush()
    return organizer


async def get_organizer_by_id(
    session: AsyncSession,
    organizer_id: str,
    for_update: bool = False
) -> Optional[Organizer]:
    query = select(Organizer).where(Organizer.id == organizer_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_organizer_by_email(session: AsyncSession, email: str) -> Optional[Organizer]:
    result = await session.execute(
        select(Organizer).where(Organizer.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def list_organizers(
    session: AsyncSession,
    search: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> Tuple[List[Organizer], int]:
    """
    List organizers, newest first.

    Returns:
        (page of organizers, total matching count)
    """
    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(
            Organizer.name.ilike(pattern),
            Organizer.email.ilike(pattern),
            Organizer.organization_name.ilike(pattern)
        ))
    if status:
        conditions.append(Organizer.status == status)

    total = await session.scalar(select(func.count()).select_from(Organizer).where(*conditions))
    result = await session.execute(
        select(Organizer).where(*conditions).order_by(desc(Organizer.created_at)).limit(limit).offset(offset)
    )
    return result.scalars().all(), total or 0


async def update_organizer(session: AsyncSession, organizer: Organizer, **fields) -> Organizer:
    """
    Apply profile or status changes to an organizer (flushed, not committed).

    Raises:
        InvalidInput: for a field outside PROFILE_FIELDS
        ConcurrentModification: if the row changed since it was loaded
    """
    for name, value in fields.items():
        if name not in PROFILE_FIELDS:
            raise InvalidInput(f"Field {name} cannot be updated")
        setattr(organizer, name, value.strip() if isinstance(value, str) else value)

    try:
        await session.flush()
    except StaleDataError:
        raise ConcurrentModification(organizer_id=organizer.id)
    return organizer


async def count_organizer_tournaments(session: AsyncSession, organizer_id: str) -> int:
    total = await session.scalar(
        select(func.count()).select_from(Tournament).where(Tournament.organizer_id == organizer_id)
    )
    return total or 0


async def delete_organizer(session: AsyncSession, organizer: Organizer) -> None:
    await session.delete(organizer)
    try:
        await session.flush()
    except StaleDataError:
        raise ConcurrentModification(organizer_id=organizer.id)


async def get_organizer_stats(session: AsyncSession) -> dict:
    """Organizer counts grouped by status"""
    result = await session.execute(
        select(Organizer.status, func.count()).group_by(Organizer.status)
    )
    by_status = {status: count for status, count in result.all()}
    return {
        "total": sum(by_status.values()),
        "approved": by_status.get(OrganizerStatus.APPROVED.value, 0),
        "suspended": by_status.get(OrganizerStatus.SUSPENDED.value, 0),
        "byStatus": by_status,
    }
