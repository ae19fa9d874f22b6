"""
Organizer API endpoints
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.api.responses import ok, page_count
from tourneyhub.core.errors import AccountInUse, DuplicateEntity, InvalidInput, OrganizerNotFound
from tourneyhub.db.session import get_db, unit_of_work
from tourneyhub.models.enums import OrganizerStatus
from tourneyhub.repos.organizer_repo import (
    count_organizer_tournaments, create_organizer, delete_organizer, get_organizer_by_email,
    get_organizer_by_id, get_organizer_stats, list_organizers, update_organizer,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class OrganizerCreate(BaseModel):
    """Organizer registration request model"""
    name: str = Field(..., min_length=2, max_length=50)
    email: str = Field(..., max_length=255)
    phone: str = Field(..., min_length=5, max_length=32)
    experience: str = Field(..., min_length=1)
    organization_name: str = Field(default='', alias="organizationName", max_length=255)

    class Config:
        populate_by_name = True


class OrganizerUpdate(BaseModel):
    """Profile and status fields; wallet and locked prize pool are not updatable"""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, min_length=5, max_length=32)
    experience: Optional[str] = Field(None, min_length=1)
    organization_name: Optional[str] = Field(None, alias="organizationName", max_length=255)
    status: Optional[str] = Field(None, description="approved or suspended")

    class Config:
        populate_by_name = True


@router.post("/organizers", status_code=status.HTTP_201_CREATED)
async def create_organizer_endpoint(request: OrganizerCreate, session: AsyncSession = Depends(get_db)):
    """
    Create an organizer with an empty wallet and no locked prize pool.
    """
    if "@" not in request.email:
        raise InvalidInput("Invalid email address")
    if await get_organizer_by_email(session, request.email) is not None:
        raise DuplicateEntity("Organizer with this email already exists")

    try:
        async with unit_of_work(session):
            organizer = await create_organizer(
                session,
                name=request.name,
                email=request.email,
                phone=request.phone,
                experience=request.experience,
                organization_name=request.organization_name
            )
    except IntegrityError:
        raise DuplicateEntity("Organizer with this email already exists")

    logger.info(f"Created organizer {organizer.id}")
    return ok(organizer.to_dict(), message="Organizer registered successfully")


@router.get("/organizers")
async def list_organizers_endpoint(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    session: AsyncSession = Depends(get_db)
):
    organizers, total = await list_organizers(
        session, search=search, status=status, limit=limit, offset=(page - 1) * limit
    )
    return ok(
        [o.to_dict() for o in organizers],
        total=total,
        page=page,
        totalPages=page_count(total, limit)
    )


@router.get("/organizers/{organizer_id}")
async def get_organizer_endpoint(organizer_id: str, session: AsyncSession = Depends(get_db)):
    organizer = await get_organizer_by_id(session, organizer_id)
    if organizer is None:
        raise OrganizerNotFound(organizer_id=organizer_id)
    return ok(organizer.to_dict())


@router.put("/organizers/{organizer_id}")
async def update_organizer_endpoint(
    organizer_id: str,
    request: OrganizerUpdate,
    session: AsyncSession = Depends(get_db)
):
    """
    Update an organizer's profile, or approve / suspend the organizer.
    """
    fields = request.model_dump(exclude_none=True)
    if not fields:
        raise InvalidInput("No updatable fields supplied")

    if "email" in fields:
        if "@" not in fields["email"]:
            raise InvalidInput("Invalid email address")
        fields["email"] = fields["email"].strip().lower()
        existing = await get_organizer_by_email(session, fields["email"])
        if existing is not None and existing.id != organizer_id:
            raise DuplicateEntity("Organizer with this email already exists")
    if "status" in fields:
        try:
            fields["status"] = OrganizerStatus(fields["status"]).value
        except ValueError:
            raise InvalidInput(f"Invalid organizer status: {fields['status']}")

    try:
        async with unit_of_work(session):
            organizer = await get_organizer_by_id(session, organizer_id, for_update=True)
            if organizer is None:
                raise OrganizerNotFound(organizer_id=organizer_id)
            await update_organizer(session, organizer, **fields)
            data = organizer.to_dict()
    except IntegrityError:
        raise DuplicateEntity("Organizer with this email already exists")

    logger.info(f"Updated organizer {organizer_id}: {sorted(fields)}")
    return ok(data, message="Organizer updated successfully")


@router.delete("/organizers/{organizer_id}")
async def delete_organizer_endpoint(organizer_id: str, session: AsyncSession = Depends(get_db)):
    """
    Delete an organizer with an empty wallet, nothing locked and no tournaments.
    """
    async with unit_of_work(session):
        organizer = await get_organizer_by_id(session, organizer_id, for_update=True)
        if organizer is None:
            raise OrganizerNotFound(organizer_id=organizer_id)
        if organizer.wallet_balance != 0 or organizer.locked_prize_pool != 0:
            raise AccountInUse(
                "Organizer wallet and locked prize pool must be empty before deletion",
                organizer_id=organizer_id,
                balance=organizer.wallet_balance,
                locked=organizer.locked_prize_pool
            )
        if await count_organizer_tournaments(session, organizer_id) > 0:
            raise AccountInUse("Organizer still owns tournaments", organizer_id=organizer_id)
        await delete_organizer(session, organizer)

    logger.info(f"Deleted organizer {organizer_id}")
    return ok(message="Organizer deleted successfully")


@router.get("/organizers/stats/overview")
async def organizer_stats_endpoint(session: AsyncSession = Depends(get_db)):
    return ok(await get_organizer_stats(session))
