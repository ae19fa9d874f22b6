"""
Tournament lifecycle state machine.

Guards decide which operations are legal for a tournament given its status
and the current time. They only read; the operations that edit links or
advance the status live at the bottom of the module.
"""

from datetime import datetime, timedelta
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.config import settings
from tourneyhub.core.errors import (
    AlreadyReleased, Forbidden, InvalidInput, InvalidTransition, LinksLocked,
    MatchNotFinished, NotEnoughParticipants, NothingLocked, RegistrationClosed,
    RegistrationDeadlinePassed, ResultsAlreadyDeclared, TournamentFull, TournamentInUse,
)
from tourneyhub.core.timeutils import ensure_utc, utcnow
from tourneyhub.db.session import unit_of_work
from tourneyhub.models.enums import TournamentFormat, TournamentStatus
from tourneyhub.models.tournament import Tournament
from tourneyhub.repos.tournament_repo import delete_tournament_row, flush_tournament, lock_tournament

# Configure logging
logger = logging.getLogger(__name__)

# Manual moves; completed is reached only by declaring results
ALLOWED_TRANSITIONS = {
    TournamentStatus.UPCOMING: {TournamentStatus.REGISTRATION_OPEN},
    TournamentStatus.REGISTRATION_OPEN: {TournamentStatus.REGISTRATION_CLOSED},
    TournamentStatus.REGISTRATION_CLOSED: {TournamentStatus.ONGOING},
    TournamentStatus.ONGOING: set(),
    TournamentStatus.COMPLETED: set(),
    TournamentStatus.CANCELLED: set(),
}

# Descriptive fields the organizer may edit at any time
DETAIL_FIELDS = frozenset({"tournament_name", "description", "rules", "region", "format"})


def validate_schedule(
    start_date: datetime,
    end_date: Optional[datetime],
    registration_deadline: datetime
) -> None:
    """
    Check date ordering for a new tournament.

    Raises:
        InvalidInput: if the end is not after the start, or registration
            does not close before the start
    """
    start_date = ensure_utc(start_date)
    end_date = ensure_utc(end_date)
    registration_deadline = ensure_utc(registration_deadline)

    if end_date is not None and end_date <= start_date:
        raise InvalidInput("End date must be after start date")
    if registration_deadline >= start_date:
        raise InvalidInput("Registration deadline must be before start date")


def effective_end_time(tournament: Tournament) -> datetime:
    """End date, or start date plus the grace period when no end date is set"""
    if tournament.end_date is not None:
        return ensure_utc(tournament.end_date)
    return ensure_utc(tournament.start_date) + timedelta(hours=settings.result_grace_hours)


def ensure_organizer(tournament: Tournament, organizer_id: str) -> None:
    if tournament.organizer_id != organizer_id:
        logger.warning(f"Organizer {organizer_id} is not the organizer of tournament {tournament.id}")
        raise Forbidden(tournament_id=tournament.id, organizer_id=organizer_id)


def ensure_registration_open(tournament: Tournament, now: Optional[datetime] = None) -> None:
    """
    Registration is accepted only while open, up to and including the
    deadline instant, and below capacity.
    """
    now = ensure_utc(now) or utcnow()
    if tournament.status != TournamentStatus.REGISTRATION_OPEN.value:
        raise RegistrationClosed(tournament_id=tournament.id, status=tournament.status)
    if now > ensure_utc(tournament.registration_deadline):
        raise RegistrationDeadlinePassed(tournament_id=tournament.id)
    if tournament.current_participants >= tournament.max_teams:
        raise TournamentFull(tournament_id=tournament.id)


def ensure_links_editable(tournament: Tournament, organizer_id: str, now: Optional[datetime] = None) -> None:
    now = ensure_utc(now) or utcnow()
    ensure_organizer(tournament, organizer_id)
    if tournament.status != TournamentStatus.REGISTRATION_OPEN.value:
        raise LinksLocked(tournament_id=tournament.id)
    if now > ensure_utc(tournament.registration_deadline):
        raise LinksLocked(tournament_id=tournament.id)


def ensure_declarable(
    tournament: Tournament,
    organizer_id: str,
    participant_count: int,
    now: Optional[datetime] = None
) -> None:
    """
    Preconditions for result declaration, checked in order.

    The stored status is not consulted beyond the terminal check: results can
    be declared even if the tournament was never advanced to ongoing.
    """
    now = ensure_utc(now) or utcnow()
    ensure_organizer(tournament, organizer_id)

    if tournament.result_declared_at is not None or tournament.status == TournamentStatus.COMPLETED.value:
        raise ResultsAlreadyDeclared(tournament_id=tournament.id)

    if now < effective_end_time(tournament):
        raise MatchNotFinished(tournament_id=tournament.id)

    if participant_count < settings.min_participants_for_result:
        raise NotEnoughParticipants(
            f"At least {settings.min_participants_for_result} participants are required to declare results",
            tournament_id=tournament.id,
            participants=participant_count
        )


def ensure_releasable(tournament: Tournament, organizer_id: str) -> None:
    ensure_organizer(tournament, organizer_id)
    if tournament.prize_released_at is not None:
        raise AlreadyReleased(tournament_id=tournament.id)
    if tournament.status != TournamentStatus.COMPLETED.value:
        raise InvalidTransition(
            "Prize can only be released after results are declared",
            tournament_id=tournament.id
        )
    if tournament.prize_locked <= 0:
        raise NothingLocked(tournament_id=tournament.id)


def ensure_transition(current: str, target: str) -> TournamentStatus:
    """
    Check a manual status change.

    Returns:
        The target status

    Raises:
        InvalidInput: unknown status value
        InvalidTransition: not a forward edge of the state machine
    """
    try:
        target_status = TournamentStatus(target)
    except ValueError:
        raise InvalidInput(f"Unknown tournament status: {target}")

    current_status = TournamentStatus(current)
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidTransition(
            f"Cannot change status from {current_status.value} to {target_status.value}"
        )
    return target_status


async def update_links(
    session: AsyncSession,
    tournament_id: str,
    organizer_id: str,
    stream_url: Optional[str] = None,
    discord_url: Optional[str] = None,
    now: Optional[datetime] = None
) -> dict:
    """
    Edit the stream and discord links of a tournament.

    Returns:
        The updated tournament as a dictionary
    """
    async with unit_of_work(session):
        tournament = await lock_tournament(session, tournament_id)
        ensure_links_editable(tournament, organizer_id, now)

        if stream_url is not None:
            tournament.stream_url = stream_url.strip()
        if discord_url is not None:
            tournament.discord_url = discord_url.strip()
        await flush_tournament(session, tournament_id)
        data = tournament.to_dict()

    logger.info(f"Updated links for tournament {tournament_id}")
    return data


async def change_status(session: AsyncSession, tournament_id: str, organizer_id: str, status: str) -> dict:
    """Advance a tournament along the manual edges of the state machine"""
    async with unit_of_work(session):
        tournament = await lock_tournament(session, tournament_id)
        ensure_organizer(tournament, organizer_id)
        previous = tournament.status
        target = ensure_transition(previous, status)

        tournament.status = target.value
        await flush_tournament(session, tournament_id)
        data = tournament.to_dict()

    logger.info(f"Tournament {tournament_id} status {previous} -> {target.value}")
    return data


async def update_details(session: AsyncSession, tournament_id: str, organizer_id: str, **fields) -> dict:
    """
    Edit the descriptive fields of a tournament.

    Raises:
        InvalidInput: for a field outside DETAIL_FIELDS or an unknown format
    """
    unknown = set(fields) - DETAIL_FIELDS
    if unknown:
        raise InvalidInput(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    if fields.get("format") is not None:
        try:
            TournamentFormat(fields["format"])
        except ValueError:
            raise InvalidInput(f"Unknown tournament format: {fields['format']}")

    async with unit_of_work(session):
        tournament = await lock_tournament(session, tournament_id)
        ensure_organizer(tournament, organizer_id)

        for name, value in fields.items():
            if value is not None:
                setattr(tournament, name, value.strip() if name == "tournament_name" else value)
        await flush_tournament(session, tournament_id)
        data = tournament.to_dict()

    logger.info(f"Updated details for tournament {tournament_id}")
    return data


async def delete_tournament(session: AsyncSession, tournament_id: str, organizer_id: str) -> None:
    """
    Delete a tournament that holds no escrow and has no participants.

    Raises:
        TournamentInUse: while prizeLocked > 0 or anyone is registered
    """
    async with unit_of_work(session):
        tournament = await lock_tournament(session, tournament_id)
        ensure_organizer(tournament, organizer_id)
        if tournament.prize_locked > 0 or tournament.current_participants > 0:
            raise TournamentInUse(
                tournament_id=tournament_id,
                prize_locked=tournament.prize_locked,
                participants=tournament.current_participants
            )
        await delete_tournament_row(session, tournament)

    logger.info(f"Deleted tournament {tournament_id}")
