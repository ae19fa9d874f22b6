"""
Integration tests for editing and deleting tournaments

Descriptive edits never touch money, capacity or status, and a tournament
can only be deleted once it holds no escrow and nobody is registered.
"""

import pytest
from sqlalchemy import update

from tourneyhub.core.errors import Forbidden, InvalidInput, TournamentInUse, TournamentNotFound
from tourneyhub.db.session import unit_of_work
from tourneyhub.models.tournament import Tournament
from tourneyhub.services.lifecycle import delete_tournament, update_details
from tourneyhub.services.prize_lock import release_prize
from tourneyhub.services.results import ExplicitWinners, WinnerEntry, declare_result
from tests.fixtures.database import (
    after_end, before_deadline, create_test_organizer, create_test_player, create_test_tournament,
    fetch_organizer, fetch_tournament, finished_schedule, register_players, run_in_session,
)

API = "/api/v1"


async def _clear_escrow(session, tournament_id):
    async with unit_of_work(session):
        await session.execute(
            update(Tournament).where(Tournament.id == tournament_id).values(prize_locked=0)
        )


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_details(async_session):
    organizer_id = await create_test_organizer(async_session)
    tournament = await create_test_tournament(async_session, organizer_id)

    data = await update_details(
        async_session, tournament["id"], organizer_id,
        tournament_name="  Monsoon Masters II ",
        description="Best of three finals",
        format="single-elimination"
    )

    assert data["tournamentName"] == "Monsoon Masters II"
    assert data["description"] == "Best of three finals"
    assert data["format"] == "single-elimination"
    assert data["prizeLocked"] == 3000
    assert data["status"] == "registration-open"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_details_rejections(async_session):
    organizer_id = await create_test_organizer(async_session)
    other_id = await create_test_organizer(async_session, name="Other")
    tournament = await create_test_tournament(async_session, organizer_id)

    with pytest.raises(Forbidden):
        await update_details(async_session, tournament["id"], other_id, description="Hijacked")
    with pytest.raises(InvalidInput):
        await update_details(async_session, tournament["id"], organizer_id, format="king-of-the-hill")
    with pytest.raises(InvalidInput):
        await update_details(async_session, tournament["id"], organizer_id, prize_locked=0)
    with pytest.raises(TournamentNotFound):
        await update_details(async_session, "trn_missing", organizer_id, description="Nope")

    stored = await fetch_tournament(async_session, tournament["id"])
    assert stored.prize_locked == 3000
    assert stored.description == ""


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_refused_while_prize_locked(async_session):
    organizer_id = await create_test_organizer(async_session, wallet_balance=10000)
    tournament = await create_test_tournament(async_session, organizer_id)

    with pytest.raises(TournamentInUse):
        await delete_tournament(async_session, tournament["id"], organizer_id)

    stored = await fetch_tournament(async_session, tournament["id"])
    assert stored.prize_locked == 3000
    organizer = await fetch_organizer(async_session, organizer_id)
    assert organizer.locked_prize_pool == 3000


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_refused_while_participants_remain(async_session):
    """A released tournament still keeps its participants and winners."""
    schedule = finished_schedule()
    organizer_id = await create_test_organizer(async_session, wallet_balance=10000)
    tournament = await create_test_tournament(async_session, organizer_id, schedule=schedule)
    players = [await create_test_player(async_session) for _ in range(3)]
    await register_players(async_session, tournament["id"], players, before_deadline(schedule))
    await declare_result(
        async_session, tournament["id"], organizer_id,
        ExplicitWinners([WinnerEntry(position=1, player_id=players[0])]),
        now=after_end(schedule)
    )
    await release_prize(async_session, tournament["id"], organizer_id)

    with pytest.raises(TournamentInUse):
        await delete_tournament(async_session, tournament["id"], organizer_id)

    stored = await fetch_tournament(async_session, tournament["id"])
    assert stored.prize_locked == 0
    assert stored.current_participants == 3


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_empty_tournament(async_session):
    organizer_id = await create_test_organizer(async_session)
    other_id = await create_test_organizer(async_session, name="Other")
    tournament = await create_test_tournament(async_session, organizer_id)
    await _clear_escrow(async_session, tournament["id"])

    with pytest.raises(Forbidden):
        await delete_tournament(async_session, tournament["id"], other_id)

    await delete_tournament(async_session, tournament["id"], organizer_id)

    with pytest.raises(TournamentNotFound):
        await delete_tournament(async_session, tournament["id"], organizer_id)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_tournament_endpoint_ignores_money_fields(test_client, session_factory):
    organizer_id = await run_in_session(session_factory, create_test_organizer)
    tournament = await run_in_session(session_factory, create_test_tournament, organizer_id)

    response = await test_client.put(f"{API}/tournaments/{tournament['id']}", json={
        "organizerId": organizer_id,
        "rules": "No emulators",
        "prizeLocked": 0,
        "prizePool": 1,
        "status": "completed",
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["rules"] == "No emulators"
    assert data["prizeLocked"] == 3000
    assert data["prizePool"] == 3000
    assert data["status"] == "registration-open"

    response = await test_client.put(f"{API}/tournaments/{tournament['id']}", json={
        "organizerId": organizer_id,
        "prizeLocked": 0,
    })
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidInput"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_tournament_endpoint(test_client, session_factory):
    organizer_id = await run_in_session(session_factory, create_test_organizer)
    tournament = await run_in_session(session_factory, create_test_tournament, organizer_id)
    url = f"{API}/tournaments/{tournament['id']}"

    response = await test_client.delete(url, params={"organizerId": organizer_id})
    assert response.status_code == 400
    assert response.json()["error"] == "TournamentInUse"

    await run_in_session(session_factory, _clear_escrow, tournament["id"])

    response = await test_client.delete(url, params={"organizerId": "org_other"})
    assert response.status_code == 403

    response = await test_client.delete(url, params={"organizerId": organizer_id})
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = await test_client.get(url)
    assert response.status_code == 404
