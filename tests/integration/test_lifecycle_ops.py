"""
Integration tests for link edits and manual status changes
"""

from datetime import timedelta

import pytest

from tourneyhub.core.errors import Forbidden, InvalidTransition, LinksLocked, TournamentNotFound
from tourneyhub.services.lifecycle import change_status, update_links
from tests.fixtures.database import create_test_organizer, create_test_tournament, fetch_tournament


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_links_while_registration_open(async_session):
    organizer_id = await create_test_organizer(async_session)
    tournament = await create_test_tournament(async_session, organizer_id)

    updated = await update_links(
        async_session, tournament["id"], organizer_id,
        stream_url=" https://twitch.tv/testcup ", discord_url="https://discord.gg/testcup"
    )

    assert updated["streamUrl"] == "https://twitch.tv/testcup"
    assert updated["discordUrl"] == "https://discord.gg/testcup"

    partial = await update_links(async_session, tournament["id"], organizer_id, discord_url="")
    assert partial["streamUrl"] == "https://twitch.tv/testcup"
    assert partial["discordUrl"] == ""


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_links_after_deadline(async_session):
    organizer_id = await create_test_organizer(async_session)
    tournament = await create_test_tournament(async_session, organizer_id, stream_url="https://old")
    stored = await fetch_tournament(async_session, tournament["id"])

    with pytest.raises(LinksLocked):
        await update_links(
            async_session, tournament["id"], organizer_id, stream_url="https://new",
            now=stored.registration_deadline + timedelta(minutes=5)
        )

    assert (await fetch_tournament(async_session, tournament["id"])).stream_url == "https://old"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_links_by_another_organizer(async_session):
    organizer_id = await create_test_organizer(async_session)
    other_id = await create_test_organizer(async_session, name="Other")
    tournament = await create_test_tournament(async_session, organizer_id)

    with pytest.raises(Forbidden):
        await update_links(async_session, tournament["id"], other_id, stream_url="https://hijack")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_status_walks_forward(async_session):
    organizer_id = await create_test_organizer(async_session)
    tournament = await create_test_tournament(async_session, organizer_id, status="upcoming")

    for target in ("registration-open", "registration-closed", "ongoing"):
        updated = await change_status(async_session, tournament["id"], organizer_id, target)
        assert updated["status"] == target

    assert (await fetch_tournament(async_session, tournament["id"])).status == "ongoing"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_status_cannot_skip_or_complete(async_session):
    organizer_id = await create_test_organizer(async_session)
    tournament = await create_test_tournament(async_session, organizer_id)

    with pytest.raises(InvalidTransition):
        await change_status(async_session, tournament["id"], organizer_id, "ongoing")
    with pytest.raises(InvalidTransition):
        await change_status(async_session, tournament["id"], organizer_id, "completed")

    assert (await fetch_tournament(async_session, tournament["id"])).status == "registration-open"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_status_change_guards(async_session):
    organizer_id = await create_test_organizer(async_session)
    other_id = await create_test_organizer(async_session, name="Other")
    tournament = await create_test_tournament(async_session, organizer_id)

    with pytest.raises(Forbidden):
        await change_status(async_session, tournament["id"], other_id, "registration-closed")
    with pytest.raises(TournamentNotFound):
        await change_status(async_session, "trn_missing", organizer_id, "registration-closed")
