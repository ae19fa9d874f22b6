#!/usr/bin/env python3
"""
Seed script for local development
Creates a demo organizer, a demo player and one funded tournament
"""

import os
import sys
import asyncio
from datetime import timedelta

# Add the project root to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tourneyhub.core.timeutils import utcnow
from tourneyhub.db.session import AsyncSessionLocal, unit_of_work
from tourneyhub.repos.organizer_repo import create_organizer, get_organizer_by_email
from tourneyhub.repos.player_repo import create_player, get_player_by_email
from tourneyhub.services.prize_lock import create_tournament
from tourneyhub.services.wallet import deposit

ORGANIZER_EMAIL = "organizer@tourneyhub.dev"
PLAYER_EMAIL = "player@tourneyhub.dev"


async def seed_organizer(session):
    organizer = await get_organizer_by_email(session, ORGANIZER_EMAIL)
    if organizer:
        print(f"Organizer already exists: {organizer.id}")
        return organizer.id

    async with unit_of_work(session):
        organizer = await create_organizer(
            session,
            name="Demo Organizer",
            email=ORGANIZER_EMAIL,
            phone="+910000000001",
            experience="Ran community PUBG scrims",
            organization_name="Demo Esports"
        )
        organizer_id = organizer.id
    await deposit(session, organizer_id, "organizer", 10000)
    print(f"Created organizer {organizer_id} with wallet 10000")
    return organizer_id


async def seed_player(session):
    player = await get_player_by_email(session, PLAYER_EMAIL)
    if player:
        print(f"Player already exists: {player.id}")
        return player.id

    async with unit_of_work(session):
        player = await create_player(
            session,
            first_name="Demo",
            last_name="Player",
            email=PLAYER_EMAIL,
            phone="+910000000002",
            age=21,
            country="India",
            gender="other"
        )
        player_id = player.id
    await deposit(session, player_id, "player", 5000)
    print(f"Created player {player_id} with wallet 5000")
    return player_id


async def seed_tournament(session, organizer_id):
    now = utcnow()
    tournament = await create_tournament(
        session,
        organizer_id=organizer_id,
        tournament_name="Demo Squad Cup",
        game="pubg",
        mode="squad",
        start_date=now + timedelta(days=3),
        end_date=now + timedelta(days=3, hours=4),
        registration_deadline=now + timedelta(days=2),
        max_teams=16,
        prize_pool=3000,
        has_entry_fee=True,
        entry_fee=200
    )
    print(f"Created tournament {tournament['id']} with {tournament['prizeLocked']} locked")
    return tournament["id"]


async def main():
    """Main seeding function"""
    print("Seeding demo data...")
    async with AsyncSessionLocal() as session:
        organizer_id = await seed_organizer(session)
        await seed_player(session)
        await seed_tournament(session, organizer_id)
    print("Seeding completed")


if __name__ == "__main__":
    asyncio.run(main())
