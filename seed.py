"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 6 sample users (observers)
  - 5 sample tigers, never sighted yet

Sightings are left empty so the first report for each tiger exercises
the "no previous sighting" path of the ingestion pipeline.
"""

import asyncio
from datetime import date

from sqlalchemy import text

from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.models import TigerModel, UserModel


USERS = [
    {"username": "aarav", "email": "aarav@example.com"},
    {"username": "priya", "email": "priya@example.com"},
    {"username": "rohan", "email": "rohan@example.com"},
    {"username": "sneha", "email": "sneha@example.com"},
    {"username": "vikram", "email": "vikram@example.com"},
    {"username": "meera", "email": "meera@example.com"},
]

TIGERS = [
    {"name": "Machli", "date_of_birth": date(2012, 3, 14)},
    {"name": "Sultan", "date_of_birth": date(2014, 6, 2)},
    {"name": "Noor", "date_of_birth": date(2011, 11, 23)},
    {"name": "Collarwali", "date_of_birth": date(2015, 9, 1)},
    {"name": "Raja", "date_of_birth": None},
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        session.add_all(UserModel(**u) for u in USERS)
        await session.flush()
        print(f"  Created {len(USERS)} users")

        # ── Tigers ────────────────────────────────────────────────────
        session.add_all(TigerModel(**t) for t in TIGERS)
        await session.flush()
        print(f"  Created {len(TIGERS)} tigers")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
