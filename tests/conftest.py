"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  PostGIS-specific features (Geometry columns)
are mocked by using plain String columns in the test models.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.infrastructure.repositories import SqlAlchemySightingRepository


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


class TestBase(DeclarativeBase):
    pass


# Mirror the production models but without PostGIS Geometry columns
# (SQLite doesn't support them).

class TestUserModel(TestBase):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(120), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class TestTigerModel(TestBase):
    __tablename__ = "tigers"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    last_seen_timestamp = Column(DateTime, nullable=True)
    last_seen_lat = Column(Float, nullable=True)
    last_seen_lon = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class TestSightingModel(TestBase):
    __tablename__ = "sightings"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    tiger_id = Column(Integer, ForeignKey("tigers.id"), nullable=False)
    location = Column(String, nullable=True)  # stub for Geometry
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False)
    image_path = Column(String(512), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class SQLiteSightingRepository(SqlAlchemySightingRepository):
    """Production repository pointed at the SQLite-friendly test models."""

    sighting_model = TestSightingModel
    tiger_model = TestTigerModel

    def make_point(self, lat, lon):
        return f"POINT({lon} {lat})"


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, seed users 1-3 and tigers 7-8, yield a session, drop."""
    async with test_engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.create_all)

    async with TestSessionFactory() as session:
        for uid in (1, 2, 3):
            session.add(
                TestUserModel(id=uid, username=f"user{uid}", email=f"user{uid}@example.com")
            )
        session.add(TestTigerModel(id=7, name="Machli"))
        session.add(TestTigerModel(id=8, name="Sultan"))
        await session.commit()
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.drop_all)


@pytest.fixture
def sql_repository(db_session) -> SQLiteSightingRepository:
    return SQLiteSightingRepository(TestSessionFactory)
