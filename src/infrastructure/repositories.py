"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

``SqlAlchemySightingRepository`` satisfies ``src.domain.ports.SightingRepository``.
Each operation runs in its own session and transaction, so every call is
atomic on its own but consecutive calls are *not* one unit of work.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import SightingModel, TigerModel
from src.domain.entities import Sighting

WGS84_SRID = 4326


def to_entity(row: SightingModel) -> Sighting:
    return Sighting(
        id=row.id,
        user_id=row.user_id,
        tiger_id=row.tiger_id,
        lat=row.lat,
        lon=row.lon,
        timestamp=row.timestamp,
        image_path=row.image_path,
    )


class SqlAlchemySightingRepository:
    sighting_model = SightingModel
    tiger_model = TigerModel

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    def make_point(self, lat: float, lon: float) -> Any:
        """PostGIS POINT in WGS 84 (x = longitude, y = latitude)."""
        from geoalchemy2.functions import ST_MakePoint, ST_SetSRID

        return ST_SetSRID(ST_MakePoint(lon, lat), WGS84_SRID)

    async def get_last_sighting(self, tiger_id: int) -> Optional[Sighting]:
        model = self.sighting_model
        async with self.session_factory() as session:
            result = await session.execute(
                select(model)
                .where(model.tiger_id == tiger_id)
                .order_by(model.timestamp.desc(), model.id.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return to_entity(row) if row else None

    async def update_last_seen(
        self, tiger_id: int, timestamp: datetime, lat: float, lon: float
    ) -> None:
        model = self.tiger_model
        async with self.session_factory() as session, session.begin():
            result = await session.execute(
                update(model)
                .where(model.id == tiger_id)
                .values(
                    last_seen_timestamp=timestamp,
                    last_seen_lat=lat,
                    last_seen_lon=lon,
                )
            )
            if result.rowcount == 0:
                raise LookupError(f"Tiger {tiger_id} does not exist")

    async def save_sighting(self, sighting: Sighting) -> Sighting:
        """Insert the sighting with a POINT geometry alongside the floats."""
        row = self.sighting_model(
            user_id=sighting.user_id,
            tiger_id=sighting.tiger_id,
            lat=sighting.lat,
            lon=sighting.lon,
            location=self.make_point(sighting.lat, sighting.lon),
            timestamp=sighting.timestamp,
            image_path=sighting.image_path,
        )
        async with self.session_factory() as session, session.begin():
            session.add(row)
            await session.flush()
            return sighting.with_id(row.id)

    async def list_observers(self, tiger_id: int) -> set[int]:
        model = self.sighting_model
        async with self.session_factory() as session:
            result = await session.execute(
                select(model.user_id).where(model.tiger_id == tiger_id).distinct()
            )
            return set(result.scalars().all())

    async def list_sightings(
        self, tiger_id: int, limit: int, offset: int
    ) -> list[Sighting]:
        """Newest first, paginated."""
        model = self.sighting_model
        async with self.session_factory() as session:
            result = await session.execute(
                select(model)
                .where(model.tiger_id == tiger_id)
                .order_by(model.timestamp.desc(), model.id.desc())
                .limit(limit)
                .offset(offset)
            )
            return [to_entity(r) for r in result.scalars().all()]
