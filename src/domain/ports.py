"""
Capabilities the ingestion pipeline consumes from the outside world.

Production implementations live in ``src.infrastructure``; tests supply
in-memory variants.  Every call may raise -- the orchestrator wraps
failures into ``DependencyFailure``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from .entities import NotificationMessage, Sighting


@runtime_checkable
class SightingRepository(Protocol):
    async def get_last_sighting(self, tiger_id: int) -> Optional[Sighting]:
        """Most recent sighting of the tiger; ``None`` when never seen."""
        ...

    async def update_last_seen(
        self, tiger_id: int, timestamp: datetime, lat: float, lon: float
    ) -> None:
        ...

    async def save_sighting(self, sighting: Sighting) -> Sighting:
        """Persist and return the sighting with its storage-assigned id."""
        ...

    async def list_observers(self, tiger_id: int) -> set[int]:
        """Distinct user ids that have reported this tiger."""
        ...

    async def list_sightings(
        self, tiger_id: int, limit: int, offset: int
    ) -> list[Sighting]:
        """Sightings of the tiger, newest first."""
        ...


@runtime_checkable
class ImageStore(Protocol):
    async def store(self, data: bytes, ext: str) -> str:
        """Persist image bytes; return a stable reference (path / URI)."""
        ...


@runtime_checkable
class Notifier(Protocol):
    async def notify(self, user_id: int, tiger_id: int) -> None:
        """Deliver one notification; raising marks the attempt failed."""
        ...


@runtime_checkable
class NotificationSink(Protocol):
    async def enqueue(self, message: NotificationMessage) -> bool:
        """Hand off without waiting; False when the message was dropped."""
        ...
