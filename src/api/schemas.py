"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.domain.entities import Sighting


# ── Requests ──────────────────────────────────────────────────────────


class SightingInfo(BaseModel):
    """
    JSON carried in the ``sightingInfo`` multipart field.

    Deliberately unconstrained: range and presence rules are applied by
    the domain validator so clients get the structured error codes.
    """

    user_id: int = 0
    tiger_id: int = 0
    lat: float = 0.0
    lon: float = 0.0
    timestamp: Optional[datetime] = None

    def to_entity(self) -> Sighting:
        return Sighting(
            user_id=self.user_id,
            tiger_id=self.tiger_id,
            lat=self.lat,
            lon=self.lon,
            timestamp=self.timestamp,
        )


# ── Responses ─────────────────────────────────────────────────────────


class SightingResponse(BaseModel):
    id: Optional[int] = None
    user_id: int
    tiger_id: int
    lat: float
    lon: float
    timestamp: datetime
    image_path: str

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    code: str
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"


class DispatcherStatsResponse(BaseModel):
    capacity: int
    depth: int
    delivered: int
    failed: int
    dropped: int
    running: bool
    closed: bool
