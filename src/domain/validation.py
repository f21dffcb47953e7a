"""
Structural checks on an inbound sighting.

Rules run in a fixed order and the first violation wins; callers that
want every violation must fix and resubmit.  Zero latitude/longitude is
treated as "unset" rather than the equator / prime meridian.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .entities import Sighting
from .enums import ErrorCode
from .errors import SightingRejected


def _timestamp_unset(ts: Optional[datetime]) -> bool:
    # ``0001-01-01T00:00:00Z`` is how zero-valued timestamps serialise
    return ts is None or ts.replace(tzinfo=None) == datetime.min


def validate_sighting(sighting: Sighting) -> Optional[SightingRejected]:
    """Return the first violated rule as a ``SightingRejected``, or ``None``."""
    if _timestamp_unset(sighting.timestamp):
        return SightingRejected(
            ErrorCode.INVALID_TIMESTAMP,
            "Timestamp is required and must be a valid date.",
        )

    if not -90 <= sighting.lat <= 90 or sighting.lat == 0:
        return SightingRejected(
            ErrorCode.INVALID_LATITUDE,
            "Latitude must be between -90 and 90 and not zero.",
        )

    if not -180 <= sighting.lon <= 180 or sighting.lon == 0:
        return SightingRejected(
            ErrorCode.INVALID_LONGITUDE,
            "Longitude must be between -180 and 180 and not zero.",
        )

    if sighting.user_id <= 0:
        return SightingRejected(ErrorCode.INVALID_USER_ID, "UserID is invalid.")

    if sighting.tiger_id <= 0:
        return SightingRejected(ErrorCode.INVALID_TIGER_ID, "TigerID is invalid.")

    return None
