"""
Proximity gate
==============

A new sighting is a duplicate when it lies closer than
``MIN_SIGHTING_DISTANCE_KM`` to the tiger's last recorded sighting.
The threshold is a fixed policy, not a per-request parameter.

Complexity: O(1) -- one haversine evaluation.
"""

from __future__ import annotations

import logging
from typing import Optional

from .distance import haversine_km
from .entities import Sighting
from .enums import Verdict

logger = logging.getLogger(__name__)

MIN_SIGHTING_DISTANCE_KM = 5.0


def admit(last: Optional[Sighting], new: Sighting) -> Verdict:
    """Accept when there is no prior sighting or it is >= 5 km away."""
    if last is None:
        return Verdict.ACCEPT

    distance = haversine_km(last.lat, last.lon, new.lat, new.lon)
    logger.debug(
        "Tiger %d: last (%.5f, %.5f) -> new (%.5f, %.5f) = %.3f km",
        new.tiger_id, last.lat, last.lon, new.lat, new.lon, distance,
    )
    if distance < MIN_SIGHTING_DISTANCE_KM:
        return Verdict.REJECT
    return Verdict.ACCEPT
