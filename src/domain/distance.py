"""
Distance calculation using the Haversine formula.

Assumption
----------
The Earth is treated as a sphere of radius 6 371 km.  Sighting
coordinates are at most a few hundred km apart in practice, so the
spherical error (< 0.5 %) is irrelevant next to the 5 km proximity gate.

Inputs are not range-checked here: validation happens upstream, and
out-of-range values still yield a mathematically defined result.

Complexity: O(1) per call.
"""

import math

EARTH_RADIUS_KM = 6_371.0


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    # Clamp: floating-point noise can push ``a`` a hair above 1.0
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))
