"""
Distance calculation using the Haversine formula.

Assumption
----------
Straight-line (great-circle) distance stands in for the courier's road
distance.  A live quote from the courier API would replace this together
with the tariff in ``pricing.py``.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math

from .entities import Coordinates

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
    # Rounding can push a past 1.0 for near-antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_km(origin: Coordinates, destination: Coordinates) -> float:
    """Great-circle distance between two ``Coordinates``."""
    return haversine_km(origin.lat, origin.lng, destination.lat, destination.lng)
