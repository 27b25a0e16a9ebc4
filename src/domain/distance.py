"""
Distance calculation using the Haversine formula.

Great-circle (Haversine) distance is the edge weight of the internal
fallback graph and the metric used to snap a raw coordinate onto its
nearest graph node.  Real road distances only come from the external
routing provider.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math

from .entities import Coordinate

EARTH_RADIUS_KM = 6_371.0

# Two coordinates closer than this (degrees, per component) are the same point
COORDINATE_TOLERANCE = 1e-6


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(a.lat), math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlon = math.radians(b.lon - a.lon)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def same_coordinate(a: Coordinate, b: Coordinate) -> bool:
    return (
        abs(a.lat - b.lat) < COORDINATE_TOLERANCE
        and abs(a.lon - b.lon) < COORDINATE_TOLERANCE
    )
