"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import MultiPoint

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def path_length_km(points: Sequence[GeoPoint]) -> float:
    """Sum of great-circle legs along a decoded route."""

    return sum(
        haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)
        for a, b in zip(points, points[1:])
    )


def region_for_points(
    points: Sequence[GeoPoint],
    padding: float = 1.5,
    min_delta: float = 0.01,
) -> tuple[float, float, float, float]:
    """Return (center_lat, center_lon, lat_delta, lon_delta) covering all points."""

    if not points:
        raise ValueError("At least one point is required to build a region.")
    # shapely works in (x, y) == (lon, lat)
    min_lon, min_lat, max_lon, max_lat = MultiPoint([(p.longitude, p.latitude) for p in points]).bounds
    return (
        (min_lat + max_lat) / 2,
        (min_lon + max_lon) / 2,
        max((max_lat - min_lat) * padding, min_delta),
        max((max_lon - min_lon) * padding, min_delta),
    )
