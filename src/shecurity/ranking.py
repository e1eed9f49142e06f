"""Proximity ranking of assistance points.

Distances are great-circle (haversine) distances on a sphere of radius
6371 km. Everything here is pure and deterministic.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from shecurity._constants import EARTH_RADIUS_KM
from shecurity.models.assistance import AssistancePoint, RankedAssistancePoint
from shecurity.models.location import Position


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two points given in degrees."""
    rlat1, rlat2 = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    # Rounding can push a slightly above 1 for antipodal points.
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def distance_km(origin: Position, point: AssistancePoint) -> float:
    return haversine_km(origin.latitude, origin.longitude, point.latitude, point.longitude)


def rank_nearest(
    origin: Position,
    catalog: Iterable[AssistancePoint],
    k: int,
) -> list[RankedAssistancePoint]:
    """Return the *k* catalog points closest to *origin*, nearest first.

    Points at equal distance keep their catalog order. An empty catalog
    gives an empty list, and *k* beyond the catalog size returns the whole
    catalog ranked.

    Raises
    ------
    ValueError
        If *k* is negative.
    """
    if k < 0:
        raise ValueError(f"k must not be negative, got {k}")
    if k == 0:
        return []

    ranked = [
        RankedAssistancePoint(
            name=point.name,
            latitude=point.latitude,
            longitude=point.longitude,
            distance_km=distance_km(origin, point),
        )
        for point in catalog
    ]
    # sorted() is stable, which keeps catalog order for ties.
    ranked = sorted(ranked, key=lambda item: item.distance_km)
    return ranked[:k]
