"""Deep links into an external mapping service.

Links are only generated; opening them is left to the caller.
"""

from __future__ import annotations

from urllib.parse import urlencode

from shecurity._constants import MAPS_BASE_URL, VALID_TRAVEL_MODES
from shecurity.models.assistance import AssistancePoint
from shecurity.models.location import Position


def _coords(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f},{longitude:.6f}"


def location_url(position: Position) -> str:
    """Link showing *position* on the map."""
    return f"{MAPS_BASE_URL}?{urlencode({'q': _coords(position.latitude, position.longitude)})}"


def directions_url(origin: Position, destination: AssistancePoint, *, travel_mode: str = "driving") -> str:
    """Turn-by-turn directions from *origin* to *destination*."""
    if travel_mode not in VALID_TRAVEL_MODES:
        raise ValueError(f"travel_mode must be one of {VALID_TRAVEL_MODES}, got {travel_mode!r}")
    query = {
        "api": "1",
        "origin": _coords(origin.latitude, origin.longitude),
        "destination": _coords(destination.latitude, destination.longitude),
        "travelmode": travel_mode,
    }
    return f"{MAPS_BASE_URL}/dir/?{urlencode(query)}"
