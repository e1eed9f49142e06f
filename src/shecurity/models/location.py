"""Position and location query options."""

from __future__ import annotations

import time

from pydantic import Field

from shecurity.models._base import ShecurityBaseModel


def _now_ms() -> int:
    return int(time.time() * 1000)


class LocationOptions(ShecurityBaseModel):
    """Options for a one-shot location query.

    Parameters
    ----------
    high_accuracy : bool
        Prefer GPS over a network-based estimate.
    timeout_ms : int
        Fail when no fix arrives within this window.
    max_age_ms : int
        Maximum age of a reused fix; ``0`` forces a fresh fix.
    """

    high_accuracy: bool = True
    timeout_ms: int = Field(default=10_000, gt=0)
    max_age_ms: int = Field(default=0, ge=0)


class Position(ShecurityBaseModel):
    """A single resolved fix.

    Parameters
    ----------
    latitude : float
        Latitude in degrees, ``-90..90``.
    longitude : float
        Longitude in degrees, ``-180..180``.
    captured_at_epoch_ms : int
        When the fix was taken.
    accuracy_m : float or None
        Reported accuracy radius in meters, when known.
    """

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    captured_at_epoch_ms: int = Field(default_factory=_now_ms)
    accuracy_m: float | None = Field(default=None, ge=0.0)

    def age_ms(self, now_ms: int) -> int:
        """Milliseconds elapsed since the fix was captured."""
        return now_ms - self.captured_at_epoch_ms
