"""Device location acquisition.

The platform's one-shot location query is reached through a
:class:`LocationBackend`. :class:`LocationProvider` adds the timeout and
fix-reuse (``max_age_ms``) handling on top of it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Protocol

from shecurity.exceptions import LocationError, LocationUnavailableError
from shecurity.models.location import LocationOptions, Position

_logger = logging.getLogger(__name__)

# Platform error codes as reported by browser/mobile geolocation APIs.
_PLATFORM_ERROR_REASONS: dict[int, str] = {
    1: LocationError.PERMISSION_DENIED,
    2: LocationError.POSITION_UNAVAILABLE,
    3: LocationError.TIMEOUT,
}


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


def is_stale(position: Position, max_age_ms: int, now_ms: int) -> bool:
    """Whether *position* is older than *max_age_ms*."""
    return position.age_ms(now_ms) > max_age_ms


class LocationBackend(Protocol):
    """Structural interface of a platform location capability."""

    async def query(self, options: LocationOptions) -> Position:
        ...


class StaticLocationBackend:
    """Backend that always reports the same coordinates.

    Useful for fixed installations and for demos.
    """

    def __init__(
        self,
        latitude: float,
        longitude: float,
        *,
        accuracy_m: float | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._latitude = latitude
        self._longitude = longitude
        self._accuracy_m = accuracy_m
        self._clock = clock

    async def query(self, options: LocationOptions) -> Position:
        return Position(
            latitude=self._latitude,
            longitude=self._longitude,
            accuracy_m=self._accuracy_m,
            captured_at_epoch_ms=self._clock(),
        )


SuccessCallback = Callable[[float, float, float | None], None]
ErrorCallback = Callable[[int, str], None]
PlatformRequest = Callable[[SuccessCallback, ErrorCallback, LocationOptions], None]


class CallbackLocationBackend:
    """Adapt a callback-style platform API into an awaitable query.

    *request* is called as ``request(on_success, on_error, options)``.
    ``on_success(latitude, longitude, accuracy_m)`` and
    ``on_error(code, message)`` may be invoked from any thread; the first
    call wins and later calls are ignored. ``code`` follows the usual
    geolocation convention (1 permission denied, 2 position unavailable,
    3 timeout).
    """

    def __init__(self, request: PlatformRequest, *, clock: Callable[[], int] = _now_ms) -> None:
        self._request = request
        self._clock = clock

    async def query(self, options: LocationOptions) -> Position:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Position] = loop.create_future()

        def _resolve(position: Position) -> None:
            if not future.done():
                future.set_result(position)

        def _reject(exc: LocationError) -> None:
            if not future.done():
                future.set_exception(exc)

        def on_success(latitude: float, longitude: float, accuracy_m: float | None = None) -> None:
            try:
                position = Position(
                    latitude=latitude,
                    longitude=longitude,
                    accuracy_m=accuracy_m,
                    captured_at_epoch_ms=self._clock(),
                )
            except ValueError as exc:
                loop.call_soon_threadsafe(
                    _reject,
                    LocationError(f"Invalid fix from platform: {exc}", reason=LocationError.POSITION_UNAVAILABLE),
                )
                return
            loop.call_soon_threadsafe(_resolve, position)

        def on_error(code: int, message: str) -> None:
            reason = _PLATFORM_ERROR_REASONS.get(code, LocationError.POSITION_UNAVAILABLE)
            loop.call_soon_threadsafe(_reject, LocationError(message, reason=reason))

        self._request(on_success, on_error, options)
        return await future


class LocationProvider:
    """Single asynchronous "current position" operation.

    Each call is independent and is never retried here; callers decide
    whether to try again after a failure.
    """

    def __init__(
        self,
        backend: LocationBackend | None,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._last_fix: Position | None = None

    @property
    def available(self) -> bool:
        return self._backend is not None

    async def get_current_location(self, options: LocationOptions | None = None) -> Position:
        """Resolve the current position.

        Raises
        ------
        LocationUnavailableError
            If no location capability is present.
        LocationError
            On permission denial, unavailable position or timeout.
        """
        if self._backend is None:
            raise LocationUnavailableError("Geolocation is not supported on this platform")
        opts = options or LocationOptions()

        last = self._last_fix
        if opts.max_age_ms > 0 and last is not None and not is_stale(last, opts.max_age_ms, self._clock()):
            _logger.debug("Reusing fix captured %d ms ago", last.age_ms(self._clock()))
            return last

        _logger.debug(
            "Requesting fix (high_accuracy=%s, timeout_ms=%d)",
            opts.high_accuracy,
            opts.timeout_ms,
        )
        try:
            position = await asyncio.wait_for(self._backend.query(opts), timeout=opts.timeout_ms / 1000)
        except TimeoutError as exc:
            raise LocationError(
                f"Timeout expired after {opts.timeout_ms} ms",
                reason=LocationError.TIMEOUT,
            ) from exc

        self._last_fix = position
        return position
