from __future__ import annotations

import asyncio
import threading

import pytest

from shecurity.exceptions import LocationError, LocationUnavailableError
from shecurity.location import (
    CallbackLocationBackend,
    ErrorCallback,
    LocationProvider,
    StaticLocationBackend,
    SuccessCallback,
    is_stale,
)
from shecurity.models.location import LocationOptions, Position


class _Clock:
    def __init__(self, now_ms: int = 1_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


class _CountingBackend:
    def __init__(self, clock: _Clock) -> None:
        self._clock = clock
        self.calls = 0

    async def query(self, options: LocationOptions) -> Position:
        self.calls += 1
        return Position(latitude=10.0 + self.calls, longitude=20.0, captured_at_epoch_ms=self._clock())


class _HangingBackend:
    async def query(self, options: LocationOptions) -> Position:
        await asyncio.sleep(10)
        raise AssertionError("unreachable")


@pytest.mark.asyncio
async def test_missing_backend_raises_unavailable() -> None:
    provider = LocationProvider(None)

    assert provider.available is False
    with pytest.raises(LocationUnavailableError):
        await provider.get_current_location()


@pytest.mark.asyncio
async def test_static_backend_reports_fixed_coordinates() -> None:
    provider = LocationProvider(StaticLocationBackend(28.6, 77.2, accuracy_m=5.0, clock=_Clock(42)))

    position = await provider.get_current_location()

    assert (position.latitude, position.longitude) == (28.6, 77.2)
    assert position.accuracy_m == 5.0
    assert position.captured_at_epoch_ms == 42


@pytest.mark.asyncio
async def test_zero_max_age_always_queries_fresh_fix() -> None:
    clock = _Clock()
    backend = _CountingBackend(clock)
    provider = LocationProvider(backend, clock=clock)

    first = await provider.get_current_location(LocationOptions(max_age_ms=0))
    second = await provider.get_current_location(LocationOptions(max_age_ms=0))

    assert backend.calls == 2
    assert first != second


@pytest.mark.asyncio
async def test_recent_fix_reused_within_max_age() -> None:
    clock = _Clock()
    backend = _CountingBackend(clock)
    provider = LocationProvider(backend, clock=clock)
    options = LocationOptions(max_age_ms=5_000)

    first = await provider.get_current_location(options)
    clock.now_ms += 4_000
    reused = await provider.get_current_location(options)
    clock.now_ms += 2_000
    fresh = await provider.get_current_location(options)

    assert reused is first
    assert fresh is not first
    assert backend.calls == 2


@pytest.mark.asyncio
async def test_timeout_raises_location_error() -> None:
    provider = LocationProvider(_HangingBackend())

    with pytest.raises(LocationError) as exc_info:
        await provider.get_current_location(LocationOptions(timeout_ms=10))

    assert exc_info.value.reason == LocationError.TIMEOUT


@pytest.mark.asyncio
async def test_callback_backend_resolves_from_other_thread() -> None:
    seen: list[LocationOptions] = []

    def request(on_success: SuccessCallback, on_error: ErrorCallback, options: LocationOptions) -> None:
        seen.append(options)
        threading.Thread(target=on_success, args=(1.5, 2.5, 12.0)).start()

    provider = LocationProvider(CallbackLocationBackend(request, clock=_Clock(7)))
    position = await provider.get_current_location(LocationOptions(high_accuracy=False))

    assert (position.latitude, position.longitude, position.accuracy_m) == (1.5, 2.5, 12.0)
    assert position.captured_at_epoch_ms == 7
    assert seen[0].high_accuracy is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("code", "reason"),
    [
        (1, LocationError.PERMISSION_DENIED),
        (2, LocationError.POSITION_UNAVAILABLE),
        (3, LocationError.TIMEOUT),
        (99, LocationError.POSITION_UNAVAILABLE),
    ],
)
async def test_callback_backend_maps_platform_error_codes(code: int, reason: str) -> None:
    def request(on_success: SuccessCallback, on_error: ErrorCallback, options: LocationOptions) -> None:
        on_error(code, "User denied Geolocation")
        # Later callbacks are ignored.
        on_success(0.0, 0.0, None)

    provider = LocationProvider(CallbackLocationBackend(request))

    with pytest.raises(LocationError, match="User denied Geolocation") as exc_info:
        await provider.get_current_location()
    assert exc_info.value.reason == reason


@pytest.mark.asyncio
async def test_callback_backend_rejects_out_of_range_fix() -> None:
    def request(on_success: SuccessCallback, on_error: ErrorCallback, options: LocationOptions) -> None:
        on_success(123.0, 0.0, None)

    provider = LocationProvider(CallbackLocationBackend(request))

    with pytest.raises(LocationError) as exc_info:
        await provider.get_current_location()
    assert exc_info.value.reason == LocationError.POSITION_UNAVAILABLE


def test_is_stale() -> None:
    position = Position(latitude=0, longitude=0, captured_at_epoch_ms=1_000)

    assert is_stale(position, 500, 1_400) is False
    assert is_stale(position, 500, 1_600) is True
