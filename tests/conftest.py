from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from shecurity.models.assistance import AssistancePoint
from shecurity.models.location import LocationOptions, Position


@dataclass
class FakeAlertEndpoint:
    """In-process stand-in for the alert-delivery service."""

    reply: dict[str, Any] = field(default_factory=lambda: {"message": "Alert sent successfully!"})
    error: Exception | None = None
    gate: asyncio.Event | None = None
    requests: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.requests.append((url, dict(payload)))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return dict(self.reply)


class FakeLocationBackend:
    """Backend whose fix (or failure) is set by the test."""

    def __init__(self, position: Position | None = None, error: Exception | None = None) -> None:
        self.position = position
        self.error = error
        self.calls = 0

    async def query(self, options: LocationOptions) -> Position:
        self.calls += 1
        if self.error is not None:
            raise self.error
        assert self.position is not None
        return self.position


@pytest.fixture
def endpoint() -> FakeAlertEndpoint:
    return FakeAlertEndpoint()


@pytest.fixture
def catalog() -> list[AssistancePoint]:
    return [
        AssistancePoint(name="A", latitude=0, longitude=0),
        AssistancePoint(name="B", latitude=0, longitude=1),
        AssistancePoint(name="C", latitude=0, longitude=2),
    ]


@pytest.fixture
def origin() -> Position:
    return Position(latitude=0.0, longitude=0.0, captured_at_epoch_ms=0)
