"""Session-facing models: notices, dispatch states and UI flags."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum

from pydantic import Field

from shecurity.models._base import ShecurityBaseModel
from shecurity.models.alert import AlertResponse
from shecurity.models.assistance import RankedAssistancePoint


class DispatchState(StrEnum):
    IDLE = "idle"
    AWAITING_CREDENTIALS = "awaiting_credentials"
    AWAITING_LOCATION = "awaiting_location"
    DISPATCHING = "dispatching"
    DELIVERED = "delivered"
    FAILED = "failed"


class ActivationSource(StrEnum):
    MANUAL = "manual"
    VOICE = "voice"


class NoticeLevel(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notice(ShecurityBaseModel):
    """A user-visible message (toast or blocking dialog)."""

    level: NoticeLevel = NoticeLevel.INFO
    text: str
    blocking: bool = False


class SessionFlags(ShecurityBaseModel):
    """Visibility flags derived from the session state."""

    contact_entry_visible: bool
    stations_panel_visible: bool


class DispatchOutcome(ShecurityBaseModel):
    """Result of a single activation.

    ``state`` is the state the activation ended in before the dispatcher
    returned to idle.
    """

    state: DispatchState
    notice: Notice | None = None
    response: AlertResponse | None = None
    nearest: list[RankedAssistancePoint] = Field(default_factory=list)

    @property
    def delivered(self) -> bool:
        return self.state is DispatchState.DELIVERED


NoticeCallback = Callable[[Notice], None]
"""Receiver of user-visible notices (toast or dialog surface)."""
