"""Session state management.

:class:`SessionController` owns the whole UI-facing state of a session
(contact fields, last fix, ranked assistance points, panel visibility)
and changes it only through its public operations.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from shecurity._constants import DEFAULT_NEAREST_COUNT, LOCATION_UNSUPPORTED_TEXT
from shecurity.credentials import CredentialCache
from shecurity.directions import directions_url, location_url
from shecurity.dispatcher import AlertDispatcher
from shecurity.exceptions import LocationError, LocationUnavailableError
from shecurity.location import LocationProvider
from shecurity.models.assistance import AssistancePoint, RankedAssistancePoint
from shecurity.models.contact import Contact
from shecurity.models.location import LocationOptions, Position
from shecurity.models.session import (
    ActivationSource,
    DispatchOutcome,
    DispatchState,
    Notice,
    NoticeCallback,
    NoticeLevel,
    SessionFlags,
)
from shecurity.ranking import rank_nearest

_logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Mutable session state, owned by a single :class:`SessionController`."""

    contact: Contact = field(default_factory=Contact)
    contact_saved: bool = False
    position: Position | None = None
    nearest: list[RankedAssistancePoint] = field(default_factory=list)
    last_outcome: DispatchOutcome | None = None
    last_delivered: bool = False

    @property
    def flags(self) -> SessionFlags:
        return SessionFlags(
            contact_entry_visible=not (self.contact_saved and self.contact.is_complete),
            stations_panel_visible=self.last_delivered,
        )


class SessionController:
    """Drive one user session.

    Parameters
    ----------
    cache : CredentialCache
        Where the emergency contact is persisted.
    location : LocationProvider
        Source of the current position.
    dispatcher : AlertDispatcher
        Sends the alert once preconditions hold.
    catalog : sequence of AssistancePoint
        Fixed assistance-point dataset.
    nearest_count : int
        How many points the ranked panel lists.
    location_options : LocationOptions or None
        Options for every location query.
    travel_mode : str
        Travel mode for directions links.
    notify : callable or None
        Receiver for user-visible notices.
    """

    def __init__(
        self,
        *,
        cache: CredentialCache,
        location: LocationProvider,
        dispatcher: AlertDispatcher,
        catalog: Sequence[AssistancePoint] = (),
        nearest_count: int = DEFAULT_NEAREST_COUNT,
        location_options: LocationOptions | None = None,
        travel_mode: str = "driving",
        notify: NoticeCallback | None = None,
    ) -> None:
        self._cache = cache
        self._location = location
        self._dispatcher = dispatcher
        self._catalog = tuple(catalog)
        self._nearest_count = nearest_count
        self._location_options = location_options or LocationOptions()
        self._travel_mode = travel_mode
        self._notify = notify
        self._state = SessionState()
        self._location_task: asyncio.Task[Position | None] | None = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def contact(self) -> Contact:
        return self._state.contact

    @property
    def position(self) -> Position | None:
        return self._state.position

    @property
    def nearest(self) -> list[RankedAssistancePoint]:
        return list(self._state.nearest)

    @property
    def flags(self) -> SessionFlags:
        return self._state.flags

    @property
    def dispatch_state(self) -> DispatchState:
        return self._dispatcher.state

    @property
    def last_outcome(self) -> DispatchOutcome | None:
        return self._state.last_outcome

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Restore the cached contact and resolve the first fix."""
        cached = self._cache.load_contact()
        if cached is not None:
            _logger.debug("Restored emergency contact from cache")
            self._state.contact = cached
            self._state.contact_saved = True
        await self.refresh_location()

    def set_contact(self, phone: str, email: str) -> Contact:
        """Replace the contact fields with user input."""
        contact = Contact(phone=phone, email=email)
        if contact != self._state.contact:
            self._state.contact = contact
            self._state.contact_saved = False
        return contact

    async def refresh_location(self) -> Position | None:
        """Query the current position; failures are surfaced, not raised."""
        try:
            position = await self._location.get_current_location(self._location_options)
        except LocationUnavailableError:
            _logger.warning("No location capability available")
            self._emit(Notice(level=NoticeLevel.ERROR, text=LOCATION_UNSUPPORTED_TEXT, blocking=True))
            return None
        except LocationError as exc:
            _logger.warning("Location query failed (%s): %s", exc.reason, exc)
            self._emit(Notice(level=NoticeLevel.ERROR, text=f"Error fetching location: {exc}", blocking=True))
            return None
        self._update_position(position)
        return position

    async def activate(self, source: ActivationSource = ActivationSource.MANUAL) -> DispatchOutcome:
        """Manual HELP press or voice trigger.

        With a complete contact, the position is queried again before
        dispatching; the provider reuses the last fix only while it is
        within ``max_age_ms``. A reset that lands while this call is
        awaiting leaves the new session state untouched.
        """
        _logger.info("Activation (%s)", source)
        generation = self._generation
        contact = self._state.contact
        position = self._state.position
        if contact.is_complete and not self._dispatcher.in_flight:
            position = await self.refresh_location()
            if generation != self._generation:
                _logger.info("Session reset while resolving location, activation dropped")
                return DispatchOutcome(state=DispatchState.IDLE)

        outcome = await self._dispatcher.dispatch(contact, position)
        if generation != self._generation:
            _logger.info("Session reset during activation, outcome not applied")
            return outcome

        if outcome.state is DispatchState.AWAITING_LOCATION:
            self._state.contact_saved = True
            if self._location.available:
                self._ensure_location_refresh()
        elif outcome.state is DispatchState.DELIVERED:
            self._state.contact_saved = True
            self._state.last_delivered = True
            outcome = outcome.model_copy(update={"nearest": self.nearest})
        elif outcome.state is DispatchState.FAILED:
            self._state.contact_saved = True
            self._state.last_delivered = False

        self._state.last_outcome = outcome
        if outcome.notice is not None:
            self._emit(outcome.notice)
        return outcome

    async def close(self) -> None:
        """Cancel a pending background location refresh."""
        task = self._location_task
        self._location_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def reset(self) -> None:
        """Forget the contact, hide the panel and return to idle."""
        self._generation += 1
        await self.close()
        self._cache.clear()
        position = self._state.position
        nearest = self._state.nearest
        self._state = SessionState(position=position, nearest=nearest)
        self._dispatcher.reset()
        _logger.info("Session reset")

    async def wait_for_location(self) -> Position | None:
        """Wait for a background location refresh, if one is running."""
        task = self._location_task
        if task is None:
            return self._state.position
        return await task

    def location_url(self) -> str | None:
        if self._state.position is None:
            return None
        return location_url(self._state.position)

    def directions_url(self, point: AssistancePoint) -> str | None:
        """Directions from the current fix to *point*, if a fix exists."""
        if self._state.position is None:
            return None
        return directions_url(self._state.position, point, travel_mode=self._travel_mode)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _update_position(self, position: Position) -> None:
        self._state.position = position
        self._state.nearest = rank_nearest(position, self._catalog, self._nearest_count)

    def _ensure_location_refresh(self) -> None:
        if self._location_task is not None and not self._location_task.done():
            return
        self._location_task = asyncio.get_running_loop().create_task(self.refresh_location())

    def _emit(self, notice: Notice) -> None:
        if self._notify is not None:
            self._notify(notice)
