"""Alert dispatch state machine.

States::

    idle -> awaiting_credentials
         -> awaiting_location
         -> dispatching -> delivered | failed -> idle

``awaiting_credentials`` and ``awaiting_location`` are held until the next
activation or a reset; the user has to act (fill in the contact, wait for
a fix) and press HELP again. Delivered and failed are reported in the
returned :class:`DispatchOutcome` and the machine goes straight back to
idle.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from shecurity._constants import (
    DEFAULT_CREDENTIAL_TTL_HOURS,
    DISPATCH_IN_FLIGHT_TEXT,
    FETCHING_LOCATION_TEXT,
    MISSING_CREDENTIALS_TEXT,
)
from shecurity._transport import Transport
from shecurity.credentials import CredentialCache
from shecurity.exceptions import DispatchError, DispatchRemoteError, MissingCredentialsError
from shecurity.models.alert import AlertRequest, AlertResponse
from shecurity.models.contact import Contact
from shecurity.models.location import Position
from shecurity.models.session import DispatchOutcome, DispatchState, Notice, NoticeLevel

_logger = logging.getLogger(__name__)


def parse_alert_response(raw: dict[str, Any], url: str = "") -> AlertResponse:
    """Validate the endpoint reply.

    Raises
    ------
    DispatchRemoteError
        When the endpoint flags a failure or sends no message.
    """
    if raw.get("success") is False or raw.get("error"):
        message = raw.get("message") or raw.get("error") or "Alert endpoint reported a failure"
        raise DispatchRemoteError(str(message), url=url)
    try:
        return AlertResponse.model_validate(raw)
    except ValidationError as exc:
        raise DispatchRemoteError("Alert endpoint returned no message", url=url) from exc


class AlertDispatcher:
    """Validate preconditions and send the alert.

    At most one request is in flight at a time: an activation that arrives
    while another one is dispatching returns immediately without sending.
    """

    def __init__(
        self,
        transport: Transport,
        cache: CredentialCache,
        *,
        alert_url: str,
        credential_ttl_hours: float = DEFAULT_CREDENTIAL_TTL_HOURS,
        include_email: bool = False,
    ) -> None:
        self._transport = transport
        self._cache = cache
        self._alert_url = alert_url
        self._credential_ttl_hours = credential_ttl_hours
        self._include_email = include_email
        self._state = DispatchState.IDLE
        self._in_flight = False
        self._generation = 0

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def _transition(self, state: DispatchState) -> None:
        if state is not self._state:
            _logger.info("Dispatch state %s -> %s", self._state, state)
        self._state = state

    def reset(self) -> None:
        """Return to idle regardless of the current state.

        A delivery still in flight completes, but no longer writes the
        contact back into the cache.
        """
        self._generation += 1
        self._transition(DispatchState.IDLE)

    def build_request(self, contact: Contact, position: Position) -> AlertRequest:
        return AlertRequest(
            phone=contact.phone,
            latitude=position.latitude,
            longitude=position.longitude,
            email=contact.email if self._include_email else None,
        )

    async def dispatch(self, contact: Contact, position: Position | None) -> DispatchOutcome:
        """Run one activation through the state machine."""
        if self._in_flight:
            _logger.info("Activation ignored, an alert is already in flight")
            return DispatchOutcome(
                state=DispatchState.DISPATCHING,
                notice=Notice(level=NoticeLevel.INFO, text=DISPATCH_IN_FLIGHT_TEXT),
            )

        try:
            contact.require_complete()
        except MissingCredentialsError as exc:
            _logger.info("Activation blocked: %s", exc)
            self._transition(DispatchState.AWAITING_CREDENTIALS)
            return DispatchOutcome(
                state=DispatchState.AWAITING_CREDENTIALS,
                notice=Notice(level=NoticeLevel.WARNING, text=MISSING_CREDENTIALS_TEXT, blocking=True),
            )

        self._cache.save_contact(contact, self._credential_ttl_hours)

        if position is None:
            self._transition(DispatchState.AWAITING_LOCATION)
            return DispatchOutcome(
                state=DispatchState.AWAITING_LOCATION,
                notice=Notice(level=NoticeLevel.INFO, text=FETCHING_LOCATION_TEXT),
            )

        self._transition(DispatchState.DISPATCHING)
        self._in_flight = True
        generation = self._generation
        try:
            response = await self._send(self.build_request(contact, position))
        except DispatchRemoteError as exc:
            _logger.warning("Alert endpoint reported failure: %s", exc)
            outcome = DispatchOutcome(
                state=DispatchState.FAILED,
                notice=Notice(level=NoticeLevel.ERROR, text=str(exc), blocking=True),
            )
        except DispatchError as exc:
            _logger.warning("Alert delivery failed: %s", exc)
            outcome = DispatchOutcome(
                state=DispatchState.FAILED,
                notice=Notice(level=NoticeLevel.ERROR, text=f"Error sending alert: {exc}", blocking=True),
            )
        except BaseException:
            self._transition(DispatchState.IDLE)
            raise
        else:
            if generation == self._generation:
                self._cache.save_contact(contact, self._credential_ttl_hours)
            else:
                _logger.info("Reset while the alert was in flight, contact not re-saved")
            outcome = DispatchOutcome(
                state=DispatchState.DELIVERED,
                notice=Notice(level=NoticeLevel.INFO, text=response.message, blocking=True),
                response=response,
            )
        finally:
            self._in_flight = False

        self._transition(outcome.state)
        self._transition(DispatchState.IDLE)
        return outcome

    async def _send(self, request: AlertRequest) -> AlertResponse:
        raw = await self._transport.post_json(self._alert_url, request.to_wire())
        return parse_alert_response(raw, self._alert_url)
