"""Custom exception hierarchy for shecurity."""

from __future__ import annotations


class ShecurityError(Exception):
    """Base exception for all shecurity errors."""


class ShecurityConfigError(ShecurityError):
    """Invalid or missing configuration."""


class CatalogError(ShecurityError):
    """Assistance-point catalog could not be loaded or parsed."""


class MissingCredentialsError(ShecurityError):
    """Emergency phone number or email is empty."""


class LocationUnavailableError(ShecurityError):
    """The platform offers no location capability."""


class LocationError(ShecurityError):
    """The platform failed to produce a fix.

    ``reason`` is one of ``permission_denied``, ``position_unavailable``
    or ``timeout``.
    """

    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"

    def __init__(self, message: str, *, reason: str = POSITION_UNAVAILABLE) -> None:
        self.reason = reason
        super().__init__(message)


class SpeechUnavailableError(ShecurityError):
    """The platform offers no speech-recognition capability."""


class DispatchError(ShecurityError):
    """Base for failures while sending an alert."""


class DispatchTransportError(DispatchError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class DispatchRemoteError(DispatchError):
    """The alert endpoint was reached but reported a failure."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)
