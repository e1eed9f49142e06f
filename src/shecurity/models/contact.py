"""Emergency contact models."""

from __future__ import annotations

from pydantic import ConfigDict

from shecurity.exceptions import MissingCredentialsError
from shecurity.models._base import ShecurityBaseModel


class Contact(ShecurityBaseModel):
    """Emergency contact entered by the user.

    Either field may be empty while the user is still typing; an alert
    is only sent once :attr:`is_complete` holds.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    phone: str = ""
    email: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.phone) and bool(self.email)

    def require_complete(self) -> None:
        """Raise :class:`MissingCredentialsError` naming the empty fields."""
        missing = [name for name in ("phone", "email") if not getattr(self, name)]
        if missing:
            raise MissingCredentialsError(f"Missing emergency contact field(s): {', '.join(missing)}")


class CachedCredential(ShecurityBaseModel):
    """One persisted credential with its absolute expiry."""

    value: str
    expires_at_epoch_ms: int

    def is_expired(self, now_ms: int) -> bool:
        return now_ms > self.expires_at_epoch_ms
