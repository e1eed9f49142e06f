"""Time-to-live cache for the emergency contact.

Each credential is stored under its own key as a serialized
``{"value": ..., "expiresAtEpochMs": ...}`` record. Expiry is lazy: a
record is checked (and deleted when expired) only when it is read.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from shecurity._constants import EMAIL_KEY, MS_PER_HOUR, PHONE_KEY
from shecurity.models.contact import CachedCredential, Contact

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class KeyValueStore(Protocol):
    """String key-value storage (``localStorage`` style)."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def clear(self) -> None:
        ...


class MemoryStore:
    """In-process store; contents are lost when the process exits."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """Store backed by a single JSON object on disk.

    The file is rewritten atomically on every change. A missing or
    unreadable file is treated as an empty store.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Ignoring corrupt credential store %s", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path.unlink()


class CredentialCache:
    """Credential storage with per-entry expiry.

    A value is never returned past its expiry instant. The clock is
    assumed not to move backwards; a rollback can extend or shorten
    validity and is not corrected.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store: KeyValueStore = store if store is not None else MemoryStore()
        self._clock = clock

    def put(self, key: str, value: str, ttl_hours: float) -> CachedCredential:
        """Store *value* under *key*, expiring *ttl_hours* from now."""
        if ttl_hours <= 0:
            raise ValueError(f"ttl_hours must be positive, got {ttl_hours}")
        record = CachedCredential(
            value=value,
            expires_at_epoch_ms=self._clock() + int(ttl_hours * MS_PER_HOUR),
        )
        self._store.set(key, record.model_dump_json(by_alias=True))
        return record

    def get(self, key: str) -> str | None:
        """Return the cached value, or ``None`` when absent or expired.

        Expired and unreadable records are deleted.
        """
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            record = CachedCredential.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Dropping unreadable cached credential %r", key)
            self._store.delete(key)
            return None
        if record.is_expired(self._clock()):
            _logger.debug("Cached credential %r expired", key)
            self._store.delete(key)
            return None
        return record.value

    def clear(self) -> None:
        """Remove every entry unconditionally."""
        self._store.clear()

    def load_contact(self) -> Contact | None:
        """Return the cached contact when both fields are still valid."""
        phone = self.get(PHONE_KEY)
        email = self.get(EMAIL_KEY)
        if not phone or not email:
            return None
        return Contact(phone=phone, email=email)

    def save_contact(self, contact: Contact, ttl_hours: float) -> None:
        """Persist both contact fields, renewing their TTL."""
        self.put(PHONE_KEY, contact.phone, ttl_hours)
        self.put(EMAIL_KEY, contact.email, ttl_hours)
