"""Client configuration for shecurity."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from shecurity._constants import (
    DEFAULT_ALERT_URL,
    DEFAULT_CREDENTIAL_TTL_HOURS,
    DEFAULT_NEAREST_COUNT,
    DEFAULT_SPEECH_LANGUAGE,
    VALID_TRAVEL_MODES,
)
from shecurity.exceptions import ShecurityConfigError
from shecurity.models.location import LocationOptions


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise ShecurityConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ShecurityConfig:
    """Client configuration.

    Parameters
    ----------
    alert_url : str
        Endpoint that receives the alert POST.
    credential_ttl_hours : float
        Lifetime of the cached emergency contact. Renewed on every
        successful dispatch.
    nearest_count : int
        Number of assistance points shown in the ranked panel.
    high_accuracy : bool
        Prefer GPS over a network-based position estimate.
    location_timeout_ms : int
        Abort the location query when no fix arrives within this window.
    location_max_age_ms : int
        Maximum age of a reused fix. ``0`` always forces a fresh fix.
    request_timeout : float
        Total timeout in seconds for the alert request.
    include_email : bool
        Also send the contact email in the alert body. The legacy
        endpoint only expects phone and coordinates.
    speech_language : str
        Best-effort language hint for the speech recognizer.
    voice_enabled : bool
        Start the voice trigger together with the client.
    catalog_path : Path or None
        JSON file with assistance points. ``None`` uses the bundled dataset.
    store_path : Path or None
        JSON file used to persist cached credentials. ``None`` keeps them
        in memory only.
    travel_mode : str
        Travel mode used in generated directions links.
    """

    alert_url: str = DEFAULT_ALERT_URL
    credential_ttl_hours: float = DEFAULT_CREDENTIAL_TTL_HOURS
    nearest_count: int = DEFAULT_NEAREST_COUNT
    high_accuracy: bool = True
    location_timeout_ms: int = 10_000
    location_max_age_ms: int = 0
    request_timeout: float = 15.0
    include_email: bool = False
    speech_language: str = DEFAULT_SPEECH_LANGUAGE
    voice_enabled: bool = True
    catalog_path: Path | None = None
    store_path: Path | None = None
    travel_mode: str = "driving"

    def __post_init__(self) -> None:
        if not self.alert_url:
            raise ShecurityConfigError("alert_url must not be empty")
        if self.credential_ttl_hours <= 0:
            raise ShecurityConfigError("credential_ttl_hours must be positive")
        if self.nearest_count < 0:
            raise ShecurityConfigError("nearest_count must not be negative")
        if self.location_timeout_ms <= 0:
            raise ShecurityConfigError("location_timeout_ms must be positive")
        if self.location_max_age_ms < 0:
            raise ShecurityConfigError("location_max_age_ms must not be negative")
        if self.travel_mode not in VALID_TRAVEL_MODES:
            raise ShecurityConfigError(f"travel_mode must be one of {VALID_TRAVEL_MODES}, got {self.travel_mode!r}")

    @property
    def location_options(self) -> LocationOptions:
        """Location query options derived from this configuration."""
        return LocationOptions(
            high_accuracy=self.high_accuracy,
            timeout_ms=self.location_timeout_ms,
            max_age_ms=self.location_max_age_ms,
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> ShecurityConfig:
        """Create configuration from environment variables.

        Reads optional ``SHECURITY_*`` variables. Explicit keyword arguments
        override environment values.

        Raises
        ------
        ShecurityConfigError
            When a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "SHECURITY_ALERT_URL": "alert_url",
            "SHECURITY_SPEECH_LANGUAGE": "speech_language",
            "SHECURITY_TRAVEL_MODE": "travel_mode",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "SHECURITY_CREDENTIAL_TTL_HOURS": ("credential_ttl_hours", float),
            "SHECURITY_NEAREST_COUNT": ("nearest_count", int),
            "SHECURITY_LOCATION_TIMEOUT_MS": ("location_timeout_ms", int),
            "SHECURITY_LOCATION_MAX_AGE_MS": ("location_max_age_ms", int),
            "SHECURITY_REQUEST_TIMEOUT": ("request_timeout", float),
        }
        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        _ENV_BOOL_MAP = {
            "SHECURITY_HIGH_ACCURACY": ("high_accuracy", True),
            "SHECURITY_INCLUDE_EMAIL": ("include_email", False),
            "SHECURITY_VOICE_ENABLED": ("voice_enabled", True),
        }
        for env_key, (field_name, default) in _ENV_BOOL_MAP.items():
            if field_name not in overrides:
                config_kwargs[field_name] = _env_bool(env.get(env_key), default)

        for env_key, field_name in (
            ("SHECURITY_CATALOG_PATH", "catalog_path"),
            ("SHECURITY_STORE_PATH", "store_path"),
        ):
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = Path(val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
