"""High-level async client wiring the shecurity components together."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import aiohttp

from shecurity._transport import JsonTransport, Transport
from shecurity.catalog import load_catalog
from shecurity.config import ShecurityConfig
from shecurity.credentials import CredentialCache, JsonFileStore, KeyValueStore, MemoryStore
from shecurity.dispatcher import AlertDispatcher
from shecurity.exceptions import ShecurityError
from shecurity.location import LocationBackend, LocationProvider
from shecurity.models.assistance import AssistancePoint
from shecurity.models.session import ActivationSource, DispatchOutcome, NoticeCallback
from shecurity.session import SessionController
from shecurity.voice import SpeechRecognizer, VoiceTrigger

_logger = logging.getLogger(__name__)


class ShecurityClient:
    """Async client for one emergency-alert session.

    Usage::

        async with ShecurityClient(config, location_backend=backend) as client:
            client.session.set_contact("+911234567890", "friend@example.com")
            outcome = await client.help()
    """

    def __init__(
        self,
        config: ShecurityConfig | None = None,
        *,
        location_backend: LocationBackend | None = None,
        recognizer: SpeechRecognizer | None = None,
        store: KeyValueStore | None = None,
        catalog: Sequence[AssistancePoint] | None = None,
        notify: NoticeCallback | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or ShecurityConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._location_backend = location_backend
        self._recognizer = recognizer
        self._store = store
        self._catalog = tuple(catalog) if catalog is not None else None
        self._notify = notify
        self._session: SessionController | None = None
        self._voice: VoiceTrigger | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ShecurityClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = JsonTransport(self._http_session, timeout=self._config.request_timeout)

        try:
            await self._open_session(self._transport)
        except BaseException:
            await self.__aexit__(None, None, None)
            raise
        return self

    async def _open_session(self, transport: Transport) -> None:
        catalog = self._catalog if self._catalog is not None else load_catalog(self._config.catalog_path)
        cache = CredentialCache(self._resolve_store())
        dispatcher = AlertDispatcher(
            transport,
            cache,
            alert_url=self._config.alert_url,
            credential_ttl_hours=self._config.credential_ttl_hours,
            include_email=self._config.include_email,
        )
        self._session = SessionController(
            cache=cache,
            location=LocationProvider(self._location_backend),
            dispatcher=dispatcher,
            catalog=catalog,
            nearest_count=self._config.nearest_count,
            location_options=self._config.location_options,
            travel_mode=self._config.travel_mode,
            notify=self._notify,
        )
        await self._session.start()

        if self._config.voice_enabled:
            self._voice = VoiceTrigger(
                self._recognizer,
                self._on_voice_activation,
                notify=self._notify,
                language=self._config.speech_language,
            )
            self._voice.start()

    async def __aexit__(self, *exc: Any) -> None:
        if self._voice is not None:
            await self._voice.stop()
            self._voice = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None
        if self._session is not None:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> ShecurityConfig:
        return self._config

    @property
    def session(self) -> SessionController:
        if self._session is None:
            raise ShecurityError("Client not initialized. Use 'async with ShecurityClient(...) as client:'")
        return self._session

    @property
    def voice(self) -> VoiceTrigger | None:
        return self._voice

    async def help(self) -> DispatchOutcome:
        """Press the HELP control."""
        return await self.session.activate(ActivationSource.MANUAL)

    async def reset(self) -> None:
        await self.session.reset()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_store(self) -> KeyValueStore:
        if self._store is not None:
            return self._store
        if self._config.store_path is not None:
            return JsonFileStore(self._config.store_path)
        return MemoryStore()

    async def _on_voice_activation(self) -> DispatchOutcome:
        return await self.session.activate(ActivationSource.VOICE)
