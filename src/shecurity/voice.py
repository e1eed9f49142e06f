"""Voice-triggered activation.

A :class:`VoiceTrigger` consumes a continuous stream of transcripts from a
:class:`SpeechRecognizer` and fires the same activation path as the manual
HELP control whenever an utterance contains one of the trigger keywords.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import Any, Protocol

from shecurity._constants import DEFAULT_SPEECH_LANGUAGE, SPEECH_UNSUPPORTED_TEXT, VOICE_KEYWORDS
from shecurity.exceptions import SpeechUnavailableError
from shecurity.models.session import Notice, NoticeCallback, NoticeLevel

_logger = logging.getLogger(__name__)


def matches_keyword(utterance: str, keywords: Iterable[str] = VOICE_KEYWORDS) -> bool:
    """Whether the normalized *utterance* contains any of *keywords*."""
    text = utterance.strip().lower()
    if not text:
        return False
    return any(keyword in text for keyword in keywords)


class SpeechRecognizer(Protocol):
    """Structural interface of a continuous speech-to-text capability.

    ``listen`` yields final transcripts until the platform ends the
    session. It raises :class:`SpeechUnavailableError` when recognition
    cannot be started at all.
    """

    def listen(self, language: str) -> AsyncIterator[str]:
        ...


class QueueSpeechRecognizer:
    """Recognizer fed with transcripts from an :class:`asyncio.Queue`.

    Bridges any external speech-to-text engine: the engine pushes final
    transcripts with :meth:`feed`, and :meth:`end_session` ends the current
    listening session (the trigger then restarts it).
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self.language: str | None = None

    def feed(self, transcript: str) -> None:
        self._queue.put_nowait(transcript)

    def end_session(self) -> None:
        self._queue.put_nowait(None)

    async def listen(self, language: str) -> AsyncIterator[str]:
        self.language = language
        while True:
            transcript = await self._queue.get()
            if transcript is None:
                return
            yield transcript


class VoiceTrigger:
    """Long-lived keyword subscription.

    Parameters
    ----------
    recognizer : SpeechRecognizer or None
        Platform speech capability. ``None`` means unsupported: a warning
        notice is surfaced once and the trigger stays inactive.
    on_activate : callable
        Coroutine function run once per qualifying utterance.
    notify : callable or None
        Receiver for user-visible notices.
    keywords : iterable of str
        Lower-case trigger words; any single one suffices.
    language : str
        Best-effort language hint passed to the recognizer.
    restart_delay : float
        Seconds to wait before listening again after the platform ends a
        recognition session.
    """

    def __init__(
        self,
        recognizer: SpeechRecognizer | None,
        on_activate: Callable[[], Awaitable[Any]],
        *,
        notify: NoticeCallback | None = None,
        keywords: Iterable[str] = VOICE_KEYWORDS,
        language: str = DEFAULT_SPEECH_LANGUAGE,
        restart_delay: float = 1.0,
    ) -> None:
        self._recognizer = recognizer
        self._on_activate = on_activate
        self._notify = notify
        self._keywords = frozenset(k.strip().lower() for k in keywords if k.strip())
        self._language = language
        self._restart_delay = restart_delay
        self._task: asyncio.Task[None] | None = None
        self._unavailable = recognizer is None
        self._unavailable_reported = False

    @property
    def keywords(self) -> frozenset[str]:
        return self._keywords

    @property
    def is_listening(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def unavailable(self) -> bool:
        """Whether the speech capability is missing for this session."""
        return self._unavailable

    def start(self) -> bool:
        """Begin continuous listening in the background.

        Returns ``False`` (after surfacing a notice) when speech recognition
        is unavailable.
        """
        if self._unavailable:
            self._report_unavailable()
            return False
        if self.is_listening:
            return True
        self._task = asyncio.get_running_loop().create_task(self._run(), name="shecurity-voice-trigger")
        _logger.debug("Voice trigger listening (language=%s)", self._language)
        return True

    async def stop(self) -> None:
        """Cancel the subscription and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def handle_utterance(self, utterance: str) -> bool:
        """Process one transcript; returns whether activation fired."""
        if not matches_keyword(utterance, self._keywords):
            return False
        _logger.info("Voice keyword detected, activating alert")
        try:
            await self._on_activate()
        except Exception:
            _logger.exception("Voice-triggered activation failed")
        return True

    async def _run(self) -> None:
        assert self._recognizer is not None  # noqa: S101
        while True:
            try:
                async for utterance in self._recognizer.listen(self._language):
                    await self.handle_utterance(utterance)
            except SpeechUnavailableError as exc:
                _logger.warning("Speech recognition unavailable: %s", exc)
                self._unavailable = True
                self._report_unavailable()
                return
            except Exception:
                _logger.exception("Speech recognition failed, restarting in %.1fs", self._restart_delay)
            else:
                _logger.debug("Speech session ended, restarting in %.1fs", self._restart_delay)
            await asyncio.sleep(self._restart_delay)

    def _report_unavailable(self) -> None:
        if self._unavailable_reported:
            return
        self._unavailable_reported = True
        if self._notify is not None:
            self._notify(Notice(level=NoticeLevel.WARNING, text=SPEECH_UNSUPPORTED_TEXT))
