from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest

from shecurity.exceptions import SpeechUnavailableError
from shecurity.models.session import Notice, NoticeLevel
from shecurity.voice import QueueSpeechRecognizer, VoiceTrigger, matches_keyword


class _Activations:
    def __init__(self) -> None:
        self.count = 0
        self.fired = asyncio.Event()

    async def __call__(self) -> None:
        self.count += 1
        self.fired.set()


class _BrokenRecognizer:
    def listen(self, language: str) -> AsyncIterator[str]:
        return self._listen()

    async def _listen(self) -> AsyncIterator[str]:
        raise SpeechUnavailableError("microphone permission denied")
        yield ""  # pragma: no cover


async def _drain() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.mark.parametrize(
    ("utterance", "expected"),
    [
        ("I need help now", True),
        ("  EMERGENCY!  ", True),
        ("call the Police please", True),
        ("helpful", True),
        ("hello there", False),
        ("", False),
    ],
)
def test_matches_keyword(utterance: str, expected: bool) -> None:
    assert matches_keyword(utterance) is expected


@pytest.mark.asyncio
async def test_qualifying_utterance_activates_exactly_once() -> None:
    activations = _Activations()
    recognizer = QueueSpeechRecognizer()
    trigger = VoiceTrigger(recognizer, activations, language="en-IN")

    assert trigger.start() is True
    recognizer.feed("hello there")
    recognizer.feed("I need help now, emergency, call the police")
    await asyncio.wait_for(activations.fired.wait(), timeout=1)
    await _drain()
    await trigger.stop()

    assert activations.count == 1
    assert recognizer.language == "en-IN"
    assert trigger.is_listening is False


@pytest.mark.asyncio
async def test_listening_restarts_after_session_ends() -> None:
    activations = _Activations()
    recognizer = QueueSpeechRecognizer()
    trigger = VoiceTrigger(recognizer, activations, restart_delay=0)

    trigger.start()
    recognizer.end_session()
    recognizer.feed("help")
    await asyncio.wait_for(activations.fired.wait(), timeout=1)
    await trigger.stop()

    assert activations.count == 1


@pytest.mark.asyncio
async def test_missing_recognizer_reports_once() -> None:
    notices: list[Notice] = []
    trigger = VoiceTrigger(None, _Activations(), notify=notices.append)

    assert trigger.start() is False
    assert trigger.start() is False

    assert trigger.unavailable is True
    assert len(notices) == 1
    assert notices[0].level is NoticeLevel.WARNING


@pytest.mark.asyncio
async def test_recognizer_failure_deactivates_trigger() -> None:
    notices: list[Notice] = []
    trigger = VoiceTrigger(_BrokenRecognizer(), _Activations(), notify=notices.append)

    trigger.start()
    await _drain()

    assert trigger.is_listening is False
    assert trigger.unavailable is True
    assert len(notices) == 1
    assert trigger.start() is False
    assert len(notices) == 1


@pytest.mark.asyncio
async def test_activation_failure_does_not_stop_listening() -> None:
    calls = 0
    done = asyncio.Event()

    async def flaky() -> None:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("boom")
        done.set()

    recognizer = QueueSpeechRecognizer()
    trigger = VoiceTrigger(recognizer, flaky)
    trigger.start()
    recognizer.feed("help")
    recognizer.feed("police")
    await asyncio.wait_for(done.wait(), timeout=1)
    await trigger.stop()

    assert calls == 2


class _DeviceLostOnceRecognizer:
    """First session fails with an I/O error, the next one hears "help"."""

    def __init__(self) -> None:
        self.sessions = 0

    async def listen(self, language: str) -> AsyncIterator[str]:
        self.sessions += 1
        if self.sessions == 1:
            raise OSError("audio device lost")
        yield "help"
        await asyncio.Event().wait()


@pytest.mark.asyncio
async def test_recognizer_error_restarts_listening() -> None:
    recognizer = _DeviceLostOnceRecognizer()
    activations = _Activations()
    trigger = VoiceTrigger(recognizer, activations, restart_delay=0)

    trigger.start()
    await asyncio.wait_for(activations.fired.wait(), timeout=1)

    assert trigger.is_listening is True
    assert trigger.unavailable is False
    assert recognizer.sessions == 2
    assert activations.count == 1

    await trigger.stop()
    assert trigger.is_listening is False


def test_custom_keywords_are_normalized() -> None:
    trigger = VoiceTrigger(None, _Activations(), keywords=[" SOS ", "Bachao", ""])

    assert trigger.keywords == frozenset({"sos", "bachao"})
