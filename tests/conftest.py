# -*- coding: utf-8 -*-
"""
Shared fixtures for the auto translation test suite.
"""
import asyncio
from typing import Callable, Dict, List

import pytest

from models import InboundMessage, MessageKind
from settings import Settings
from triggers.auto_translation.generation import GenerationClient


class FakeGenerationClient(GenerationClient):
    """In-memory generation client.

    `translations` maps a target language to either a string, an exception
    instance, or a callable(attempt) returning/raising per attempt.
    """

    def __init__(self, detected: str = "en", translations: Dict | None = None, delay: float = 0):
        self.detected = detected
        self.translations = translations or {}
        self.delay = delay
        self.detect_calls: List[str] = []
        self.translate_calls: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def detect_language(self, text: str) -> str:
        self.detect_calls.append(text)
        if isinstance(self.detected, Exception):
            raise self.detected
        return self.detected

    async def translate(self, text, target_language, source_language=None):
        attempt = sum(1 for call in self.translate_calls if call[1] == target_language)
        self.translate_calls.append((text, target_language, source_language))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            behaviour = self.translations.get(target_language, f"[{target_language}] {text}")
            if callable(behaviour):
                return behaviour(attempt)
            if isinstance(behaviour, Exception):
                raise behaviour
            return behaviour
        finally:
            self.in_flight -= 1

    async def aclose(self):
        pass


class RecordingSleep:
    """Replaces asyncio.sleep so backoff delays are recorded instead of waited."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink:
    def __init__(self):
        self.payloads = []

    async def __call__(self, payload) -> None:
        self.payloads.append(payload)

    @property
    def texts(self) -> List[str]:
        return [p.text for p in self.payloads]


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def factory(**overrides) -> Settings:
        values = dict(
            _env_file=None,
            TELEGRAM_BOT_API_TOKEN="123:token",
            GEMINI_API_KEY="gemini-key",
            TARGET_LANGS="en,ko,ja",
            THREAD_MODE=True,
            GEN_TIMEOUT=1.0,
            RETRY_MAX=2,
            RETRY_BASE_DELAY=1.0,
            MAX_INFLIGHT_CALLS=16,
            REPLY_MAX_LENGTH=4000,
            DEDUP_TTL_SECONDS=600,
            MIN_TEXT_LENGTH=3,
            OPT_OUT_MARKERS="/ignore,!ignore",
            MASK_TEXT_IN_LOGS=False,
        )
        values.update(overrides)
        return Settings(**values)

    return factory


@pytest.fixture
def make_message() -> Callable[..., InboundMessage]:
    def factory(text: str = "hello team", **overrides) -> InboundMessage:
        values = dict(
            conversation_id="C1",
            message_id="T1",
            author_id="U1",
            text=text,
            is_from_automated_sender=False,
            kind=MessageKind.NORMAL,
        )
        values.update(overrides)
        return InboundMessage(**values)

    return factory


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
