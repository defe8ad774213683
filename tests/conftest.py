"""Shared pytest fixtures and configuration."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from leadcatcher.channels.base import MessagingChannel
from leadcatcher.session.history import HistoryLedger
from leadcatcher.session.store import SessionStore

SYSTEM_PROMPT = "You are a helpful assistant."


def count_words(text: str) -> int:
    """Deterministic stand-in for a tokenizer: one token per word."""
    return len(text.split())


class FakeClock:
    """Manually advanced clock for timing-dependent tests."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingChannel(MessagingChannel):
    """Channel that records outbound messages instead of sending them."""

    def __init__(self):
        super().__init__("fake", {})
        self.sent = []
        self.connected = False

    async def connect(self):
        self.connected = True

    async def disconnect(self):
        self.connected = False

    async def send_message(self, target_id: str, content: str, **kwargs) -> bool:
        self.sent.append((target_id, content))
        return True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(SYSTEM_PROMPT, default_language="en", clock=clock)


@pytest.fixture
def ledger():
    return HistoryLedger(count_words, max_tokens=1000)


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.notify = AsyncMock(return_value={"success": True, "results": []})
    return mock


@pytest.fixture
def user_id():
    return "4915112345678"
