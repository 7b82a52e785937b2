"""Pytest configuration and fixtures."""

from types import SimpleNamespace

import pytest

from egx_advisor.cache.disk_cache import DiskCache
from egx_advisor.market.reference import load_market_reference


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubChatModel:
    """Stands in for a LangChain chat model: replays scripted replies or errors."""

    def __init__(self, *replies: object) -> None:
        self._replies = list(replies)
        self.calls: list[list] = []

    async def ainvoke(self, messages: list) -> SimpleNamespace:
        self.calls.append(messages)
        reply = self._replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return SimpleNamespace(content=reply)


class StatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path, clock) -> DiskCache:
    return DiskCache(tmp_path / "cache", ttl_seconds=24 * 3600, clock=clock)


@pytest.fixture
def reference():
    return load_market_reference()


@pytest.fixture
def stub_chat_model():
    return StubChatModel


@pytest.fixture
def status_error():
    return StatusError


@pytest.fixture
def recorded_sleeps():
    """An awaitable sleep that records delays instead of waiting."""
    delays: list[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    sleep.delays = delays
    return sleep
