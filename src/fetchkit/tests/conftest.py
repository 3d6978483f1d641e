"""Shared fixtures: sleep recording and settings isolation."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from fetchkit.config import clear_settings_cache
from fetchkit.retry import executor


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Reload settings from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    """Record inter-attempt delays (ms) instead of sleeping."""
    recorded: list[int] = []

    async def fake_sleep(delay_ms: int) -> None:
        recorded.append(delay_ms)

    def fake_sleep_sync(delay_ms: int) -> None:
        recorded.append(delay_ms)

    monkeypatch.setattr(executor, "_sleep", fake_sleep)
    monkeypatch.setattr(executor, "_sleep_sync", fake_sleep_sync)
    return recorded
