"""Shared fixtures: deterministic clock, ids and message factory."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from modbot.memory.models import Message
from modbot.storage.memory import InMemoryStorage


class FakeClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def conv_ids():
    """Sequential conversation ids: conv-1, conv-2, ..."""
    counter = itertools.count(1)
    return lambda: f"conv-{next(counter)}"


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def make_message():
    """Build a Message; content defaults to "content of <id>"."""

    def _make(msg_id: str, role: str = "user", content=None, **overrides) -> Message:
        defaults = dict(
            id=msg_id,
            role=role,
            content=content if content is not None else f"content of {msg_id}",
            timestamp=datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc),
        )
        defaults.update(overrides)
        return Message(**defaults)

    return _make
