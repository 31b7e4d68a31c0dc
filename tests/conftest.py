from __future__ import annotations

import os
import random
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import fakeredis
import pytest

TESTS_ROOT = Path(__file__).resolve().parent
FIXED_NOW = datetime(2026, 3, 14, 12, 0, tzinfo=UTC)


@pytest.fixture(scope="session", autouse=True)
def _strict_assets_for_tests() -> None:
    """Missing or malformed fixture CSVs must fail loudly instead of using built-in content."""

    os.environ["FLAVOR_QUEST_STRICT_ASSETS"] = "1"


class ManualHandle:
    def __init__(self, callback: Callable[[], object], delay: float) -> None:
        self.callback = callback
        self.delay = delay
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Event-loop stand-in: scheduled callbacks only run when the test advances time."""

    def __init__(self) -> None:
        self.handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], object]) -> ManualHandle:
        handle = ManualHandle(callback, delay)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire_next(self) -> bool:
        while self.handles:
            handle = self.handles.pop(0)
            if not handle.cancelled:
                handle.callback()
                return True
        return False

    def advance(self, ticks: int) -> int:
        fired = 0
        for _ in range(ticks):
            if not self.fire_next():
                break
            fired += 1
        return fired


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def redis_client() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def store(redis_client: fakeredis.FakeRedis):
    from flavor_quest.store import RedisProgressStore

    return RedisProgressStore(r=redis_client, player_id="p1", key_prefix="test")


@pytest.fixture()
def catalog():
    from flavor_quest.catalog.registry import load_catalog

    return load_catalog(root=TESTS_ROOT, now=FIXED_NOW, rng=random.Random(7))


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture()
def make_engine(catalog, store, scheduler: ManualScheduler, clock: FakeClock):
    """Factory so tests can seed the store before the engine bootstraps."""

    from flavor_quest.config import EngineConfig
    from flavor_quest.engine import GameEngine

    def _make(**overrides):
        kwargs = {
            "catalog": catalog,
            "store": store,
            "scheduler": scheduler,
            "config": EngineConfig(key_prefix="test", player_id="p1"),
            "clock": clock,
            "rng": random.Random(3),
        }
        kwargs.update(overrides)
        return GameEngine(**kwargs)

    return _make
