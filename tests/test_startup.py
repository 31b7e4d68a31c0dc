from __future__ import annotations

from pathlib import Path

import fakeredis
import pytest

from flavor_quest import startup
from flavor_quest.config import EngineConfig
from flavor_quest.models import PlayerProgress, SessionPhase

TESTS_ROOT = Path(__file__).resolve().parent


@pytest.fixture()
def env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAVOR_QUEST_ASSETS_ROOT", str(TESTS_ROOT))
    monkeypatch.setenv("FLAVOR_QUEST_KEY_PREFIX", "boot")
    monkeypatch.setenv("FLAVOR_QUEST_PLAYER_ID", "alice")
    monkeypatch.setenv("FLAVOR_QUEST_LEADERBOARD_SIZE", "3")


def test_create_store_uses_config(redis_client: fakeredis.FakeRedis) -> None:
    store = startup.create_store(EngineConfig(key_prefix="boot", player_id="bob", leaderboard_size=7), r=redis_client)

    assert store.player_id == "bob"
    assert store.key_prefix == "boot"
    assert store.leaderboard_size == 7


def test_default_engine_is_wired_from_the_environment(
    env: None, redis_client: fakeredis.FakeRedis, scheduler, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(startup, "create_redis", lambda: redis_client)

    engine = startup.load_default_engine(scheduler=scheduler)

    assert engine.state == SessionPhase.idle
    assert engine.config == EngineConfig.from_env()
    assert len(engine.catalog.ingredients) == 9
    # Bootstrap persisted the streak under the configured namespace.
    assert redis_client.exists("boot:alice:progress")


def test_default_engine_reads_existing_progress(env: None, redis_client: fakeredis.FakeRedis, scheduler) -> None:
    seeded = startup.create_store(EngineConfig.from_env(), r=redis_client)
    seeded.save_progress(PlayerProgress(games_played=4, total_xp=420))

    engine = startup.load_default_engine(r=redis_client, scheduler=scheduler)

    assert engine.progress.games_played == 4
    assert engine.progress.level == 3
