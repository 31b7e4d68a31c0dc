from __future__ import annotations

from datetime import UTC, datetime

import fakeredis
import pytest

from flavor_quest.config import EngineConfig, assets_root, get_redis_url, project_root, strict_assets_enabled
from flavor_quest.core.events import SessionEvent
from flavor_quest.infra.redis_client import create_redis
from flavor_quest.streams import Mailbox, MailboxPublisher, event_fields, publish_to_mailbox


def test_mailbox_key() -> None:
    assert Mailbox(key_prefix="fq", player_id="p9").key == "fq:mailbox:p9"


def test_event_fields_flatten_payload() -> None:
    event = SessionEvent(
        type="SESSION_ENDED",
        payload={"score": 140, "titles": ["Explorer", "Speed Demon"], "quest": None},
        ts=datetime(2026, 3, 14, 12, 0, tzinfo=UTC),
    )

    assert event_fields(event) == {
        "type": "SESSION_ENDED",
        "ts": "2026-03-14T12:00:00+00:00",
        "score": "140",
        "titles": "Explorer,Speed Demon",
        "quest": "",
    }


def test_publish_respects_maxlen(redis_client: fakeredis.FakeRedis) -> None:
    mailbox = Mailbox(key_prefix="fq", player_id="p1")
    for n in range(5):
        publish_to_mailbox(r=redis_client, mailbox=mailbox, fields={"n": str(n)}, maxlen=2)

    entries = redis_client.xrange(mailbox.key)
    assert [f["n"] for _, f in entries] == ["3", "4"]


def test_publisher_can_include_ticks(redis_client: fakeredis.FakeRedis) -> None:
    mailbox = Mailbox(key_prefix="fq", player_id="p1")
    quiet = MailboxPublisher(r=redis_client, mailbox=mailbox)
    chatty = MailboxPublisher(r=redis_client, mailbox=mailbox, include_ticks=True)
    tick = SessionEvent.now(type="TIME_CHANGED", payload={"time_remaining": 10})

    quiet(tick)
    assert redis_client.xlen(mailbox.key) == 0
    chatty(tick)
    assert redis_client.xlen(mailbox.key) == 1


def test_engine_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAVOR_QUEST_KEY_PREFIX", "fq-test")
    monkeypatch.setenv("FLAVOR_QUEST_PLAYER_ID", "alice")
    monkeypatch.setenv("FLAVOR_QUEST_LEADERBOARD_SIZE", "25")

    cfg = EngineConfig.from_env()

    assert cfg == EngineConfig(key_prefix="fq-test", player_id="alice", leaderboard_size=25)


def test_engine_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FLAVOR_QUEST_KEY_PREFIX", "FLAVOR_QUEST_PLAYER_ID", "FLAVOR_QUEST_LEADERBOARD_SIZE"):
        monkeypatch.delenv(name, raising=False)

    cfg = EngineConfig.from_env()
    assert cfg.key_prefix == "flavor_quest"
    assert cfg.leaderboard_size == 100
    assert cfg.tick_interval == 1.0


def test_redis_url_and_assets_root(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.delenv("REDIS_URL", raising=False)
    assert get_redis_url() == "redis://localhost:6379/0"
    monkeypatch.setenv("REDIS_URL", "redis://cache:6380/2")
    assert get_redis_url() == "redis://cache:6380/2"

    client = create_redis()
    assert client.connection_pool.connection_kwargs["port"] == 6380
    assert client.connection_pool.connection_kwargs["decode_responses"] is True
    assert create_redis("redis://other:6390/3").connection_pool.connection_kwargs["db"] == 3

    monkeypatch.delenv("FLAVOR_QUEST_ASSETS_ROOT", raising=False)
    assert assets_root() == project_root()
    monkeypatch.setenv("FLAVOR_QUEST_ASSETS_ROOT", str(tmp_path))
    assert assets_root() == tmp_path


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("yes", True), (" TRUE ", True), ("0", False), ("", False)])
def test_strict_assets_flag(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("FLAVOR_QUEST_STRICT_ASSETS", raw)
    assert strict_assets_enabled() is expected
