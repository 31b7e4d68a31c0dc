from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis
from pydantic import TypeAdapter, ValidationError

from flavor_quest.gateways import PersistenceError
from flavor_quest.models import (
    Achievement,
    DailyQuest,
    GameDataExport,
    GameMode,
    GameScore,
    PlayerProgress,
    UserSettings,
)

logger = logging.getLogger(__name__)

_ACHIEVEMENT_LIST = TypeAdapter(list[Achievement])


@contextmanager
def _persistence_errors(action: str) -> Iterator[None]:
    """Translate redis / decoding failures into PersistenceError."""

    try:
        yield
    except redis.RedisError as e:
        raise PersistenceError(f"{action} failed: {e}") from e
    except ValidationError as e:
        raise PersistenceError(f"{action} failed: stored data is invalid") from e


class RedisProgressStore:
    """Persistence gateway backed by a single Redis database.

    Layout (all keys under `{prefix}:{player_id}:`):
    - `progress`, `settings`, `achievements`: JSON documents
    - `scores:{mode}`: sorted set of GameScore JSON, scored by points, trimmed to `leaderboard_size`
    - `completed_quests`: hash quest_id -> DailyQuest JSON
    - `launched`, `onboarding_completed`: flags
    """

    def __init__(
        self,
        *,
        r: redis.Redis,
        player_id: str = "local-player",
        key_prefix: str = "flavor_quest",
        leaderboard_size: int = 100,
    ) -> None:
        if leaderboard_size <= 0:
            raise ValueError("leaderboard_size must be > 0")
        self.r = r
        self.player_id = player_id
        self.key_prefix = key_prefix
        self.leaderboard_size = leaderboard_size

    def _key(self, *parts: str) -> str:
        return ":".join([self.key_prefix, self.player_id, *parts])

    def _scores_key(self, mode: GameMode) -> str:
        return self._key("scores", mode.value)

    # ---- progress ----

    def load_progress(self) -> PlayerProgress:
        with _persistence_errors("load progress"):
            raw = self.r.get(self._key("progress"))
            if not raw:
                return PlayerProgress()
            return PlayerProgress.model_validate_json(raw)

    def save_progress(self, progress: PlayerProgress) -> None:
        with _persistence_errors("save progress"):
            self.r.set(self._key("progress"), progress.model_dump_json())

    # ---- leaderboard ----

    def append_score(self, score: GameScore) -> None:
        key = self._scores_key(score.mode)
        with _persistence_errors("append score"):
            pipe = self.r.pipeline()
            pipe.zadd(key, {score.model_dump_json(): score.score})
            # Keep only the top N; ranks are ascending so drop from the bottom.
            pipe.zremrangebyrank(key, 0, -(self.leaderboard_size + 1))
            pipe.execute()

    def top_scores(self, mode: GameMode, limit: int = 10) -> list[GameScore]:
        if limit <= 0:
            return []
        with _persistence_errors("load scores"):
            raw = self.r.zrevrange(self._scores_key(mode), 0, limit - 1)
            return [GameScore.model_validate_json(m) for m in raw]

    def all_scores(self) -> list[GameScore]:
        out: list[GameScore] = []
        for mode in GameMode:
            out.extend(self.top_scores(mode, self.leaderboard_size))
        return out

    # ---- achievements ----

    def load_achievements(self) -> list[Achievement]:
        with _persistence_errors("load achievements"):
            raw = self.r.get(self._key("achievements"))
            if not raw:
                return []
            return _ACHIEVEMENT_LIST.validate_json(raw)

    def save_achievements(self, achievements: list[Achievement]) -> None:
        with _persistence_errors("save achievements"):
            self.r.set(self._key("achievements"), _ACHIEVEMENT_LIST.dump_json(achievements))

    # ---- daily quests ----

    def load_completed_quests(self) -> list[DailyQuest]:
        with _persistence_errors("load completed quests"):
            raw = self.r.hgetall(self._key("completed_quests"))
            quests = [DailyQuest.model_validate_json(v) for v in raw.values()]
        quests.sort(key=lambda q: q.completed_at or q.expires_at)
        return quests

    def save_completed_quest(self, quest: DailyQuest) -> None:
        with _persistence_errors("save completed quest"):
            self.r.hset(self._key("completed_quests"), quest.id, quest.model_dump_json())

    # ---- settings / app flags ----

    def load_settings(self) -> UserSettings:
        with _persistence_errors("load settings"):
            raw = self.r.get(self._key("settings"))
            if not raw:
                return UserSettings()
            return UserSettings.model_validate_json(raw)

    def save_settings(self, settings: UserSettings) -> None:
        with _persistence_errors("save settings"):
            self.r.set(self._key("settings"), settings.model_dump_json())

    def is_first_launch(self) -> bool:
        """True exactly once per player; the first call flips the flag."""

        with _persistence_errors("check first launch"):
            return bool(self.r.set(self._key("launched"), "1", nx=True))

    def is_onboarding_completed(self) -> bool:
        with _persistence_errors("check onboarding"):
            return self.r.get(self._key("onboarding_completed")) == "1"

    def set_onboarding_completed(self, completed: bool = True) -> None:
        with _persistence_errors("save onboarding"):
            self.r.set(self._key("onboarding_completed"), "1" if completed else "0")

    # ---- bulk ----

    def clear_all_data(self) -> None:
        keys = [
            self._key("progress"),
            self._key("settings"),
            self._key("achievements"),
            self._key("completed_quests"),
            self._key("launched"),
            self._key("onboarding_completed"),
            *(self._scores_key(m) for m in GameMode),
        ]
        with _persistence_errors("clear data"):
            self.r.delete(*keys)
        logger.info("Cleared stored data for player %s", self.player_id)

    def export_game_data(self) -> str:
        export = GameDataExport(
            progress=self.load_progress(),
            high_scores=self.all_scores(),
            settings=self.load_settings(),
            completed_quests=self.load_completed_quests(),
            achievements=self.load_achievements(),
        )
        return export.model_dump_json()

    def import_game_data(self, raw: str | bytes) -> bool:
        """Load an export produced by `export_game_data`.

        Returns False (and stores nothing) when the document is invalid.
        """

        try:
            data = GameDataExport.model_validate_json(raw)
        except ValidationError:
            logger.warning("Rejected game data import: invalid document")
            return False

        self.save_progress(data.progress)
        for score in data.high_scores:
            self.append_score(score)
        self.save_settings(data.settings)
        for quest in data.completed_quests:
            self.save_completed_quest(quest)
        self.save_achievements(data.achievements)
        return True
