from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


def project_root() -> Path:
    # flavor_quest/config.py -> flavor_quest/ -> project root
    return Path(__file__).resolve().parents[1]


def assets_root() -> Path:
    """Directory containing `assets/`; override with FLAVOR_QUEST_ASSETS_ROOT."""

    override = os.environ.get("FLAVOR_QUEST_ASSETS_ROOT", "").strip()
    return Path(override) if override else project_root()


def strict_assets_enabled() -> bool:
    # Strict mode: missing/malformed asset CSVs raise instead of using built-in content.
    return _env_flag("FLAVOR_QUEST_STRICT_ASSETS")


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


@dataclass(frozen=True, slots=True)
class EngineConfig:
    key_prefix: str = "flavor_quest"
    player_id: str = "local-player"
    leaderboard_size: int = 100
    # Countdown resolution in seconds.
    tick_interval: float = 1.0

    @staticmethod
    def from_env() -> "EngineConfig":
        return EngineConfig(
            key_prefix=os.environ.get("FLAVOR_QUEST_KEY_PREFIX", "flavor_quest"),
            player_id=os.environ.get("FLAVOR_QUEST_PLAYER_ID", "local-player"),
            leaderboard_size=int(os.environ.get("FLAVOR_QUEST_LEADERBOARD_SIZE", "100")),
        )
