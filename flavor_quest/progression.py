from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta

from flavor_quest.models import GameDifficulty, PlayerProgress

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GameOutcome:
    xp_gained: int
    leveled_up: bool


def level_for_xp(xp: int) -> int:
    """Level reached with `xp` total experience: floor(sqrt(xp / 100)) + 1."""

    if xp < 0:
        raise ValueError("xp must be >= 0")
    # isqrt avoids float rounding at exact squares (e.g. 400 -> 2).
    return math.isqrt(xp // 100) + 1


def xp_for_score(score: int, difficulty: GameDifficulty) -> int:
    return int((score // 10) * difficulty.point_multiplier)


def check_level_up(progress: PlayerProgress) -> bool:
    """Raise the stored level to match total XP.

    Returns True only when the level went up. Level never goes down.
    """

    new_level = level_for_xp(progress.total_xp)
    if new_level > progress.level:
        logger.info("Level up: %s -> %s", progress.level, new_level)
        progress.level = new_level
        return True
    return False


def apply_game_result(progress: PlayerProgress, *, score: int, difficulty: GameDifficulty) -> GameOutcome:
    progress.total_score += score
    progress.best_score = max(progress.best_score, score)

    gained = xp_for_score(score, difficulty)
    progress.total_xp += gained

    return GameOutcome(xp_gained=gained, leveled_up=check_level_up(progress))


def award_xp(progress: PlayerProgress, points: int) -> None:
    progress.total_xp += max(0, points)


def update_daily_streak(progress: PlayerProgress, *, today: date) -> bool:
    """Evaluate the consecutive-day streak against `today`.

    - same calendar day: unchanged
    - previous calendar day: +1
    - longer gap / never played: reset to 1

    Always stamps `last_played_date`. Returns True if the streak changed.
    """

    before = progress.streak_days
    last = progress.last_played_date

    if last == today:
        pass
    elif last is not None and last == today - timedelta(days=1):
        progress.streak_days += 1
    else:
        progress.streak_days = 1

    progress.last_played_date = today
    return progress.streak_days != before
