from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from flavor_quest.models import (
    Achievement,
    AchievementRequirement,
    GamesPlayedRequirement,
    IngredientsDiscoveredRequirement,
    PerfectGamesRequirement,
    PlayerProgress,
    RecipesCompletedRequirement,
    StreakDaysRequirement,
    TimeRecordRequirement,
    TotalScoreRequirement,
)

logger = logging.getLogger(__name__)

# Reference length of a game for time records, independent of difficulty.
TIME_RECORD_BASELINE_SECONDS = 60


@dataclass(frozen=True, slots=True)
class EvaluationContext:
    progress: PlayerProgress
    # Seconds left on the countdown when the last session ended (0 with no session).
    time_remaining: float = 0


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    achievements: list[Achievement]
    newly_unlocked: list[Achievement]

    @property
    def xp_awarded(self) -> int:
        return sum(a.points for a in self.newly_unlocked)


def requirement_met(requirement: AchievementRequirement, ctx: EvaluationContext) -> bool:
    progress = ctx.progress
    match requirement:
        case TotalScoreRequirement(target=target):
            return progress.total_score >= target
        case GamesPlayedRequirement(target=target):
            return progress.games_played >= target
        case IngredientsDiscoveredRequirement(target=target):
            return len(progress.discovered_ingredients) >= target
        case TimeRecordRequirement(target=target):
            return ctx.time_remaining >= (TIME_RECORD_BASELINE_SECONDS - target)
        case PerfectGamesRequirement() | RecipesCompletedRequirement() | StreakDaysRequirement():
            # No unlock policy defined for these kinds yet; they stay locked.
            return False
    return False


def evaluate_achievements(
    achievements: Sequence[Achievement],
    *,
    ctx: EvaluationContext,
    now: datetime,
) -> EvaluationResult:
    """Unlock every locked achievement whose requirement is satisfied.

    Returns a new list (order preserved) with unlocked copies swapped in.
    Already unlocked achievements are never re-evaluated.
    """

    updated: list[Achievement] = []
    unlocked: list[Achievement] = []

    for achievement in achievements:
        if not achievement.is_unlocked and requirement_met(achievement.requirement, ctx):
            achievement = achievement.unlocked(at=now)
            unlocked.append(achievement)
            logger.info("Achievement unlocked: %s (+%s XP)", achievement.title, achievement.points)
        updated.append(achievement)

    return EvaluationResult(achievements=updated, newly_unlocked=unlocked)


def merge_unlock_state(catalog: Iterable[Achievement], persisted: Iterable[Achievement]) -> list[Achievement]:
    """Overlay persisted unlock flags onto catalog achievements (matched by id).

    Persisted entries that the catalog no longer defines are dropped.
    """

    saved = {a.id: a for a in persisted if a.is_unlocked}
    return [saved.get(a.id, a) for a in catalog]
