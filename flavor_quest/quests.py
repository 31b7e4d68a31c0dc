from __future__ import annotations

import random
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from flavor_quest.models import CuisineType, DailyQuest, GameDifficulty, GameMode, QuestType

# Fixed mode + difficulty a quest type plays as. explore_new_cuisine is handled separately
# because its pool comes from a cuisine rather than a mode.
QUEST_DELEGATES: dict[QuestType, tuple[GameMode, GameDifficulty]] = {
    QuestType.create_recipes: (GameMode.culinary_challenge, GameDifficulty.medium),
    QuestType.identify_ingredients: (GameMode.ingredient_mastery, GameDifficulty.easy),
    QuestType.speed_challenge: (GameMode.taste_test, GameDifficulty.hard),
    QuestType.perfect_game: (GameMode.culinary_challenge, GameDifficulty.medium),
}

# Cuisine exploration is an identification round over the cuisine's ingredients.
EXPLORE_CUISINE_RULES = GameMode.ingredient_mastery


def active_quests(
    quests: Iterable[DailyQuest],
    *,
    now: datetime,
    completed_ids: Collection[str] = frozenset(),
) -> list[DailyQuest]:
    """Quests that are neither completed nor expired at `now`."""

    return [q for q in quests if q.is_active(now) and q.id not in completed_ids]


def first_active_quest(
    quests: Iterable[DailyQuest],
    *,
    now: datetime,
    completed_ids: Collection[str] = frozenset(),
) -> DailyQuest | None:
    return next(iter(active_quests(quests, now=now, completed_ids=completed_ids)), None)


def choose_cuisine(
    available: Sequence[CuisineType],
    *,
    favorites: Collection[CuisineType],
    rng: random.Random,
) -> CuisineType | None:
    """Pick a cuisine to explore, preferring ones that aren't already favorites."""

    if not available:
        return None
    fresh = [c for c in available if c not in favorites]
    return rng.choice(fresh or list(available))


@dataclass(frozen=True, slots=True)
class QuestSessionStats:
    recipes_created: int
    ingredients_credited: int
    # Session ended on its own (everything found) before the countdown ran out.
    finished_early: bool
    accuracy: float


def quest_progress(quest: DailyQuest, stats: QuestSessionStats) -> int:
    match quest.quest_type:
        case QuestType.create_recipes:
            return stats.recipes_created
        case QuestType.identify_ingredients | QuestType.explore_new_cuisine:
            return stats.ingredients_credited
        case QuestType.speed_challenge:
            return 1 if stats.finished_early else 0
        case QuestType.perfect_game:
            return 1 if stats.accuracy >= 1.0 else 0
    return 0


def is_quest_satisfied(quest: DailyQuest, stats: QuestSessionStats) -> bool:
    return quest_progress(quest, stats) >= quest.requirement.target
