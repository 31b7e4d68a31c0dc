from __future__ import annotations

import logging
import random
from collections.abc import Collection
from dataclasses import dataclass, field

from flavor_quest.gateways import CatalogSource
from flavor_quest.models import (
    CuisineType,
    DailyQuest,
    GameDifficulty,
    GameMode,
    Ingredient,
    IngredientRarity,
    QuestType,
    Recipe,
)
from flavor_quest.quests import EXPLORE_CUISINE_RULES, QUEST_DELEGATES, choose_cuisine

logger = logging.getLogger(__name__)

# Pool sizes per difficulty for modes that draw random ingredients.
POOL_SIZES: dict[GameMode, dict[GameDifficulty, int]] = {
    GameMode.culinary_challenge: {GameDifficulty.easy: 3, GameDifficulty.medium: 5, GameDifficulty.hard: 7},
    GameMode.ingredient_mastery: {GameDifficulty.easy: 5, GameDifficulty.medium: 8, GameDifficulty.hard: 12},
    GameMode.ar_hunt: {GameDifficulty.easy: 3, GameDifficulty.medium: 5, GameDifficulty.hard: 8},
}

AR_HUNT_EXCLUDED_RARITIES = frozenset({IngredientRarity.legendary})

# Which completion rules each mode plays by. daily_quest is resolved per quest.
RULES_MODE: dict[GameMode, GameMode] = {
    GameMode.culinary_challenge: GameMode.culinary_challenge,
    GameMode.taste_test: GameMode.taste_test,
    GameMode.ingredient_mastery: GameMode.ingredient_mastery,
    # Found ingredients are selected and the hunt is finished by the player.
    GameMode.ar_hunt: GameMode.culinary_challenge,
}

GUESS_MODES = frozenset({GameMode.taste_test, GameMode.ingredient_mastery})


@dataclass(frozen=True, slots=True)
class SessionSetup:
    pool: list[Ingredient] = field(default_factory=list)
    recipe: Recipe | None = None
    # None when no rules apply (e.g. daily quest with nothing active).
    rules_mode: GameMode | None = None
    # Mode actually being played; a daily quest reports its delegate here.
    played_mode: GameMode | None = None
    quest: DailyQuest | None = None
    cuisine: CuisineType | None = None


def _random_pool(catalog: CatalogSource, mode: GameMode, difficulty: GameDifficulty) -> list[Ingredient]:
    wanted = POOL_SIZES[mode][difficulty]
    exclude = AR_HUNT_EXCLUDED_RARITIES if mode == GameMode.ar_hunt else frozenset()
    pool = catalog.random_ingredients(wanted, exclude)
    if len(pool) < wanted:
        logger.warning("Catalog supplied %s/%s ingredients for %s", len(pool), wanted, mode.value)
    return pool


def _recipe_pool(catalog: CatalogSource) -> tuple[list[Ingredient], Recipe | None]:
    recipe = catalog.random_recipe()
    if recipe is None:
        logger.warning("Catalog has no recipes; taste test starts with an empty pool")
        return [], None
    return list(recipe.ingredients), recipe


def setup_mode(mode: GameMode, difficulty: GameDifficulty, *, catalog: CatalogSource) -> SessionSetup:
    """Populate the ingredient pool (and recipe) for a non-quest mode."""

    if mode == GameMode.daily_quest:
        raise ValueError("daily_quest sessions are set up with setup_daily_quest")

    if mode == GameMode.taste_test:
        pool, recipe = _recipe_pool(catalog)
        return SessionSetup(pool=pool, recipe=recipe, rules_mode=RULES_MODE[mode], played_mode=mode)

    return SessionSetup(
        pool=_random_pool(catalog, mode, difficulty), rules_mode=RULES_MODE[mode], played_mode=mode
    )


def setup_daily_quest(
    quest: DailyQuest | None,
    *,
    catalog: CatalogSource,
    favorites: Collection[CuisineType],
    rng: random.Random,
) -> SessionSetup:
    """Set up a daily-quest session by delegating to the quest's underlying mode.

    With no active quest the pool stays empty.
    """

    if quest is None:
        logger.info("No active daily quest; starting with an empty pool")
        return SessionSetup()

    if quest.quest_type == QuestType.explore_new_cuisine:
        cuisine = choose_cuisine(catalog.cuisines(), favorites=favorites, rng=rng)
        pool = catalog.ingredients_for_cuisine(cuisine) if cuisine is not None else []
        return SessionSetup(
            pool=pool,
            rules_mode=EXPLORE_CUISINE_RULES,
            played_mode=EXPLORE_CUISINE_RULES,
            quest=quest,
            cuisine=cuisine,
        )

    mode, difficulty = QUEST_DELEGATES[quest.quest_type]
    delegated = setup_mode(mode, difficulty, catalog=catalog)
    return SessionSetup(
        pool=delegated.pool,
        recipe=delegated.recipe,
        rules_mode=delegated.rules_mode,
        played_mode=delegated.played_mode,
        quest=quest,
    )
