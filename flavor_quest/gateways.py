"""Collaborator contracts the engine is constructed with.

The default implementations are `catalog.registry.ContentCatalog` and
`store.RedisProgressStore`; tests may pass anything with the same shape.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Protocol

from flavor_quest.models import (
    Achievement,
    CuisineType,
    DailyQuest,
    GameMode,
    GameScore,
    Ingredient,
    IngredientRarity,
    PlayerProgress,
    Recipe,
    UserSettings,
)


class PersistenceError(RuntimeError):
    """Raised by a persistence gateway when a load or save fails."""


class CatalogSource(Protocol):
    def random_ingredients(
        self,
        count: int,
        exclude_rarities: Collection[IngredientRarity] = ...,
    ) -> list[Ingredient]:  # pragma: no cover
        ...

    def random_recipe(self) -> Recipe | None:  # pragma: no cover
        ...

    def ingredients_for_cuisine(self, cuisine: CuisineType) -> list[Ingredient]:  # pragma: no cover
        ...

    def cuisines(self) -> list[CuisineType]:  # pragma: no cover
        ...

    def active_daily_quests(self) -> list[DailyQuest]:  # pragma: no cover
        ...

    def all_achievements(self) -> list[Achievement]:  # pragma: no cover
        ...


class PersistenceGateway(Protocol):
    """Durable player state. Every method may raise PersistenceError."""

    def load_progress(self) -> PlayerProgress:  # pragma: no cover
        ...

    def save_progress(self, progress: PlayerProgress) -> None:  # pragma: no cover
        ...

    def append_score(self, score: GameScore) -> None:  # pragma: no cover
        ...

    def top_scores(self, mode: GameMode, limit: int = 10) -> list[GameScore]:  # pragma: no cover
        ...

    def load_achievements(self) -> list[Achievement]:  # pragma: no cover
        ...

    def save_achievements(self, achievements: list[Achievement]) -> None:  # pragma: no cover
        ...

    def load_completed_quests(self) -> list[DailyQuest]:  # pragma: no cover
        ...

    def save_completed_quest(self, quest: DailyQuest) -> None:  # pragma: no cover
        ...

    def load_settings(self) -> UserSettings:  # pragma: no cover
        ...

    def save_settings(self, settings: UserSettings) -> None:  # pragma: no cover
        ...

    def is_first_launch(self) -> bool:  # pragma: no cover
        ...
