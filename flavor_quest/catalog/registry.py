from __future__ import annotations

import csv
import logging
import random
import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

from flavor_quest.catalog.builtin import builtin_achievements, builtin_daily_quests, builtin_ingredients, builtin_recipes
from flavor_quest.config import assets_root, strict_assets_enabled
from flavor_quest.models import (
    Achievement,
    CuisineType,
    DailyQuest,
    GameDifficulty,
    Ingredient,
    IngredientCategory,
    IngredientRarity,
    Recipe,
)

logger = logging.getLogger(__name__)


def _norm_key(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip().casefold()


def _slug_id(s: str) -> str:
    s = s.strip().casefold()
    s = re.sub(r"[^a-z0-9]+", "-", s)
    return s.strip("-")


def _split_multi(cell: str) -> list[str]:
    return [part.strip() for part in cell.split("|") if part.strip()]


class AssetLoadError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class ContentCatalog:
    """Immutable reference data plus random-selection queries.

    Lookups by name are forgiving (case + whitespace). Duplicate ingredient rows
    that are equal by value collapse to the first occurrence.
    """

    ingredients: tuple[Ingredient, ...]
    recipes: tuple[Recipe, ...]
    daily_quests: tuple[DailyQuest, ...] = ()
    achievements: tuple[Achievement, ...] = ()
    rng: random.Random = field(default_factory=random.Random)
    _key_to_ingredient: dict[str, Ingredient] = field(default_factory=dict)

    @staticmethod
    def build(
        *,
        ingredients: Iterable[Ingredient],
        recipes: Iterable[Recipe],
        daily_quests: Iterable[DailyQuest] = (),
        achievements: Iterable[Achievement] = (),
        rng: random.Random | None = None,
    ) -> "ContentCatalog":
        unique: list[Ingredient] = []
        seen: set[Ingredient] = set()
        for ing in ingredients:
            if ing in seen:
                continue
            seen.add(ing)
            unique.append(ing)

        key_to_ingredient: dict[str, Ingredient] = {}
        for ing in unique:
            key_to_ingredient.setdefault(_norm_key(ing.name), ing)

        return ContentCatalog(
            ingredients=tuple(unique),
            recipes=tuple(recipes),
            daily_quests=tuple(daily_quests),
            achievements=tuple(achievements),
            rng=rng or random.Random(),
            _key_to_ingredient=key_to_ingredient,
        )

    def ingredient_by_name(self, name: str) -> Ingredient | None:
        return self._key_to_ingredient.get(_norm_key(name))

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Ingredient):
            return item in self.ingredients
        return isinstance(item, str) and self.ingredient_by_name(item) is not None

    def random_ingredients(
        self,
        count: int,
        exclude_rarities: Collection[IngredientRarity] = frozenset(),
    ) -> list[Ingredient]:
        """Sample without replacement; returns everything available if `count` is larger."""

        if count < 0:
            raise ValueError("count must be >= 0")
        available = [i for i in self.ingredients if i.rarity not in exclude_rarities]
        return self.rng.sample(available, k=min(count, len(available)))

    def random_recipe(self) -> Recipe | None:
        if not self.recipes:
            return None
        return self.rng.choice(self.recipes)

    def ingredients_for_cuisine(self, cuisine: CuisineType) -> list[Ingredient]:
        return [i for i in self.ingredients if cuisine in i.cuisines]

    def cuisines(self) -> list[CuisineType]:
        """Cuisines that at least one ingredient belongs to, in enum order."""

        present = {c for i in self.ingredients for c in i.cuisines}
        return [c for c in CuisineType if c in present]

    def active_daily_quests(self) -> list[DailyQuest]:
        return list(self.daily_quests)

    def all_achievements(self) -> list[Achievement]:
        return list(self.achievements)

    def search_ingredients(self, query: str) -> list[Ingredient]:
        key = _norm_key(query)
        if not key:
            return list(self.ingredients)
        return [i for i in self.ingredients if key in _norm_key(i.name)]

    def recipes_for_difficulty(self, difficulty: GameDifficulty) -> list[Recipe]:
        return [r for r in self.recipes if r.difficulty == difficulty]


def _read_csv_rows(path: Path) -> list[list[str]]:
    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            rows = [[c.strip() for c in row] for row in csv.reader(f)]
    except FileNotFoundError as e:
        raise AssetLoadError(f"Asset file not found: {path}") from e

    return [row for row in rows if any(row)]


def _check_header(path: Path, rows: list[list[str]], expected: list[str]) -> None:
    if not rows:
        raise AssetLoadError(f"Empty CSV: {path}")
    header = [c.casefold() for c in rows[0]]
    if header[: len(expected)] != expected:
        raise AssetLoadError(f"Unexpected header in {path}: {rows[0]}")


def _cell(row: list[str], idx: int) -> str:
    return row[idx].strip() if idx < len(row) else ""


def load_ingredients_csv(path: Path) -> list[Ingredient]:
    rows = _read_csv_rows(path)
    _check_header(path, rows, ["id", "name", "category", "cuisines", "rarity"])

    out: list[Ingredient] = []
    for row in rows[1:]:
        name = _cell(row, 1)
        if not name:
            continue
        try:
            category = IngredientCategory(_cell(row, 2).casefold())
            rarity = IngredientRarity(_cell(row, 4).casefold() or "common")
            cuisines = tuple(CuisineType(c.casefold()) for c in _split_multi(_cell(row, 3)))
        except ValueError as e:
            raise AssetLoadError(f"Bad ingredient row in {path}: {row}") from e

        out.append(
            Ingredient(
                id=_cell(row, 0) or _slug_id(name),
                name=name,
                category=category,
                cuisines=cuisines,
                rarity=rarity,
                fun_fact=_cell(row, 5) or None,
            )
        )
    return out


def load_recipes_csv(path: Path, *, ingredients: Iterable[Ingredient]) -> list[Recipe]:
    rows = _read_csv_rows(path)
    _check_header(path, rows, ["id", "name", "cuisine", "difficulty", "cooking_time", "ingredients"])

    by_key = {_norm_key(i.name): i for i in ingredients}

    out: list[Recipe] = []
    for row in rows[1:]:
        name = _cell(row, 1)
        if not name:
            continue

        parts: list[Ingredient] = []
        for ing_name in _split_multi(_cell(row, 5)):
            ing = by_key.get(_norm_key(ing_name))
            if ing is None:
                raise AssetLoadError(f"Recipe {name!r} references unknown ingredient {ing_name!r}")
            parts.append(ing)

        try:
            cuisine = CuisineType(_cell(row, 2).casefold())
            difficulty = GameDifficulty(_cell(row, 3).casefold() or "medium")
            cooking_time = int(_cell(row, 4) or 0)
        except ValueError as e:
            raise AssetLoadError(f"Bad recipe row in {path}: {row}") from e

        out.append(
            Recipe(
                id=_cell(row, 0) or _slug_id(name),
                name=name,
                ingredients=tuple(parts),
                cuisine=cuisine,
                difficulty=difficulty,
                cooking_time=cooking_time,
                description=_cell(row, 6),
                instructions=tuple(_split_multi(_cell(row, 7))),
            )
        )
    return out


def _fallback_catalog(*, now: datetime, rng: random.Random | None) -> ContentCatalog:
    ingredients = builtin_ingredients()
    return ContentCatalog.build(
        ingredients=ingredients,
        recipes=builtin_recipes(ingredients),
        daily_quests=builtin_daily_quests(expires_at=now + timedelta(days=1)),
        achievements=builtin_achievements(),
        rng=rng,
    )


def load_catalog(*, root: Path, now: datetime | None = None, rng: random.Random | None = None) -> ContentCatalog:
    """Load the catalog from `<root>/assets/`.

    Falls back to the built-in dataset when CSVs are missing or malformed,
    unless FLAVOR_QUEST_STRICT_ASSETS is set.
    """

    now = now or datetime.now(tz=UTC)
    assets_dir = root / "assets"

    try:
        ingredients = load_ingredients_csv(assets_dir / "ingredients.csv")
        recipes = load_recipes_csv(assets_dir / "recipes.csv", ingredients=ingredients)
    except AssetLoadError as e:
        if strict_assets_enabled():
            raise
        logger.warning("Using built-in catalog: %s", e)
        return _fallback_catalog(now=now, rng=rng)

    return ContentCatalog.build(
        ingredients=ingredients,
        recipes=recipes,
        daily_quests=builtin_daily_quests(expires_at=now + timedelta(days=1)),
        achievements=builtin_achievements(),
        rng=rng,
    )


def load_default_catalog(*, rng: random.Random | None = None) -> ContentCatalog:
    return load_catalog(root=assets_root(), rng=rng)
