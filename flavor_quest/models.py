from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return str(uuid4())


class IngredientCategory(StrEnum):
    vegetable = "vegetable"
    fruit = "fruit"
    protein = "protein"
    grain = "grain"
    dairy = "dairy"
    spice = "spice"
    herb = "herb"
    sauce = "sauce"
    oil = "oil"
    sweetener = "sweetener"


class CuisineType(StrEnum):
    italian = "italian"
    chinese = "chinese"
    mexican = "mexican"
    french = "french"
    japanese = "japanese"
    indian = "indian"
    mediterranean = "mediterranean"
    american = "american"


_RARITY_POINTS = {"common": 10, "uncommon": 25, "rare": 50, "legendary": 100}
_RARITY_ORDER = ("common", "uncommon", "rare", "legendary")


class IngredientRarity(StrEnum):
    common = "common"
    uncommon = "uncommon"
    rare = "rare"
    legendary = "legendary"

    @property
    def points(self) -> int:
        return _RARITY_POINTS[self.value]

    @property
    def rank(self) -> int:
        return _RARITY_ORDER.index(self.value)


class GameDifficulty(StrEnum):
    easy = "easy"
    medium = "medium"
    hard = "hard"

    @property
    def time_limit(self) -> int:
        """Seconds on the countdown when a session starts."""
        return {"easy": 60, "medium": 45, "hard": 30}[self.value]

    @property
    def point_multiplier(self) -> float:
        return {"easy": 1.0, "medium": 1.5, "hard": 2.0}[self.value]


class GameMode(StrEnum):
    culinary_challenge = "culinary_challenge"
    taste_test = "taste_test"
    ingredient_mastery = "ingredient_mastery"
    daily_quest = "daily_quest"
    ar_hunt = "ar_hunt"

    @property
    def display_title(self) -> str:
        return _MODE_TITLES[self.value]

    @property
    def icon(self) -> str:
        return _MODE_ICONS[self.value]

    @property
    def description(self) -> str:
        return _MODE_DESCRIPTIONS[self.value]


_MODE_TITLES = {
    "culinary_challenge": "Culinary Challenge",
    "taste_test": "Taste Test",
    "ingredient_mastery": "Ingredient Mastery",
    "daily_quest": "Daily Quest",
    "ar_hunt": "AR Hunt",
}

_MODE_ICONS = {
    "culinary_challenge": "chef.hat",
    "taste_test": "clock",
    "ingredient_mastery": "trophy",
    "daily_quest": "calendar",
    "ar_hunt": "camera.viewfinder",
}

_MODE_DESCRIPTIONS = {
    "culinary_challenge": "Create unique dishes with randomly provided ingredients",
    "taste_test": "Beat the clock naming ingredients in displayed dishes",
    "ingredient_mastery": "Compete globally on ingredient knowledge",
    "daily_quest": "Complete time-limited culinary challenges",
    "ar_hunt": "Find virtual ingredients in augmented reality",
}


class SessionPhase(StrEnum):
    idle = "idle"
    active = "active"
    ended = "ended"


class NutritionalInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    calories: int
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    vitamins: tuple[str, ...] = ()


class Ingredient(BaseModel):
    """Catalog ingredient.

    Two ingredients are equal when name, category, cuisines and rarity match;
    the id is ignored so duplicate catalog rows collapse in sets.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str
    category: IngredientCategory
    cuisines: tuple[CuisineType, ...] = ()
    rarity: IngredientRarity = IngredientRarity.common
    nutrition: NutritionalInfo | None = None
    fun_fact: str | None = None

    @property
    def display_name(self) -> str:
        return self.name.title()

    @property
    def points(self) -> int:
        return self.rarity.points

    def _identity(self) -> tuple[object, ...]:
        return (self.name, self.category, self.cuisines, self.rarity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ingredient):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())


class Recipe(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str
    ingredients: tuple[Ingredient, ...] = ()
    cuisine: CuisineType
    difficulty: GameDifficulty = GameDifficulty.medium
    # Seconds.
    cooking_time: int = 0
    description: str = ""
    instructions: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name.title()

    @property
    def total_ingredients(self) -> int:
        return len(self.ingredients)

    def _identity(self) -> tuple[object, ...]:
        return (self.name, self.cuisine, self.difficulty)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Recipe):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())


# ---- Achievements ----


class TotalScoreRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["total_score"] = "total_score"
    target: int


class GamesPlayedRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["games_played"] = "games_played"
    target: int


class PerfectGamesRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["perfect_games"] = "perfect_games"
    target: int


class IngredientsDiscoveredRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["ingredients_discovered"] = "ingredients_discovered"
    target: int


class RecipesCompletedRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["recipes_completed"] = "recipes_completed"
    target: int


class TimeRecordRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["time_record"] = "time_record"
    # Seconds saved against a 60 second baseline.
    target: float


class StreakDaysRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["streak_days"] = "streak_days"
    target: int


AchievementRequirement = Annotated[
    TotalScoreRequirement
    | GamesPlayedRequirement
    | PerfectGamesRequirement
    | IngredientsDiscoveredRequirement
    | RecipesCompletedRequirement
    | TimeRecordRequirement
    | StreakDaysRequirement,
    Field(discriminator="kind"),
]


class Achievement(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    icon: str = ""
    # XP reward.
    points: int = 0
    is_unlocked: bool = False
    unlocked_at: datetime | None = None
    requirement: AchievementRequirement

    def unlocked(self, *, at: datetime) -> "Achievement":
        if self.is_unlocked:
            return self
        return self.model_copy(update={"is_unlocked": True, "unlocked_at": at})


# ---- Daily quests ----


class QuestType(StrEnum):
    create_recipes = "create_recipes"
    identify_ingredients = "identify_ingredients"
    explore_new_cuisine = "explore_new_cuisine"
    speed_challenge = "speed_challenge"
    perfect_game = "perfect_game"


class QuestRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: int
    criteria: str = ""


class QuestReward(BaseModel):
    model_config = ConfigDict(frozen=True)

    points: int = 0
    # Bonus content is referenced by catalog name.
    ingredients: tuple[str, ...] = ()
    recipes: tuple[str, ...] = ()
    title: str | None = None


class DailyQuest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    quest_type: QuestType
    requirement: QuestRequirement
    reward: QuestReward = Field(default_factory=QuestReward)
    expires_at: datetime
    is_completed: bool = False
    completed_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_active(self, now: datetime) -> bool:
        return not self.is_completed and not self.is_expired(now)

    def completed(self, *, at: datetime) -> "DailyQuest":
        return self.model_copy(update={"is_completed": True, "completed_at": at})


# ---- Player state ----


def xp_required_for_level(level: int) -> int:
    """Total XP at which `level` is reached (inverse of the level curve)."""
    return (level - 1) * (level - 1) * 100


class PlayerProgress(BaseModel):
    level: int = Field(default=1, ge=1)
    total_xp: int = Field(default=0, ge=0)
    games_played: int = 0
    total_score: int = 0
    best_score: int = 0
    discovered_ingredients: set[str] = Field(default_factory=set)
    unlocked_recipes: set[str] = Field(default_factory=set)
    favorite_cuisines: list[CuisineType] = Field(default_factory=list)
    streak_days: int = 0
    last_played_date: date | None = None

    # Titles earned from daily quest rewards.
    titles: list[str] = Field(default_factory=list)

    @property
    def current_level_xp(self) -> int:
        return self.total_xp - xp_required_for_level(self.level)

    @property
    def xp_needed_for_next_level(self) -> int:
        return xp_required_for_level(self.level + 1) - self.total_xp

    @property
    def progress_to_next_level(self) -> float:
        floor_xp = xp_required_for_level(self.level)
        span = xp_required_for_level(self.level + 1) - floor_xp
        return (self.total_xp - floor_xp) / span


def _format_seconds(seconds: float) -> str:
    whole = int(seconds)
    return f"{whole // 60:02d}:{whole % 60:02d}"


class GameScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    player_id: str
    player_name: str
    score: int
    mode: GameMode
    difficulty: GameDifficulty
    achieved_at: datetime
    time_elapsed: float

    @property
    def formatted_time(self) -> str:
        return _format_seconds(self.time_elapsed)


class GameResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int
    mode: GameMode
    difficulty: GameDifficulty
    time_elapsed: float
    accuracy: float
    ingredients_discovered: int
    xp_gained: int = 0
    new_achievements: tuple[Achievement, ...] = ()
    level_up: bool = False
    completed_quest: DailyQuest | None = None

    @property
    def formatted_time(self) -> str:
        return _format_seconds(self.time_elapsed)

    @property
    def accuracy_percentage(self) -> str:
        return f"{self.accuracy * 100:.1f}%"


class UserSettings(BaseModel):
    player_name: str = "Chef"
    preferred_difficulty: GameDifficulty = GameDifficulty.medium
    favorite_cuisines: list[CuisineType] = Field(default_factory=list)
    sound_enabled: bool = True
    music_enabled: bool = True
    haptics_enabled: bool = True
    notifications_enabled: bool = True
    animations_enabled: bool = True
    ar_enabled: bool = True


class GameDataExport(BaseModel):
    """Everything the store persists, as one portable document."""

    progress: PlayerProgress
    high_scores: list[GameScore] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)
    completed_quests: list[DailyQuest] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)
