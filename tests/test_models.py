from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from flavor_quest.models import (
    Achievement,
    CuisineType,
    DailyQuest,
    GameDifficulty,
    GameMode,
    GameResults,
    GameScore,
    Ingredient,
    IngredientCategory,
    IngredientRarity,
    PlayerProgress,
    QuestRequirement,
    QuestType,
    Recipe,
    TimeRecordRequirement,
    xp_required_for_level,
)


def test_rarity_points_and_difficulty_tables() -> None:
    assert [r.points for r in IngredientRarity] == [10, 25, 50, 100]
    assert IngredientRarity.legendary.rank > IngredientRarity.common.rank

    assert [d.time_limit for d in GameDifficulty] == [60, 45, 30]
    assert [d.point_multiplier for d in GameDifficulty] == [1.0, 1.5, 2.0]


def test_mode_presentation_metadata() -> None:
    assert GameMode.ar_hunt.display_title == "AR Hunt"
    assert GameMode.daily_quest.icon == "calendar"
    assert all(m.description for m in GameMode)


def test_ingredient_equality_ignores_id() -> None:
    a = Ingredient(id="a", name="basil", category=IngredientCategory.herb, cuisines=(CuisineType.italian,))
    b = Ingredient(id="b", name="basil", category=IngredientCategory.herb, cuisines=(CuisineType.italian,))
    c = Ingredient(name="basil", category=IngredientCategory.herb, rarity=IngredientRarity.rare)

    assert a == b
    assert len({a, b}) == 1
    assert a != c
    assert a.points == 10
    assert c.display_name == "Basil"


def test_recipe_equality_by_name_cuisine_and_difficulty() -> None:
    r1 = Recipe(id="x", name="Soup", cuisine=CuisineType.french)
    r2 = Recipe(id="y", name="Soup", cuisine=CuisineType.french)
    r3 = Recipe(name="Soup", cuisine=CuisineType.french, difficulty=GameDifficulty.hard)

    assert r1 == r2
    assert r1 != r3
    assert r1.total_ingredients == 0


def test_level_xp_curve_and_progress_properties() -> None:
    assert [xp_required_for_level(n) for n in (1, 2, 3, 4)] == [0, 100, 400, 900]

    p = PlayerProgress(level=2, total_xp=250)
    assert p.current_level_xp == 150
    assert p.xp_needed_for_next_level == 150
    assert p.progress_to_next_level == pytest.approx(0.5)

    assert PlayerProgress().progress_to_next_level == 0.0
    assert PlayerProgress(level=1, total_xp=99).progress_to_next_level < 1.0


def test_progress_rejects_negative_xp_and_zero_level() -> None:
    with pytest.raises(ValidationError):
        PlayerProgress(total_xp=-1)
    with pytest.raises(ValidationError):
        PlayerProgress(level=0)


def test_results_and_scores_format_time() -> None:
    results = GameResults(
        score=120,
        mode=GameMode.taste_test,
        difficulty=GameDifficulty.easy,
        time_elapsed=75,
        accuracy=0.875,
        ingredients_discovered=3,
    )
    assert results.formatted_time == "01:15"
    assert results.accuracy_percentage == "87.5%"

    score = GameScore(
        player_id="p1",
        player_name="Chef",
        score=10,
        mode=GameMode.ar_hunt,
        difficulty=GameDifficulty.hard,
        achieved_at=datetime(2026, 1, 1, tzinfo=UTC),
        time_elapsed=9.6,
    )
    assert score.formatted_time == "00:09"


def test_achievement_requirement_is_discriminated_by_kind() -> None:
    raw = '{"id": "fast", "title": "Fast", "requirement": {"kind": "time_record", "target": 30}}'
    achievement = Achievement.model_validate_json(raw)

    assert isinstance(achievement.requirement, TimeRecordRequirement)
    assert not achievement.is_unlocked

    at = datetime(2026, 1, 1, tzinfo=UTC)
    unlocked = achievement.unlocked(at=at)
    assert unlocked.is_unlocked and unlocked.unlocked_at == at
    # Unlocking twice keeps the original timestamp.
    assert unlocked.unlocked(at=at + timedelta(days=1)).unlocked_at == at

    with pytest.raises(ValidationError):
        Achievement.model_validate_json('{"id": "x", "title": "X", "requirement": {"kind": "nope", "target": 1}}')


def test_daily_quest_expiry_and_completion() -> None:
    now = datetime(2026, 3, 14, tzinfo=UTC)
    quest = DailyQuest(
        id="q",
        title="Q",
        quest_type=QuestType.create_recipes,
        requirement=QuestRequirement(target=2),
        expires_at=now + timedelta(hours=1),
    )

    assert quest.is_active(now)
    assert quest.is_expired(now + timedelta(hours=2))

    done = quest.completed(at=now)
    assert done.is_completed and not done.is_active(now)
    assert not quest.is_completed
