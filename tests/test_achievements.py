from __future__ import annotations

from datetime import UTC, datetime

from flavor_quest.achievements import EvaluationContext, evaluate_achievements, merge_unlock_state
from flavor_quest.catalog.builtin import builtin_achievements
from flavor_quest.models import PlayerProgress

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=UTC)


def _by_id(achievements):
    return {a.id: a for a in achievements}


def test_games_played_unlocks_first_steps_once() -> None:
    ctx = EvaluationContext(progress=PlayerProgress(games_played=1))

    first = evaluate_achievements(builtin_achievements(), ctx=ctx, now=NOW)
    assert [a.id for a in first.newly_unlocked] == ["first-steps"]
    assert first.xp_awarded == 50
    assert _by_id(first.achievements)["first-steps"].unlocked_at == NOW

    again = evaluate_achievements(first.achievements, ctx=ctx, now=NOW)
    assert again.newly_unlocked == []
    assert again.xp_awarded == 0


def test_time_record_uses_sixty_second_baseline() -> None:
    progress = PlayerProgress()

    slow = evaluate_achievements(builtin_achievements(), ctx=EvaluationContext(progress, time_remaining=29), now=NOW)
    assert "speed-demon" not in {a.id for a in slow.newly_unlocked}

    fast = evaluate_achievements(builtin_achievements(), ctx=EvaluationContext(progress, time_remaining=30), now=NOW)
    assert "speed-demon" in {a.id for a in fast.newly_unlocked}


def test_score_and_discovery_thresholds() -> None:
    progress = PlayerProgress(total_score=10_000, discovered_ingredients={f"i{n}" for n in range(50)})
    result = evaluate_achievements(builtin_achievements(), ctx=EvaluationContext(progress), now=NOW)

    assert {"high-scorer", "ingredient-master"} <= {a.id for a in result.newly_unlocked}


def test_kinds_without_unlock_rules_stay_locked() -> None:
    progress = PlayerProgress(streak_days=365, games_played=1000, total_score=10**6)
    result = evaluate_achievements(builtin_achievements(), ctx=EvaluationContext(progress), now=NOW)
    state = _by_id(result.achievements)

    assert not state["on-fire"].is_unlocked
    assert not state["perfectionist"].is_unlocked
    assert not state["recipe-book"].is_unlocked


def test_evaluation_preserves_order_and_does_not_mutate_input() -> None:
    catalog = builtin_achievements()
    result = evaluate_achievements(catalog, ctx=EvaluationContext(PlayerProgress(games_played=3)), now=NOW)

    assert [a.id for a in result.achievements] == [a.id for a in catalog]
    assert not catalog[0].is_unlocked


def test_merge_unlock_state_matches_by_id() -> None:
    catalog = builtin_achievements()
    persisted = [catalog[0].unlocked(at=NOW), catalog[1], catalog[2].model_copy(update={"id": "retired"})]

    merged = merge_unlock_state(catalog, persisted)

    assert len(merged) == len(catalog)
    assert merged[0].is_unlocked
    assert not any(a.is_unlocked for a in merged[1:])
    assert "retired" not in {a.id for a in merged}
