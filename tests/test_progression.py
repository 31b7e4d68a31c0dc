from __future__ import annotations

from datetime import date

import pytest

from flavor_quest.models import GameDifficulty, PlayerProgress
from flavor_quest.progression import (
    apply_game_result,
    award_xp,
    check_level_up,
    level_for_xp,
    update_daily_streak,
    xp_for_score,
)


@pytest.mark.parametrize(
    ("xp", "level"),
    [(0, 1), (99, 1), (100, 2), (399, 2), (400, 3), (899, 3), (900, 4)],
)
def test_level_for_xp_boundaries(xp: int, level: int) -> None:
    assert level_for_xp(xp) == level


def test_level_for_negative_xp_is_rejected() -> None:
    with pytest.raises(ValueError):
        level_for_xp(-1)


def test_xp_for_score_floors_then_multiplies() -> None:
    assert xp_for_score(250, GameDifficulty.medium) == 37
    assert xp_for_score(9, GameDifficulty.hard) == 0
    assert xp_for_score(100, GameDifficulty.hard) == 20


def test_apply_game_result_updates_totals_and_levels() -> None:
    progress = PlayerProgress(total_xp=90, best_score=500, total_score=500)

    outcome = apply_game_result(progress, score=100, difficulty=GameDifficulty.easy)

    assert outcome.xp_gained == 10
    assert outcome.leveled_up
    assert progress.level == 2
    assert progress.total_score == 600
    assert progress.best_score == 500


def test_check_level_up_never_lowers_level() -> None:
    progress = PlayerProgress(level=5, total_xp=0)
    assert not check_level_up(progress)
    assert progress.level == 5


def test_award_xp_ignores_negative_amounts() -> None:
    progress = PlayerProgress(total_xp=10)
    award_xp(progress, -50)
    award_xp(progress, 5)
    assert progress.total_xp == 15


def test_daily_streak_rules() -> None:
    today = date(2026, 3, 14)

    fresh = PlayerProgress()
    assert update_daily_streak(fresh, today=today)
    assert fresh.streak_days == 1 and fresh.last_played_date == today

    same_day = PlayerProgress(streak_days=4, last_played_date=today)
    assert not update_daily_streak(same_day, today=today)
    assert same_day.streak_days == 4

    consecutive = PlayerProgress(streak_days=4, last_played_date=date(2026, 3, 13))
    update_daily_streak(consecutive, today=today)
    assert consecutive.streak_days == 5

    gap = PlayerProgress(streak_days=4, last_played_date=date(2026, 3, 10))
    update_daily_streak(gap, today=today)
    assert gap.streak_days == 1
    assert gap.last_played_date == today
