from __future__ import annotations

import logging
import random
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from flavor_quest.achievements import EvaluationContext, evaluate_achievements, merge_unlock_state
from flavor_quest.config import EngineConfig
from flavor_quest.core.events import EventType, Listener, SessionEvent
from flavor_quest.countdown import Countdown, RunningLoopScheduler, Scheduler, SchedulerUnavailable
from flavor_quest.fsm import SessionFSM
from flavor_quest.game_setup import GUESS_MODES, SessionSetup, setup_daily_quest, setup_mode
from flavor_quest.gateways import CatalogSource, PersistenceError, PersistenceGateway
from flavor_quest.models import (
    Achievement,
    DailyQuest,
    GameDifficulty,
    GameMode,
    GameResults,
    GameScore,
    Ingredient,
    PlayerProgress,
    Recipe,
    SessionPhase,
    UserSettings,
)
from flavor_quest.progression import apply_game_result, award_xp, check_level_up, update_daily_streak
from flavor_quest.quests import QuestSessionStats, active_quests, first_active_quest, is_quest_satisfied
from flavor_quest.turn_processing.validators import IntentContext, InvalidIntent, pipeline_for_intent

logger = logging.getLogger(__name__)

EndReason = Literal["manual", "completed", "timeout"]

# Flat bonus per distinct ingredient category in a created recipe.
CATEGORY_BONUS = 10


def _now() -> datetime:
    return datetime.now(tz=UTC)


def normalize_guess(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip().casefold()


def recipe_bonus(ingredients: list[Ingredient]) -> int:
    """Sum of rarity points plus a bonus for every distinct category."""

    rarity_points = sum(i.points for i in ingredients)
    categories = {i.category for i in ingredients}
    return rarity_points + CATEGORY_BONUS * len(categories)


def compute_accuracy(*, played_mode: GameMode | None, pool_size: int, guessed: int, selected: int) -> float:
    """Selection ratio for culinary challenges, guess ratio for everything else."""

    if pool_size == 0:
        return 0.0
    if played_mode == GameMode.culinary_challenge:
        return selected / pool_size
    return guessed / pool_size


@dataclass(slots=True)
class _Session:
    mode: GameMode
    difficulty: GameDifficulty
    time_remaining: int
    setup: SessionSetup
    score: int = 0
    selected: list[Ingredient] = field(default_factory=list)
    # Normalized names of correctly guessed pool ingredients.
    guessed: set[str] = field(default_factory=set)
    # Normalized names of every ingredient credited this session (guessed or selected).
    credited: set[str] = field(default_factory=set)
    recipes_created: int = 0

    @property
    def pool(self) -> list[Ingredient]:
        return self.setup.pool


class GameEngine:
    """Session state machine plus progression for a single player.

    All mutation happens synchronously inside the public intents or the countdown
    tick. Intents that are not valid in the current state are ignored (False/None).
    Persistence failures are logged and never roll back in-memory state.
    """

    def __init__(
        self,
        *,
        catalog: CatalogSource,
        store: PersistenceGateway,
        scheduler: Scheduler | None = None,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
        listeners: Iterable[Listener] = (),
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.config = config or EngineConfig()
        self._clock = clock or _now
        self._rng = rng or random.Random()

        self._fsm = SessionFSM()
        self._countdown = Countdown(
            scheduler=scheduler or RunningLoopScheduler(),
            on_tick=self.tick,
            interval=self.config.tick_interval,
        )
        # Registered before bootstrap so startup unlocks and level-ups are observable.
        self._listeners: list[Listener] = list(listeners)

        self._session: _Session | None = None
        self._results: GameResults | None = None
        self._pending_achievements: list[Achievement] = []
        self._level_up_pending = False

        self.progress: PlayerProgress = self._load_progress()
        self.settings: UserSettings = self._load_settings()
        self._achievements: list[Achievement] = self._load_achievements()
        self._daily_quests: list[DailyQuest] = catalog.active_daily_quests()
        self._completed_quest_ids: set[str] = self._load_completed_quest_ids()
        self.first_launch: bool = self._check_first_launch()

        self._bootstrap()

    # ---- observers ----

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _emit(self, type: EventType, **payload: Any) -> None:
        event = SessionEvent.now(type=type, payload=payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session listener failed on %s", type)

    # ---- read-only state ----

    @property
    def state(self) -> SessionPhase:
        return self._fsm.phase

    @property
    def mode(self) -> GameMode | None:
        return self._session.mode if self._session else None

    @property
    def difficulty(self) -> GameDifficulty | None:
        return self._session.difficulty if self._session else None

    @property
    def score(self) -> int:
        return self._session.score if self._session else 0

    @property
    def time_remaining(self) -> int:
        return self._session.time_remaining if self._session else 0

    @property
    def results(self) -> GameResults | None:
        return self._results

    @property
    def current_ingredients(self) -> tuple[Ingredient, ...]:
        return tuple(self._session.pool) if self._session else ()

    @property
    def selected_ingredients(self) -> tuple[Ingredient, ...]:
        return tuple(self._session.selected) if self._session else ()

    @property
    def guessed_ingredients(self) -> frozenset[str]:
        return frozenset(self._session.guessed) if self._session else frozenset()

    @property
    def current_recipe(self) -> Recipe | None:
        return self._session.setup.recipe if self._session else None

    @property
    def current_quest(self) -> DailyQuest | None:
        return self._session.setup.quest if self._session else None

    @property
    def achievements(self) -> tuple[Achievement, ...]:
        return tuple(self._achievements)

    @property
    def daily_quests(self) -> list[DailyQuest]:
        """Quests still playable right now (recomputed on every read)."""

        return active_quests(self._daily_quests, now=self._clock(), completed_ids=self._completed_quest_ids)

    def take_unlocked_achievements(self) -> list[Achievement]:
        """One-shot: achievements unlocked since the last call."""

        pending, self._pending_achievements = self._pending_achievements, []
        return pending

    def take_level_up(self) -> bool:
        """One-shot: True if the player levelled up since the last call."""

        pending, self._level_up_pending = self._level_up_pending, False
        return pending

    def top_scores(self, mode: GameMode, limit: int = 10) -> list[GameScore]:
        try:
            return self.store.top_scores(mode, limit)
        except PersistenceError as e:
            logger.warning("Could not load leaderboard for %s: %s", mode.value, e)
            return []

    # ---- intents ----

    def start_game(self, mode: GameMode, difficulty: GameDifficulty = GameDifficulty.medium) -> None:
        try:
            # Arms the first tick and replaces any running countdown.
            self._countdown.start()
        except SchedulerUnavailable as e:
            logger.warning("Cannot start %s: %s", mode.value, e)
            return

        if self.state == SessionPhase.active:
            logger.info("Discarding in-progress %s session", self.mode.value if self.mode else "?")
        self._results = None

        setup = self._setup_for(mode, difficulty)
        self._session = _Session(mode=mode, difficulty=difficulty, time_remaining=difficulty.time_limit, setup=setup)

        self.progress.games_played += 1
        self._save_progress()

        self._fsm.send("begin")
        logger.info(
            "Started %s (%s) with %s ingredients", mode.value, difficulty.value, len(setup.pool)
        )
        self._emit("STATE_CHANGED", state=self.state.value, mode=mode.value)
        self._emit("SCORE_CHANGED", score=0)
        self._emit("TIME_CHANGED", time_remaining=self.time_remaining)

    def tick(self) -> None:
        """Advance the countdown by one second. No-op unless a session is active."""

        session = self._session
        if self.state != SessionPhase.active or session is None:
            return
        session.time_remaining = max(0, session.time_remaining - 1)
        self._emit("TIME_CHANGED", time_remaining=session.time_remaining)
        if session.time_remaining == 0:
            self._finish("timeout")

    def select_ingredient(self, ingredient: Ingredient) -> bool:
        if not self._allowed("select", payload=ingredient):
            return False
        session = self._session
        if session is None or ingredient in session.selected:
            return False

        session.selected.append(ingredient)
        self._credit(session, ingredient)
        self._check_completion()
        return True

    def remove_selected_ingredient(self, ingredient: Ingredient) -> bool:
        if not self._allowed("remove", payload=ingredient):
            return False
        session = self._session
        if session is None or ingredient not in session.selected:
            return False

        session.selected.remove(ingredient)
        session.score = max(0, session.score - ingredient.points)
        self._emit("SCORE_CHANGED", score=session.score)
        return True

    def guess_ingredient(self, text: str) -> bool:
        if not self._allowed("guess", payload=text):
            return False
        session = self._session
        if session is None:
            return False

        key = normalize_guess(text)
        match = next((i for i in session.pool if normalize_guess(i.name) == key), None)
        if match is None or key in session.guessed:
            return False

        session.guessed.add(key)
        self._credit(session, match)
        self._check_completion()
        return True

    def create_recipe(self) -> bool:
        session = self._session
        selected_count = len(session.selected) if session else 0
        if not self._allowed("create_recipe", selected_count=selected_count):
            return False
        if session is None:
            return False

        bonus = recipe_bonus(session.selected)
        session.score += bonus
        session.selected.clear()
        session.recipes_created += 1
        logger.debug("Recipe created for %s points", bonus)
        self._emit("SCORE_CHANGED", score=session.score)
        self._check_completion()
        return True

    def end_game(self) -> None:
        if not self._allowed("end"):
            return
        self._finish("manual")

    def return_to_main_menu(self) -> None:
        if not self._allowed("return_to_menu"):
            return
        self._countdown.cancel()
        self._session = None
        self._results = None
        self._fsm.send("leave")
        self._emit("STATE_CHANGED", state=self.state.value, mode=None)

    def update_settings(self, settings: UserSettings) -> None:
        self.settings = settings
        try:
            self.store.save_settings(settings)
        except PersistenceError as e:
            logger.warning("Could not save settings: %s", e)

    # ---- internals ----

    def _allowed(self, intent: str, *, payload: Any = None, selected_count: int = 0) -> bool:
        ctx = IntentContext(intent=intent, phase=self.state, selected_count=selected_count, payload=payload)
        try:
            pipeline_for_intent(intent).validate(ctx=ctx)
        except InvalidIntent as e:
            logger.debug("Ignored intent: %s", e)
            return False
        return True

    def _setup_for(self, mode: GameMode, difficulty: GameDifficulty) -> SessionSetup:
        if mode != GameMode.daily_quest:
            return setup_mode(mode, difficulty, catalog=self.catalog)

        quest = first_active_quest(self._daily_quests, now=self._clock(), completed_ids=self._completed_quest_ids)
        favorites = set(self.progress.favorite_cuisines) | set(self.settings.favorite_cuisines)
        return setup_daily_quest(quest, catalog=self.catalog, favorites=favorites, rng=self._rng)

    def _credit(self, session: _Session, ingredient: Ingredient) -> None:
        session.score += ingredient.points
        session.credited.add(normalize_guess(ingredient.name))
        if ingredient.name not in self.progress.discovered_ingredients:
            self.progress.discovered_ingredients.add(ingredient.name)
            self._save_progress()
        self._emit("SCORE_CHANGED", score=session.score)

    def _check_completion(self) -> None:
        session = self._session
        if session is None or self.state != SessionPhase.active:
            return
        if session.setup.rules_mode not in GUESS_MODES or not session.pool:
            # Selection-based modes finish manually.
            return
        pool_names = {normalize_guess(i.name) for i in session.pool}
        if pool_names <= session.guessed:
            self._finish("completed")

    def _finish(self, reason: EndReason) -> None:
        session = self._session
        if session is None or self.state != SessionPhase.active:
            return
        self._countdown.cancel()
        now = self._clock()

        elapsed = session.difficulty.time_limit - session.time_remaining
        accuracy = compute_accuracy(
            played_mode=session.setup.played_mode,
            pool_size=len(session.pool),
            guessed=len(session.guessed),
            selected=len(session.selected),
        )

        outcome = apply_game_result(self.progress, score=session.score, difficulty=session.difficulty)
        leveled_up = outcome.leveled_up
        self._save_progress()
        self._append_score(session, elapsed=elapsed, at=now)

        self._fsm.send("finish")
        logger.info("Session ended (%s): %s scored %s", reason, session.mode.value, session.score)

        completed_quest = self._complete_quest(session, reason=reason, accuracy=accuracy, at=now)
        unlocked = self._evaluate_achievements(time_remaining=session.time_remaining, at=now)
        if check_level_up(self.progress):
            leveled_up = True
            self._save_progress()
        if leveled_up:
            self._level_up_pending = True
            self._emit("LEVEL_UP", level=self.progress.level)

        self._results = GameResults(
            score=session.score,
            mode=session.mode,
            difficulty=session.difficulty,
            time_elapsed=elapsed,
            accuracy=accuracy,
            ingredients_discovered=len(session.credited),
            xp_gained=outcome.xp_gained,
            new_achievements=tuple(unlocked),
            level_up=leveled_up,
            completed_quest=completed_quest,
        )
        self._emit("SESSION_ENDED", reason=reason, score=session.score, accuracy=accuracy)
        self._emit("STATE_CHANGED", state=self.state.value, mode=session.mode.value)

    def _append_score(self, session: _Session, *, elapsed: int, at: datetime) -> None:
        entry = GameScore(
            player_id=self.config.player_id,
            player_name=self.settings.player_name,
            score=session.score,
            mode=session.mode,
            difficulty=session.difficulty,
            achieved_at=at,
            time_elapsed=elapsed,
        )
        try:
            self.store.append_score(entry)
        except PersistenceError as e:
            logger.warning("Could not record score: %s", e)

    def _complete_quest(self, session: _Session, *, reason: EndReason, accuracy: float, at: datetime) -> DailyQuest | None:
        quest = session.setup.quest
        if quest is None or not quest.is_active(at) or quest.id in self._completed_quest_ids:
            return None

        stats = QuestSessionStats(
            recipes_created=session.recipes_created,
            ingredients_credited=len(session.credited),
            finished_early=reason == "completed",
            accuracy=accuracy,
        )
        if not is_quest_satisfied(quest, stats):
            return None

        done = quest.completed(at=at)
        self._daily_quests = [done if q.id == quest.id else q for q in self._daily_quests]
        self._completed_quest_ids.add(quest.id)

        reward = quest.reward
        award_xp(self.progress, reward.points)
        self.progress.unlocked_recipes.update(reward.recipes)
        self.progress.discovered_ingredients.update(reward.ingredients)
        if reward.title and reward.title not in self.progress.titles:
            self.progress.titles.append(reward.title)
        self._save_progress()

        try:
            self.store.save_completed_quest(done)
        except PersistenceError as e:
            logger.warning("Could not save completed quest %s: %s", quest.id, e)

        logger.info("Daily quest completed: %s (+%s XP)", quest.title, reward.points)
        self._emit("QUEST_COMPLETED", quest_id=quest.id, title=quest.title, points=reward.points)
        return done

    def _evaluate_achievements(self, *, time_remaining: float, at: datetime) -> list[Achievement]:
        ctx = EvaluationContext(progress=self.progress, time_remaining=time_remaining)
        result = evaluate_achievements(self._achievements, ctx=ctx, now=at)
        if not result.newly_unlocked:
            return []

        self._achievements = result.achievements
        award_xp(self.progress, result.xp_awarded)
        self._pending_achievements.extend(result.newly_unlocked)
        for achievement in result.newly_unlocked:
            self._emit("ACHIEVEMENT_UNLOCKED", achievement_id=achievement.id, title=achievement.title)

        self._save_progress()
        try:
            self.store.save_achievements(self._achievements)
        except PersistenceError as e:
            logger.warning("Could not save achievements: %s", e)
        return result.newly_unlocked

    def _bootstrap(self) -> None:
        update_daily_streak(self.progress, today=self._clock().date())
        self._save_progress()

        now = self._clock()
        self._evaluate_achievements(time_remaining=0, at=now)
        if check_level_up(self.progress):
            self._level_up_pending = True
            self._save_progress()
            self._emit("LEVEL_UP", level=self.progress.level)

    # ---- persistence (failures never propagate) ----

    def _save_progress(self) -> None:
        try:
            self.store.save_progress(self.progress)
        except PersistenceError as e:
            logger.warning("Could not save progress: %s", e)

    def _load_progress(self) -> PlayerProgress:
        try:
            return self.store.load_progress()
        except PersistenceError as e:
            logger.warning("Could not load progress, starting fresh: %s", e)
            return PlayerProgress()

    def _load_settings(self) -> UserSettings:
        try:
            return self.store.load_settings()
        except PersistenceError as e:
            logger.warning("Could not load settings, using defaults: %s", e)
            return UserSettings()

    def _load_achievements(self) -> list[Achievement]:
        catalog = self.catalog.all_achievements()
        try:
            persisted = self.store.load_achievements()
        except PersistenceError as e:
            logger.warning("Could not load achievements: %s", e)
            persisted = []
        return merge_unlock_state(catalog, persisted)

    def _load_completed_quest_ids(self) -> set[str]:
        try:
            return {q.id for q in self.store.load_completed_quests()}
        except PersistenceError as e:
            logger.warning("Could not load completed quests: %s", e)
            return set()

    def _check_first_launch(self) -> bool:
        try:
            return self.store.is_first_launch()
        except PersistenceError as e:
            logger.warning("Could not read first-launch flag: %s", e)
            return False
