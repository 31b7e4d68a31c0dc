from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from flavor_quest.models import Ingredient, SessionPhase


class InvalidIntent(ValueError):
    """An intent that is not allowed right now. The engine turns this into a no-op."""


@dataclass(frozen=True, slots=True)
class IntentContext:
    """Everything a validator may look at.

    Keep this tight and serializable-ish so we can safely log it.
    """

    intent: str
    phase: SessionPhase
    selected_count: int = 0
    payload: Any = None


class IntentValidator(ABC):
    """A small, composable validation unit for an incoming intent."""

    @abstractmethod
    def validate(self, *, ctx: IntentContext) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class PhaseValidator(IntentValidator):
    allowed_phases: frozenset[SessionPhase]

    def validate(self, *, ctx: IntentContext) -> None:
        if ctx.phase not in self.allowed_phases:
            allowed = ",".join(sorted(p.value for p in self.allowed_phases))
            raise InvalidIntent(f"Intent '{ctx.intent}' not allowed in phase '{ctx.phase.value}' (allowed: {allowed})")


@dataclass(frozen=True, slots=True)
class GuessTextValidator(IntentValidator):
    """Reject non-string, empty or whitespace-only guesses."""

    def validate(self, *, ctx: IntentContext) -> None:
        if not isinstance(ctx.payload, str) or not ctx.payload.strip():
            raise InvalidIntent("Guess text is empty")


@dataclass(frozen=True, slots=True)
class IngredientPayloadValidator(IntentValidator):
    def validate(self, *, ctx: IntentContext) -> None:
        if not isinstance(ctx.payload, Ingredient):
            raise InvalidIntent(f"Intent '{ctx.intent}' requires an ingredient")


@dataclass(frozen=True, slots=True)
class MinimumSelectionValidator(IntentValidator):
    minimum: int

    def validate(self, *, ctx: IntentContext) -> None:
        if ctx.selected_count < self.minimum:
            raise InvalidIntent(f"Need at least {self.minimum} selected ingredients (have {ctx.selected_count})")


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[IntentValidator, ...]

    def validate(self, *, ctx: IntentContext) -> None:
        for v in self.validators:
            v.validate(ctx=ctx)


_ACTIVE = frozenset({SessionPhase.active})

DEFAULT_INTENT_PIPELINES: dict[str, ValidatorPipeline] = {
    "select": ValidatorPipeline(validators=(PhaseValidator(_ACTIVE), IngredientPayloadValidator())),
    "remove": ValidatorPipeline(validators=(PhaseValidator(_ACTIVE), IngredientPayloadValidator())),
    "guess": ValidatorPipeline(validators=(PhaseValidator(_ACTIVE), GuessTextValidator())),
    "create_recipe": ValidatorPipeline(validators=(PhaseValidator(_ACTIVE), MinimumSelectionValidator(minimum=2))),
    "end": ValidatorPipeline(validators=(PhaseValidator(_ACTIVE),)),
    "return_to_menu": ValidatorPipeline(validators=(PhaseValidator(frozenset({SessionPhase.ended})),)),
}


def pipeline_for_intent(intent: str) -> ValidatorPipeline:
    pipe = DEFAULT_INTENT_PIPELINES.get(intent)
    if pipe is None:
        raise ValueError(f"Unknown intent: {intent}")
    return pipe
