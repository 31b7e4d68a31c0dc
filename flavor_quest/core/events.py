from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "STATE_CHANGED",
    "SCORE_CHANGED",
    "TIME_CHANGED",
    "SESSION_ENDED",
    "ACHIEVEMENT_UNLOCKED",
    "LEVEL_UP",
    "QUEST_COMPLETED",
]


@dataclass(frozen=True, slots=True)
class SessionEvent:
    type: EventType
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, payload: dict[str, Any]) -> "SessionEvent":
        return SessionEvent(type=type, payload=payload, ts=datetime.now(timezone.utc))


Listener = Callable[[SessionEvent], None]
