from __future__ import annotations

from statemachine import State, StateMachine

from flavor_quest.models import SessionPhase


class SessionFSM(StateMachine):
    """Lifecycle of one game session.

    idle -> active -> ended -> idle. `begin` is also allowed from `active`
    (a new game discards the one in progress) and from `ended` (play again).
    Domain work happens in the engine; the FSM only guards transitions.
    """

    idle = State(SessionPhase.idle.value, value=SessionPhase.idle.value, initial=True)
    active = State(SessionPhase.active.value, value=SessionPhase.active.value)
    ended = State(SessionPhase.ended.value, value=SessionPhase.ended.value)

    begin = idle.to(active) | ended.to(active) | active.to.itself()
    finish = active.to(ended)
    leave = ended.to(idle)

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase(str(self.current_state.value))
