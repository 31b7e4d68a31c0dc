from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class SchedulerUnavailable(RuntimeError):
    """The scheduler cannot accept callbacks right now (e.g. no running loop)."""


class TimerHandle(Protocol):
    def cancel(self) -> None:  # pragma: no cover
        ...


class Scheduler(Protocol):
    """Anything that can run a callback later; `asyncio` loops qualify."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> TimerHandle:  # pragma: no cover
        ...


class RunningLoopScheduler:
    """Schedules on whichever asyncio loop is running when the countdown starts."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> TimerHandle:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise SchedulerUnavailable("no running event loop") from e
        return loop.call_later(delay, callback)


class Countdown:
    """Repeating, cancellable tick.

    Each `start()` bumps a generation counter; a callback from an older
    generation is ignored even if the scheduler fires it after `cancel()`.
    """

    def __init__(self, *, scheduler: Scheduler, on_tick: Callable[[], None], interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._scheduler = scheduler
        self._on_tick = on_tick
        self._interval = interval
        self._handle: TimerHandle | None = None
        self._generation = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Restart from a full interval.

        The first tick is scheduled before the previous countdown is cancelled,
        so a scheduler error leaves the current countdown untouched.
        """

        generation = self._generation + 1
        handle = self._call_later(generation)
        self.cancel()
        self._generation = generation
        self._running = True
        self._handle = handle

    def cancel(self) -> None:
        self._running = False
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.cancel()

    def _call_later(self, generation: int) -> TimerHandle:
        return self._scheduler.call_later(self._interval, lambda: self._fire(generation))

    def _fire(self, generation: int) -> None:
        if not self._running or generation != self._generation:
            return
        self._handle = None
        self._on_tick()
        # on_tick may have cancelled or restarted us.
        if self._running and generation == self._generation:
            self._handle = self._call_later(generation)
