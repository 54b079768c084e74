"""Thread-safe break scheduling state machine with wall-clock deadlines."""

from __future__ import annotations

import functools
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Protocol

from .constants import (
    ACTION_END_BREAK_NOW,
    ACTION_EXTEND,
    ACTION_PAUSE_FOR,
    ACTION_PAUSE_UNTIL_RESUME,
    ACTION_RESCHEDULE,
    ACTION_SKIP_NEXT_BREAK,
    ACTION_START,
    ACTION_TAKE_BREAK_NOW,
    ACTION_WAKE,
    DEFAULT_BREAK_DURATION_SECONDS,
    DEFAULT_INTERVAL_SECONDS,
    PHASE_COUNTING_DOWN,
    PHASE_IDLE,
    PHASE_ON_BREAK,
    REASON_ALREADY_RUNNING,
    REASON_BREAK_ENDED,
    REASON_BREAK_STARTED,
    REASON_CAUGHT_UP,
    REASON_EXTENDED,
    REASON_IDLE,
    REASON_NOT_ON_BREAK,
    REASON_ON_BREAK,
    REASON_PAUSED,
    REASON_REARMED,
    REASON_RESCHEDULED,
    REASON_RESUMED,
    REASON_SKIPPED,
    REASON_STARTED,
    REASON_UNCHANGED,
)
from .timers import ThreadingTimerBackend, TimerBackend, TimerHandle

BreakPhase = Literal["idle", "counting_down", "on_break"]
BreakAction = Literal[
    "start",
    "reschedule",
    "extend",
    "pause_for",
    "pause_until_resume",
    "skip_next_break",
    "take_break_now",
    "end_break_now",
    "wake_signal",
]

# Timer expiries earlier than this (e.g. after a backwards clock step) re-arm
# for the rest of the wall-clock deadline instead of transitioning.
_EARLY_FIRE_TOLERANCE_SECONDS = 1.0


@dataclass(frozen=True)
class BreakSnapshot:
    """Immutable scheduler snapshot exposed to runtime and UI publishers."""
    phase: BreakPhase
    remaining_seconds: Optional[int]
    interval_seconds: int
    break_duration_seconds: int
    paused_indefinitely: bool = False

    @property
    def is_on_break(self) -> bool:
        return self.phase == PHASE_ON_BREAK


@dataclass(frozen=True)
class BreakActionResult:
    """Result envelope returned after applying a scheduler command."""
    action: BreakAction
    accepted: bool
    reason: str
    snapshot: BreakSnapshot


class BreakListener(Protocol):
    """Receiver for the two observable scheduler events."""
    def break_started(self, duration_seconds: int) -> None:
        ...

    def break_ended(self) -> None:
        ...


class BreakScheduler:
    """Single owner of the next-break deadline, break phase, and pending timer.

    All state lives behind one re-entrant lock. Every command reads the clock
    once and derives all deadlines from that reading. Exactly one timer is
    armed at a time; each arm or cancel bumps a generation counter so a timer
    that fires after being superseded is recognised and dropped.
    """

    def __init__(
        self,
        *,
        interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
        break_duration_seconds: int = DEFAULT_BREAK_DURATION_SECONDS,
        timer_backend: Optional[TimerBackend] = None,
        listener: Optional[BreakListener] = None,
        clock: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        if break_duration_seconds <= 0:
            raise ValueError("break_duration_seconds must be greater than zero")

        self._interval_seconds = int(interval_seconds)
        self._break_duration_seconds = int(break_duration_seconds)
        self._timer_backend = timer_backend or ThreadingTimerBackend()
        self._listener = listener
        self._clock = clock
        self._logger = logger or logging.getLogger("breaks")
        self._lock = threading.RLock()

        self._phase: BreakPhase = PHASE_IDLE
        self._next_break_deadline: Optional[float] = None
        self._break_end_deadline: Optional[float] = None
        self._paused_indefinitely = False
        self._timer_handle: Optional[TimerHandle] = None
        self._generation = 0

    @property
    def interval_seconds(self) -> int:
        return self._interval_seconds

    @property
    def break_duration_seconds(self) -> int:
        return self._break_duration_seconds

    @property
    def phase(self) -> BreakPhase:
        with self._lock:
            return self._phase

    @property
    def next_break_deadline(self) -> Optional[float]:
        with self._lock:
            return self._next_break_deadline

    @property
    def break_end_deadline(self) -> Optional[float]:
        with self._lock:
            return self._break_end_deadline

    @property
    def is_paused_indefinitely(self) -> bool:
        with self._lock:
            return self._paused_indefinitely

    def set_listener(self, listener: Optional[BreakListener]) -> None:
        with self._lock:
            self._listener = listener

    def snapshot(self) -> BreakSnapshot:
        with self._lock:
            return self._snapshot_locked(self._now())

    def time_remaining(self) -> Optional[int]:
        """Seconds until the current phase's deadline; `None` while paused indefinitely."""
        with self._lock:
            return self._remaining_locked(self._now())

    def start(self) -> BreakActionResult:
        with self._lock:
            now = self._now()
            if self._phase == PHASE_IDLE:
                self._schedule_locked(now, self._interval_seconds)
                return self._result_locked(ACTION_START, True, REASON_STARTED, now)
            if self._phase == PHASE_ON_BREAK:
                return self._result_locked(ACTION_START, False, REASON_ON_BREAK, now)
            if self._paused_indefinitely:
                self._logger.info("Break schedule resumed")
                self._schedule_locked(now, self._interval_seconds)
                return self._result_locked(ACTION_START, True, REASON_RESUMED, now)
            return self._result_locked(ACTION_START, False, REASON_ALREADY_RUNNING, now)

    def reschedule(self, seconds: float) -> BreakActionResult:
        with self._lock:
            now = self._now()
            return self._reschedule_locked(ACTION_RESCHEDULE, seconds, REASON_RESCHEDULED, now)

    def extend(self, by_seconds: float) -> BreakActionResult:
        """Push the pending deadline back by `by_seconds` from its current value."""
        with self._lock:
            now = self._now()
            if self._phase == PHASE_ON_BREAK:
                return self._result_locked(ACTION_EXTEND, False, REASON_ON_BREAK, now)
            if self._phase == PHASE_IDLE:
                return self._result_locked(ACTION_EXTEND, False, REASON_IDLE, now)
            if self._paused_indefinitely or self._next_break_deadline is None:
                return self._result_locked(ACTION_EXTEND, False, REASON_PAUSED, now)

            remaining = max(0.0, self._next_break_deadline - now)
            self._schedule_locked(now, remaining + float(by_seconds))
            return self._result_locked(ACTION_EXTEND, True, REASON_EXTENDED, now)

    def pause_for(self, seconds: float) -> BreakActionResult:
        with self._lock:
            now = self._now()
            return self._reschedule_locked(ACTION_PAUSE_FOR, seconds, REASON_PAUSED, now)

    def pause_until_resume(self) -> BreakActionResult:
        with self._lock:
            now = self._now()
            if self._phase == PHASE_ON_BREAK:
                return self._result_locked(
                    ACTION_PAUSE_UNTIL_RESUME, False, REASON_ON_BREAK, now
                )

            self._cancel_timer_locked()
            self._phase = PHASE_COUNTING_DOWN
            self._next_break_deadline = None
            self._break_end_deadline = None
            self._paused_indefinitely = True
            self._logger.info("Breaks paused until resumed")
            return self._result_locked(ACTION_PAUSE_UNTIL_RESUME, True, REASON_PAUSED, now)

    def skip_next_break(self) -> BreakActionResult:
        with self._lock:
            now = self._now()
            return self._reschedule_locked(
                ACTION_SKIP_NEXT_BREAK,
                self._interval_seconds,
                REASON_SKIPPED,
                now,
            )

    def take_break_now(self) -> BreakActionResult:
        with self._lock:
            now = self._now()
            if self._phase == PHASE_ON_BREAK:
                return self._result_locked(ACTION_TAKE_BREAK_NOW, False, REASON_ON_BREAK, now)
            self._begin_break_locked(now)
            return self._result_locked(ACTION_TAKE_BREAK_NOW, True, REASON_BREAK_STARTED, now)

    def end_break_now(self) -> BreakActionResult:
        with self._lock:
            now = self._now()
            if self._phase != PHASE_ON_BREAK:
                return self._result_locked(
                    ACTION_END_BREAK_NOW, False, REASON_NOT_ON_BREAK, now
                )
            self._finish_break_locked(now)
            return self._result_locked(ACTION_END_BREAK_NOW, True, REASON_BREAK_ENDED, now)

    def wake_signal(self) -> BreakActionResult:
        """Recompute timers from wall-clock deadlines after a host suspension."""
        with self._lock:
            now = self._now()
            if self._phase == PHASE_IDLE:
                self._logger.info("Wake signal before start; starting schedule")
                self._schedule_locked(now, self._interval_seconds)
                return self._result_locked(ACTION_WAKE, True, REASON_STARTED, now)

            if self._phase == PHASE_COUNTING_DOWN:
                deadline = self._next_break_deadline
                if self._paused_indefinitely or deadline is None:
                    return self._result_locked(ACTION_WAKE, True, REASON_UNCHANGED, now)
                remaining = deadline - now
                if remaining <= 0:
                    self._logger.info(
                        "Break was due %.0fs ago during suspension; starting it now",
                        -remaining,
                    )
                    self._begin_break_locked(now)
                    return self._result_locked(ACTION_WAKE, True, REASON_CAUGHT_UP, now)
                self._arm_locked(remaining)
                self._logger.info("Wake: next break re-armed in %.0fs", remaining)
                return self._result_locked(ACTION_WAKE, True, REASON_REARMED, now)

            deadline = self._break_end_deadline
            remaining = (deadline - now) if deadline is not None else 0.0
            if remaining <= 0:
                self._logger.info("Break ended during suspension; ending it now")
                self._finish_break_locked(now)
                return self._result_locked(ACTION_WAKE, True, REASON_CAUGHT_UP, now)
            self._arm_locked(remaining)
            self._logger.info("Wake: break end re-armed in %.0fs", remaining)
            return self._result_locked(ACTION_WAKE, True, REASON_REARMED, now)

    def shutdown(self) -> None:
        with self._lock:
            self._cancel_timer_locked()
            self._phase = PHASE_IDLE
            self._next_break_deadline = None
            self._break_end_deadline = None
            self._paused_indefinitely = False
            self._logger.info("Break scheduler stopped")

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.time()

    def _reschedule_locked(
        self,
        action: BreakAction,
        seconds: float,
        reason: str,
        now: float,
    ) -> BreakActionResult:
        if self._phase == PHASE_ON_BREAK:
            return self._result_locked(action, False, REASON_ON_BREAK, now)
        self._schedule_locked(now, seconds)
        return self._result_locked(action, True, reason, now)

    def _schedule_locked(self, now: float, seconds: float) -> None:
        delay = max(0.0, float(seconds))
        self._phase = PHASE_COUNTING_DOWN
        self._paused_indefinitely = False
        self._break_end_deadline = None
        self._next_break_deadline = now + delay
        self._arm_locked(delay)
        self._logger.info("Next break scheduled in %.0fs", delay)

    def _begin_break_locked(self, now: float) -> None:
        self._phase = PHASE_ON_BREAK
        self._paused_indefinitely = False
        self._next_break_deadline = None
        self._break_end_deadline = now + self._break_duration_seconds
        self._arm_locked(self._break_duration_seconds)
        self._logger.info("Break started: duration=%ss", self._break_duration_seconds)
        self._emit("break_started", self._break_duration_seconds)

    def _finish_break_locked(self, now: float) -> None:
        self._logger.info("Break ended")
        self._schedule_locked(now, self._interval_seconds)
        self._emit("break_ended")

    def _arm_locked(self, delay_seconds: float) -> None:
        self._cancel_timer_locked()
        generation = self._generation
        self._timer_handle = self._timer_backend.arm(
            delay_seconds,
            functools.partial(self._on_timer_fired, generation),
        )

    def _cancel_timer_locked(self) -> None:
        self._generation += 1
        handle = self._timer_handle
        self._timer_handle = None
        if handle is not None:
            handle.cancel()

    def _on_timer_fired(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                self._logger.debug(
                    "Ignoring stale timer: generation=%s current=%s",
                    generation,
                    self._generation,
                )
                return

            self._timer_handle = None
            now = self._now()
            if self._phase == PHASE_COUNTING_DOWN:
                deadline = self._next_break_deadline
                if deadline is None:
                    return
                remaining = deadline - now
                if remaining > _EARLY_FIRE_TOLERANCE_SECONDS:
                    self._arm_locked(remaining)
                    return
                self._begin_break_locked(now)
                return

            if self._phase == PHASE_ON_BREAK:
                deadline = self._break_end_deadline
                if deadline is not None and deadline - now > _EARLY_FIRE_TOLERANCE_SECONDS:
                    self._arm_locked(deadline - now)
                    return
                self._finish_break_locked(now)

    def _emit(self, event: str, *args: int) -> None:
        listener = self._listener
        if listener is None:
            return
        try:
            getattr(listener, event)(*args)
        except Exception as error:
            self._logger.error("Break listener %s failed: %s", event, error, exc_info=True)

    def _result_locked(
        self,
        action: BreakAction,
        accepted: bool,
        reason: str,
        now: float,
    ) -> BreakActionResult:
        if not accepted:
            self._logger.debug("Rejected %s: %s", action, reason)
        return BreakActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self._snapshot_locked(now),
        )

    def _snapshot_locked(self, now: float) -> BreakSnapshot:
        return BreakSnapshot(
            phase=self._phase,
            remaining_seconds=self._remaining_locked(now),
            interval_seconds=self._interval_seconds,
            break_duration_seconds=self._break_duration_seconds,
            paused_indefinitely=self._paused_indefinitely,
        )

    def _remaining_locked(self, now: float) -> Optional[int]:
        if self._phase == PHASE_IDLE:
            return self._interval_seconds
        if self._phase == PHASE_ON_BREAK:
            return _ceil_seconds(self._break_end_deadline, now)
        if self._paused_indefinitely:
            return None
        if self._next_break_deadline is None:
            return self._interval_seconds
        return _ceil_seconds(self._next_break_deadline, now)


def _ceil_seconds(deadline: Optional[float], now: float) -> int:
    if deadline is None:
        return 0
    # Round away float noise from `now + n - now` before taking the ceiling.
    return max(0, int(math.ceil(round(deadline - now, 3))))
