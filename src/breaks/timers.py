"""One-shot timer backends used by the break scheduler."""

from __future__ import annotations

import threading
from typing import Callable, Optional, Protocol

TimerCallback = Callable[[], None]

# Longer delays are clamped; the scheduler re-arms early fires against its
# wall-clock deadline.
MAX_TIMER_DELAY_SECONDS = min(threading.TIMEOUT_MAX, 24 * 60 * 60.0)


class TimerHandle(Protocol):
    """Handle returned for an armed timer."""
    def cancel(self) -> None:
        ...


class TimerBackend(Protocol):
    """Factory for one-shot timers owned by a single scheduler."""
    def arm(self, delay_seconds: float, callback: TimerCallback) -> TimerHandle:
        ...


class _ThreadingTimerHandle:
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    @property
    def delay_seconds(self) -> float:
        return self._timer.interval

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingTimerBackend:
    """Arms `threading.Timer` instances and optionally marshals expiry elsewhere.

    When `dispatch` is given, the timer thread never runs the callback itself;
    it hands the callback to `dispatch` (for example a runtime queue) so the
    callback executes on the consumer thread.
    """

    def __init__(self, dispatch: Optional[Callable[[TimerCallback], None]] = None):
        self._dispatch = dispatch

    def arm(self, delay_seconds: float, callback: TimerCallback) -> TimerHandle:
        def fire() -> None:
            if self._dispatch is not None:
                self._dispatch(callback)
            else:
                callback()

        delay = min(max(0.0, float(delay_seconds)), MAX_TIMER_DELAY_SECONDS)
        timer = threading.Timer(delay, fire)
        timer.daemon = True
        timer.name = "break-timer"
        timer.start()
        return _ThreadingTimerHandle(timer)
