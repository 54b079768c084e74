from .constants import DEFAULT_BREAK_DURATION_SECONDS, DEFAULT_INTERVAL_SECONDS
from .formatting import format_countdown, format_remaining
from .service import (
    BreakAction,
    BreakActionResult,
    BreakListener,
    BreakPhase,
    BreakScheduler,
    BreakSnapshot,
)
from .timers import ThreadingTimerBackend, TimerBackend, TimerHandle

__all__ = [
    "DEFAULT_BREAK_DURATION_SECONDS",
    "DEFAULT_INTERVAL_SECONDS",
    "BreakAction",
    "BreakActionResult",
    "BreakListener",
    "BreakPhase",
    "BreakScheduler",
    "BreakSnapshot",
    "ThreadingTimerBackend",
    "TimerBackend",
    "TimerHandle",
    "format_countdown",
    "format_remaining",
]
