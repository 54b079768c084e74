"""Phase, action, and reason constants used by break scheduling logic."""

from __future__ import annotations

DEFAULT_INTERVAL_SECONDS = 20 * 60
DEFAULT_BREAK_DURATION_SECONDS = 30

PHASE_IDLE = "idle"
PHASE_COUNTING_DOWN = "counting_down"
PHASE_ON_BREAK = "on_break"

ACTION_START = "start"
ACTION_RESCHEDULE = "reschedule"
ACTION_EXTEND = "extend"
ACTION_PAUSE_FOR = "pause_for"
ACTION_PAUSE_UNTIL_RESUME = "pause_until_resume"
ACTION_SKIP_NEXT_BREAK = "skip_next_break"
ACTION_TAKE_BREAK_NOW = "take_break_now"
ACTION_END_BREAK_NOW = "end_break_now"
ACTION_WAKE = "wake_signal"

ACTION_SYNC = "sync"
ACTION_BREAK_STARTED = "break_started"
ACTION_BREAK_ENDED = "break_ended"

REASON_STARTED = "started"
REASON_RESUMED = "resumed"
REASON_RESCHEDULED = "rescheduled"
REASON_EXTENDED = "extended"
REASON_PAUSED = "paused"
REASON_SKIPPED = "skipped"
REASON_BREAK_STARTED = "break_started"
REASON_BREAK_ENDED = "break_ended"
REASON_REARMED = "rearmed"
REASON_CAUGHT_UP = "caught_up"
REASON_UNCHANGED = "unchanged"
REASON_ALREADY_RUNNING = "already_running"
REASON_ON_BREAK = "on_break"
REASON_NOT_ON_BREAK = "not_on_break"
REASON_IDLE = "idle"
REASON_STARTUP = "startup"
