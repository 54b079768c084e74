"""Status and rejection text builders for the break menu and overlay."""

from __future__ import annotations

from breaks import BreakSnapshot, format_countdown, format_remaining
from breaks.constants import (
    ACTION_END_BREAK_NOW,
    ACTION_EXTEND,
    PHASE_IDLE,
    PHASE_ON_BREAK,
    REASON_ALREADY_RUNNING,
    REASON_IDLE,
    REASON_NOT_ON_BREAK,
    REASON_ON_BREAK,
    REASON_PAUSED,
)


def schedule_label(snapshot: BreakSnapshot) -> str:
    """Menu headline for the current scheduler snapshot."""
    if snapshot.phase == PHASE_ON_BREAK:
        return f"On break ({format_countdown(snapshot.remaining_seconds or 0)} left)"
    if snapshot.phase == PHASE_IDLE:
        return "Breaks are stopped"
    if snapshot.paused_indefinitely or snapshot.remaining_seconds is None:
        return "Breaks paused until you resume"
    return f"Your break begins in {format_remaining(snapshot.remaining_seconds)}"


def rejection_text(action: str, reason: str) -> str:
    """Explain why a command was ignored in the current phase."""
    if reason == REASON_ON_BREAK:
        return "A break is in progress."
    if reason == REASON_NOT_ON_BREAK and action == ACTION_END_BREAK_NOW:
        return "There is no break to skip right now."
    if reason == REASON_PAUSED and action == ACTION_EXTEND:
        return "Breaks are paused; resume before adding time."
    if reason == REASON_IDLE:
        return "Breaks are stopped."
    if reason == REASON_ALREADY_RUNNING:
        return "The break countdown is already running."
    return "That action is not possible right now."
