"""Canonical UI command names, argument rules, and menu presets."""

from __future__ import annotations

from breaks.constants import (
    ACTION_END_BREAK_NOW,
    ACTION_EXTEND,
    ACTION_PAUSE_FOR,
    ACTION_PAUSE_UNTIL_RESUME,
    ACTION_SKIP_NEXT_BREAK,
    ACTION_START,
    ACTION_TAKE_BREAK_NOW,
)

COMMAND_START = ACTION_START
COMMAND_TAKE_BREAK_NOW = ACTION_TAKE_BREAK_NOW
COMMAND_SKIP_NEXT_BREAK = ACTION_SKIP_NEXT_BREAK
COMMAND_EXTEND = ACTION_EXTEND
COMMAND_PAUSE_FOR = ACTION_PAUSE_FOR
COMMAND_PAUSE_UNTIL_RESUME = ACTION_PAUSE_UNTIL_RESUME
COMMAND_END_BREAK_NOW = ACTION_END_BREAK_NOW
COMMAND_STATUS = "status"

COMMAND_NAME_ORDER: tuple[str, ...] = (
    COMMAND_START,
    COMMAND_TAKE_BREAK_NOW,
    COMMAND_SKIP_NEXT_BREAK,
    COMMAND_EXTEND,
    COMMAND_PAUSE_FOR,
    COMMAND_PAUSE_UNTIL_RESUME,
    COMMAND_END_BREAK_NOW,
    COMMAND_STATUS,
)

COMMAND_NAMES: frozenset[str] = frozenset(COMMAND_NAME_ORDER)

# Commands that require a positive integer `seconds` argument.
COMMANDS_WITH_SECONDS: frozenset[str] = frozenset({COMMAND_EXTEND, COMMAND_PAUSE_FOR})

# Largest `seconds` accepted from a UI command (one week).
MAX_COMMAND_SECONDS = 7 * 24 * 60 * 60

EXTEND_PRESETS_SECONDS: tuple[int, ...] = (60, 5 * 60)

PAUSE_PRESETS_MINUTES: tuple[int, ...] = (10, 15, 30, 45, 60, 120, 240, 480, 1440)
PAUSE_PRESETS_SECONDS: tuple[int, ...] = tuple(
    minutes * 60 for minutes in PAUSE_PRESETS_MINUTES
)


def preset_label(seconds: int) -> str:
    """Menu label for an extend or pause preset, e.g. `5 minutes` or `2 hours`."""
    minutes = max(0, int(seconds)) // 60
    if minutes >= 60 and minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"


def menu_presets() -> dict[str, list[dict[str, object]]]:
    """Preset entries sent to UI clients so the menu mirrors the accepted values."""
    return {
        COMMAND_EXTEND: [
            {"seconds": seconds, "label": f"Add {preset_label(seconds)}"}
            for seconds in EXTEND_PRESETS_SECONDS
        ],
        COMMAND_PAUSE_FOR: [
            {"seconds": seconds, "label": preset_label(seconds)}
            for seconds in PAUSE_PRESETS_SECONDS
        ],
    }
