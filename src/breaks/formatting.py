"""Pure display helpers for countdown and break clock text."""

from __future__ import annotations


def format_remaining(seconds: int) -> str:
    """Format seconds until the next break as `H:MM` (>= 1 hour) or `M:SS`."""
    total = max(0, int(seconds))
    minutes, remainder = divmod(total, 60)
    if minutes >= 60:
        hours, minutes = divmod(minutes, 60)
        return f"{hours}:{minutes:02d}"
    return f"{minutes}:{remainder:02d}"


def format_countdown(seconds: int) -> str:
    """Format a break countdown as zero-padded `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"
