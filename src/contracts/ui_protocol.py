"""Web UI websocket event constants."""

from __future__ import annotations

# Websocket event types (server -> client)
EVENT_HELLO = "hello"
EVENT_SCHEDULE = "schedule"
EVENT_BREAK_STARTED = "break_started"
EVENT_BREAK_ENDED = "break_ended"
EVENT_ERROR = "error"

# Websocket message types (client -> server)
MESSAGE_COMMAND = "command"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_SCHEDULE,
        EVENT_BREAK_STARTED,
    }
)

# A running break replays before the schedule so the overlay opens first.
STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_BREAK_STARTED,
    EVENT_SCHEDULE,
)

# Publishing a key event drops the listed sticky events from the replay cache.
STICKY_EVENT_CLEARS: dict[str, tuple[str, ...]] = {
    EVENT_BREAK_ENDED: (EVENT_BREAK_STARTED,),
}
