"""Typed inbound events consumed by the serialized runtime loop."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from queue import Queue
from typing import Callable, Optional, Protocol


@dataclass(frozen=True)
class CommandEvent:
    """A UI command such as `take_break_now` or `extend` (with `seconds`)."""
    name: str
    seconds: Optional[int] = None


@dataclass(frozen=True)
class WakeSignalEvent:
    """Emitted when the host resumed after a suspension of unknown length."""
    occurred_at: datetime
    gap_seconds: float = 0.0


@dataclass(frozen=True)
class TimerExpiredEvent:
    """A scheduler timer expiry marshalled onto the runtime thread."""
    callback: Callable[[], None]


@dataclass(frozen=True)
class ShutdownEvent:
    """Requests an orderly exit from the runtime loop."""
    reason: str = ""


RuntimeEvent = CommandEvent | WakeSignalEvent | TimerExpiredEvent | ShutdownEvent


class EventPublisher(Protocol):
    """Protocol for publishing runtime events."""

    def publish(self, event: RuntimeEvent) -> None: ...


class QueueEventPublisher:
    """Event publisher that pushes events to a queue."""

    def __init__(self, queue: Queue):
        self._queue = queue

    def publish(self, event: RuntimeEvent) -> None:
        self._queue.put(event)

    def publish_timer_expiry(self, callback: Callable[[], None]) -> None:
        self._queue.put(TimerExpiredEvent(callback=callback))
