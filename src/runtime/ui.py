from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from breaks import BreakSnapshot
from contracts.ui_protocol import (
    EVENT_BREAK_ENDED,
    EVENT_BREAK_STARTED,
    EVENT_ERROR,
    EVENT_SCHEDULE,
)

from .messages import schedule_label


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(
        self,
        ui_server: Optional[UIServerLike],
        logger: Optional[logging.Logger] = None,
    ):
        self._ui_server = ui_server
        self._logger = logger or logging.getLogger("runtime")

    def publish(self, event_type: str, **payload: Any) -> None:
        if not self._ui_server:
            return
        try:
            self._ui_server.publish(event_type, **payload)
        except Exception as error:
            self._logger.error("Failed to publish %s: %s", event_type, error, exc_info=True)

    def publish_schedule_update(
        self,
        snapshot: BreakSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            "phase": snapshot.phase,
            "remaining_seconds": snapshot.remaining_seconds,
            "interval_seconds": snapshot.interval_seconds,
            "break_duration_seconds": snapshot.break_duration_seconds,
            "paused_indefinitely": snapshot.paused_indefinitely,
            "label": schedule_label(snapshot),
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if message:
            payload["message"] = message
        self.publish(EVENT_SCHEDULE, **payload)

    def publish_error(self, message: str) -> None:
        self.publish(EVENT_ERROR, message=message)


class RuntimeBreakListener:
    """Adapts scheduler break events into websocket UI events."""

    def __init__(self, ui: RuntimeUIPublisher):
        self._ui = ui

    def break_started(self, duration_seconds: int) -> None:
        self._ui.publish(EVENT_BREAK_STARTED, duration_seconds=duration_seconds)

    def break_ended(self) -> None:
        self._ui.publish(EVENT_BREAK_ENDED)
