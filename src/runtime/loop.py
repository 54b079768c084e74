"""Runtime orchestration loop that serializes commands, wake signals, and timer expiry."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, Optional

from app_config import AppConfig
from breaks import BreakScheduler, ThreadingTimerBackend, TimerBackend
from breaks.constants import ACTION_SYNC, ACTION_WAKE, REASON_STARTUP
from server import UIServer

from .commands import CommandError, RuntimeCommandDispatcher, parse_command_message
from .events import (
    CommandEvent,
    QueueEventPublisher,
    ShutdownEvent,
    TimerExpiredEvent,
    WakeSignalEvent,
)
from .ui import RuntimeBreakListener, RuntimeUIPublisher
from .wake import SleepWakeDetector


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[[Callable[[str], None]], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    ui_server: Optional[UIServer]
    hooks: RuntimeHooks
    timer_backend: Optional[TimerBackend] = None
    clock: Optional[Callable[[], float]] = None


class RuntimeEngine:
    """Single consumer of the runtime queue; every scheduler transition runs here."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._config = bootstrap.app_config

        self._event_queue: Queue[Any] = Queue()
        self._publisher = QueueEventPublisher(self._event_queue)
        self._ui = RuntimeUIPublisher(bootstrap.ui_server, logger=self._logger)

        timer_backend = bootstrap.timer_backend or ThreadingTimerBackend(
            dispatch=self._publisher.publish_timer_expiry
        )
        self._scheduler = BreakScheduler(
            interval_seconds=self._config.scheduler.interval_seconds,
            break_duration_seconds=self._config.scheduler.break_duration_seconds,
            timer_backend=timer_backend,
            listener=RuntimeBreakListener(self._ui),
            clock=bootstrap.clock,
            logger=logging.getLogger("breaks"),
        )
        self._dispatcher = RuntimeCommandDispatcher(
            scheduler=self._scheduler,
            ui=self._ui,
            logger=self._logger,
        )

        wake_settings = self._config.wake_detection
        self._wake_detector: Optional[SleepWakeDetector] = None
        if wake_settings.enabled:
            self._wake_detector = SleepWakeDetector(
                publisher=self._publisher,
                poll_interval_seconds=wake_settings.poll_interval_seconds,
                gap_threshold_seconds=wake_settings.gap_threshold_seconds,
                logger=logging.getLogger("wake"),
            )

    @property
    def scheduler(self) -> BreakScheduler:
        return self._scheduler

    def submit(self, event: Any) -> None:
        """Thread-safe entry point for every inbound event."""
        self._publisher.publish(event)

    def request_shutdown(self, reason: str = "") -> None:
        self.submit(ShutdownEvent(reason=reason))

    def handle_client_message(self, message: dict[str, Any]) -> None:
        try:
            command = parse_command_message(message)
        except CommandError as error:
            self._logger.warning("Rejected UI message: %s", error)
            self._ui.publish_error(str(error))
            return
        self.submit(command)

    def run(self) -> int:
        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            ui_server.set_message_handler(self.handle_client_message)

        try:
            self._bootstrap.hooks.setup_signal_handlers(self.request_shutdown)

            if self._wake_detector is not None:
                self._wake_detector.start()

            if self._config.scheduler.autostart:
                self._scheduler.start()
            self._ui.publish_schedule_update(
                self._scheduler.snapshot(),
                action=ACTION_SYNC,
                accepted=True,
                reason=REASON_STARTUP,
            )
            self._logger.info("Ready! Next break in %ss", self._scheduler.time_remaining())

            while True:
                event = self._poll_event()
                if event is None:
                    continue
                event_exit = self.handle_event(event)
                if event_exit is not None:
                    return event_exit

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def drain(self) -> Optional[int]:
        """Handle every queued event without blocking."""
        while True:
            try:
                event = self._event_queue.get_nowait()
            except Empty:
                return None
            event_exit = self.handle_event(event)
            if event_exit is not None:
                return event_exit

    def handle_event(self, event: Any) -> Optional[int]:
        if isinstance(event, TimerExpiredEvent):
            event.callback()
            self._ui.publish_schedule_update(
                self._scheduler.snapshot(),
                action=ACTION_SYNC,
            )
            return None

        if isinstance(event, CommandEvent):
            self._dispatcher.dispatch(event)
            return None

        if isinstance(event, WakeSignalEvent):
            self._logger.info(
                "Wake signal at %s (gap=%.0fs)",
                event.occurred_at.isoformat(),
                event.gap_seconds,
            )
            result = self._scheduler.wake_signal()
            self._ui.publish_schedule_update(
                result.snapshot,
                action=ACTION_WAKE,
                accepted=result.accepted,
                reason=result.reason,
            )
            return None

        if isinstance(event, ShutdownEvent):
            self._logger.info("Shutdown requested%s", f": {event.reason}" if event.reason else "")
            return 0

        self._logger.warning("Ignoring unknown event type: %s", type(event).__name__)
        return None

    def _poll_event(self) -> Optional[Any]:
        try:
            return self._event_queue.get(timeout=0.25)
        except Empty:
            return None

    def _shutdown(self) -> None:
        if self._wake_detector is not None:
            self._logger.info("Stopping wake detector...")
            try:
                self._wake_detector.stop()
            except Exception as error:
                self._logger.error("Error stopping wake detector: %s", error, exc_info=True)

        self._scheduler.shutdown()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            ui_server.set_message_handler(None)
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
