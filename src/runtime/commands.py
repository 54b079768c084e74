"""Parsing and dispatch of UI commands against the break scheduler."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from breaks import BreakActionResult, BreakScheduler
from contracts.commands import (
    COMMAND_END_BREAK_NOW,
    COMMAND_EXTEND,
    COMMAND_NAMES,
    COMMAND_PAUSE_FOR,
    COMMAND_PAUSE_UNTIL_RESUME,
    COMMAND_SKIP_NEXT_BREAK,
    COMMAND_START,
    COMMAND_STATUS,
    COMMAND_TAKE_BREAK_NOW,
    COMMANDS_WITH_SECONDS,
    MAX_COMMAND_SECONDS,
)
from contracts.ui_protocol import MESSAGE_COMMAND

from .events import CommandEvent
from .messages import rejection_text
from .ui import RuntimeUIPublisher


class CommandError(Exception):
    """Raised when a UI command message is malformed."""


def parse_command_message(message: Mapping[str, Any]) -> CommandEvent:
    """Validate a decoded client message into a `CommandEvent`."""
    if message.get("type") != MESSAGE_COMMAND:
        raise CommandError(f"Unsupported message type: {message.get('type')!r}")

    name = message.get("command")
    if not isinstance(name, str) or name.strip() not in COMMAND_NAMES:
        raise CommandError(f"Unknown command: {name!r}")
    name = name.strip()

    if name not in COMMANDS_WITH_SECONDS:
        return CommandEvent(name=name)

    return CommandEvent(name=name, seconds=parse_seconds(message.get("seconds"), name))


def parse_seconds(value: Any, command: str) -> int:
    if isinstance(value, bool):
        raise CommandError(f"{command} requires an integer 'seconds' value")
    if isinstance(value, float) and not math.isfinite(value):
        raise CommandError(f"{command} requires a finite 'seconds' value")
    if isinstance(value, (int, float)):
        seconds = int(value)
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        seconds = int(value.strip())
    else:
        raise CommandError(f"{command} requires an integer 'seconds' value")
    if seconds <= 0:
        raise CommandError(f"{command} requires 'seconds' greater than zero")
    if seconds > MAX_COMMAND_SECONDS:
        raise CommandError(
            f"{command} accepts at most {MAX_COMMAND_SECONDS} seconds, got: {seconds}"
        )
    return seconds


class RuntimeCommandDispatcher:
    """Routes command events to scheduler operations and publishes the outcome."""
    def __init__(
        self,
        *,
        scheduler: BreakScheduler,
        ui: RuntimeUIPublisher,
        logger: logging.Logger,
    ):
        self._scheduler = scheduler
        self._ui = ui
        self._logger = logger

    def dispatch(self, command: CommandEvent) -> BreakActionResult | None:
        if command.name == COMMAND_STATUS:
            self._ui.publish_schedule_update(
                self._scheduler.snapshot(),
                action=COMMAND_STATUS,
            )
            return None

        result = self._apply(command)
        if result is None:
            self._logger.warning("Unsupported command: %s", command.name)
            return None

        self._logger.info(
            "Command %s: accepted=%s reason=%s",
            command.name,
            result.accepted,
            result.reason,
        )
        self._ui.publish_schedule_update(
            result.snapshot,
            action=result.action,
            accepted=result.accepted,
            reason=result.reason,
            message=None if result.accepted else rejection_text(result.action, result.reason),
        )
        return result

    def _apply(self, command: CommandEvent) -> BreakActionResult | None:
        scheduler = self._scheduler
        if command.name == COMMAND_START:
            return scheduler.start()
        if command.name == COMMAND_TAKE_BREAK_NOW:
            return scheduler.take_break_now()
        if command.name == COMMAND_SKIP_NEXT_BREAK:
            return scheduler.skip_next_break()
        if command.name == COMMAND_EXTEND:
            return scheduler.extend(command.seconds or 0)
        if command.name == COMMAND_PAUSE_FOR:
            return scheduler.pause_for(command.seconds or 0)
        if command.name == COMMAND_PAUSE_UNTIL_RESUME:
            return scheduler.pause_until_resume()
        if command.name == COMMAND_END_BREAK_NOW:
            return scheduler.end_break_now()
        return None
