"""Dispatcher that applies named commands from UI collaborators to the session."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from contracts.command_contract import (
    COMMAND_INTEGER_ARGUMENT,
    COMMAND_NAMES,
)
from pomodoro import InactivityWatchdog, SessionActionResult, SessionTimer
from pomodoro.constants import (
    ACTION_ADD_TIME,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_SET_FOCUS_DURATION,
    ACTION_SET_LONG_BREAK_DURATION,
    ACTION_SET_SESSIONS_UNTIL_LONG_BREAK,
    ACTION_SET_SHORT_BREAK_DURATION,
    ACTION_SKIP_BREAK,
    ACTION_START,
    ACTION_START_BREAK,
)


class CommandError(Exception):
    """Raised when an inbound command payload is malformed."""


def parse_command(payload: Mapping[str, Any]) -> tuple[str, Optional[int]]:
    """Validate a `{"command": name, ...}` payload into a name and argument."""
    raw_name = payload.get("command")
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    if name not in COMMAND_NAMES:
        raise CommandError(f"Unsupported command: {raw_name!r}")

    argument_name = COMMAND_INTEGER_ARGUMENT.get(name)
    if argument_name is None:
        return name, None
    return name, _as_int(payload.get(argument_name), f"{name}.{argument_name}")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise CommandError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise CommandError(f"{field} must be an integer.") from error
    raise CommandError(f"{field} must be an integer.")


class SessionCommandDispatcher:
    """Routes command names to the session timer's command API."""

    def __init__(
        self,
        *,
        timer: SessionTimer,
        watchdog: Optional[InactivityWatchdog] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._timer = timer
        self._watchdog = watchdog
        self._logger = logger or logging.getLogger("runtime.commands")
        self._handlers: dict[str, Callable[[Optional[int]], SessionActionResult]] = {
            ACTION_START: lambda _: timer.start(),
            ACTION_PAUSE: lambda _: timer.pause(),
            ACTION_RESET: lambda _: timer.reset(),
            ACTION_SKIP_BREAK: lambda _: timer.skip_break(),
            ACTION_START_BREAK: lambda _: timer.start_break(),
            ACTION_ADD_TIME: lambda value: timer.add_time(value or 0),
            ACTION_SET_FOCUS_DURATION: lambda value: timer.set_focus_duration(value or 0),
            ACTION_SET_SHORT_BREAK_DURATION: lambda value: timer.set_short_break_duration(
                value or 0
            ),
            ACTION_SET_LONG_BREAK_DURATION: lambda value: timer.set_long_break_duration(
                value or 0
            ),
            ACTION_SET_SESSIONS_UNTIL_LONG_BREAK: lambda value: (
                timer.set_sessions_until_long_break(value or 0)
            ),
        }

    def dispatch(self, payload: Mapping[str, Any]) -> SessionActionResult:
        """Parse and apply a raw command payload; raises CommandError if malformed."""
        command, argument = parse_command(payload)
        return self.apply(command, argument)

    def apply(self, command: str, argument: Optional[int] = None) -> SessionActionResult:
        handler = self._handlers.get(command)
        if handler is None:
            raise CommandError(f"Unsupported command: {command!r}")

        # A command is user input, but it must not trigger an idle auto-resume.
        if self._watchdog is not None:
            self._watchdog.touch()

        result = handler(argument)
        if result.accepted:
            self._logger.debug("Command applied: %s (%s)", command, result.reason)
        else:
            self._logger.info("Command rejected: %s (%s)", command, result.reason)
        return result
