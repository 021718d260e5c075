"""Canonical command names accepted from presentation collaborators."""

from __future__ import annotations

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

ARGUMENT_MINUTES = "minutes"
ARGUMENT_SESSIONS = "sessions"

COMMAND_NAME_ORDER: tuple[str, ...] = (
    ACTION_START,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_SKIP_BREAK,
    ACTION_START_BREAK,
    ACTION_ADD_TIME,
    ACTION_SET_FOCUS_DURATION,
    ACTION_SET_SHORT_BREAK_DURATION,
    ACTION_SET_LONG_BREAK_DURATION,
    ACTION_SET_SESSIONS_UNTIL_LONG_BREAK,
)

COMMAND_NAMES: frozenset[str] = frozenset(COMMAND_NAME_ORDER)

# Commands that require a single integer argument, keyed by argument name.
COMMAND_INTEGER_ARGUMENT: dict[str, str] = {
    ACTION_ADD_TIME: ARGUMENT_MINUTES,
    ACTION_SET_FOCUS_DURATION: ARGUMENT_MINUTES,
    ACTION_SET_SHORT_BREAK_DURATION: ARGUMENT_MINUTES,
    ACTION_SET_LONG_BREAK_DURATION: ARGUMENT_MINUTES,
    ACTION_SET_SESSIONS_UNTIL_LONG_BREAK: ARGUMENT_SESSIONS,
}

COMMANDS_WITHOUT_ARGUMENTS: frozenset[str] = COMMAND_NAMES - frozenset(
    COMMAND_INTEGER_ARGUMENT
)
