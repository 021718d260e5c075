"""Mode, action, and reason constants used by the session state machine."""

from __future__ import annotations

DEFAULT_FOCUS_SECONDS = 20 * 60
DEFAULT_SHORT_BREAK_SECONDS = 5 * 60
DEFAULT_LONG_BREAK_SECONDS = 15 * 60
DEFAULT_SESSIONS_UNTIL_LONG_BREAK = 4
DEFAULT_INACTIVITY_THRESHOLD_SECONDS = 60.0

ABOUT_TO_END_SECONDS = 59

MODE_FOCUS = "focus"
MODE_SHORT_BREAK = "short_break"
MODE_LONG_BREAK = "long_break"

BREAK_MODES: frozenset[str] = frozenset({MODE_SHORT_BREAK, MODE_LONG_BREAK})

PAUSE_USER = "user"
PAUSE_IDLE = "idle"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESET = "reset"
ACTION_SKIP_BREAK = "skip_break"
ACTION_START_BREAK = "start_break"
ACTION_ADD_TIME = "add_time"
ACTION_SET_FOCUS_DURATION = "set_focus_duration"
ACTION_SET_SHORT_BREAK_DURATION = "set_short_break_duration"
ACTION_SET_LONG_BREAK_DURATION = "set_long_break_duration"
ACTION_SET_SESSIONS_UNTIL_LONG_BREAK = "set_sessions_until_long_break"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_IDLE = "idle"
REASON_RESET = "reset"
REASON_SKIPPED = "skipped"
REASON_BREAK_STARTED = "break_started"
REASON_TIME_ADDED = "time_added"
REASON_UPDATED = "updated"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_ON_BREAK = "not_on_break"
REASON_NOT_IN_FOCUS = "not_in_focus"
REASON_INVALID_MINUTES = "invalid_minutes"
REASON_UNSUPPORTED_ACTION = "unsupported_action"
