"""Notification and rejection text builders for session events."""

from __future__ import annotations

from pomodoro import SessionSnapshot, format_remaining
from pomodoro.constants import (
    ACTION_ADD_TIME,
    ACTION_PAUSE,
    ACTION_START,
    ACTION_START_BREAK,
    ACTION_SKIP_BREAK,
    MODE_LONG_BREAK,
    REASON_ALREADY_RUNNING,
    REASON_INVALID_MINUTES,
    REASON_NOT_IN_FOCUS,
    REASON_NOT_ON_BREAK,
    REASON_NOT_RUNNING,
)


def about_to_end_text(snapshot: SessionSnapshot) -> str:
    return f"Session is ending in {snapshot.remaining_seconds}s"


def break_started_text(snapshot: SessionSnapshot) -> str:
    length = format_remaining(snapshot.remaining_seconds)
    if snapshot.mode == MODE_LONG_BREAK:
        return f"Take a long break, you deserve it ({length})"
    return f"Take a break, you deserve it ({length})"


def session_complete_text(snapshot: SessionSnapshot) -> str:
    count = snapshot.completed_focus_sessions
    noun = "session" if count == 1 else "sessions"
    return f"Focus session complete ({count} {noun} done)"


def command_rejection_text(action: str, reason: str) -> str:
    """Return user-facing text for a rejected command."""
    if reason == REASON_ALREADY_RUNNING and action == ACTION_START:
        return "The timer is already running."
    if reason == REASON_NOT_RUNNING and action == ACTION_PAUSE:
        return "The timer is not running."
    if reason == REASON_NOT_ON_BREAK and action == ACTION_SKIP_BREAK:
        return "There is no break to skip."
    if reason == REASON_NOT_IN_FOCUS and action == ACTION_START_BREAK:
        return "A break is already in progress."
    if reason == REASON_INVALID_MINUTES and action == ACTION_ADD_TIME:
        return "Added time must be at least one minute."
    return "That action is not possible right now."
