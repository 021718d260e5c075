"""Thread-safe in-memory focus/break session state machine."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from .constants import (
    ABOUT_TO_END_SECONDS,
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
    BREAK_MODES,
    DEFAULT_FOCUS_SECONDS,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_SESSIONS_UNTIL_LONG_BREAK,
    DEFAULT_SHORT_BREAK_SECONDS,
    MODE_FOCUS,
    MODE_LONG_BREAK,
    MODE_SHORT_BREAK,
    PAUSE_IDLE,
    PAUSE_USER,
    REASON_ALREADY_RUNNING,
    REASON_BREAK_STARTED,
    REASON_IDLE,
    REASON_INVALID_MINUTES,
    REASON_NOT_IN_FOCUS,
    REASON_NOT_ON_BREAK,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_SKIPPED,
    REASON_STARTED,
    REASON_TIME_ADDED,
    REASON_UPDATED,
)
from .display import format_display
from .events import SessionEventBus, SessionListener

SessionMode = Literal["focus", "short_break", "long_break"]
PauseReason = Literal["user", "idle"]

_Pending = list[tuple[Callable[[Any], None], Any]]


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the session state handed to collaborators."""
    mode: SessionMode
    remaining_seconds: int
    running: bool
    idle_auto_paused: bool
    completed_focus_sessions: int
    focus_duration_seconds: int
    short_break_duration_seconds: int
    long_break_duration_seconds: int
    sessions_until_long_break: int

    @property
    def is_break(self) -> bool:
        return self.mode in BREAK_MODES

    @property
    def display_text(self) -> str:
        return format_display(
            self.mode,
            self.remaining_seconds,
            self.running,
            self.idle_auto_paused,
        )


@dataclass(frozen=True)
class SessionActionResult:
    """Result envelope returned after applying a command to the session."""
    action: str
    accepted: bool
    reason: str
    snapshot: SessionSnapshot


@dataclass(frozen=True)
class SessionTick:
    """Outcome of a single countdown step."""
    snapshot: SessionSnapshot
    transitioned: bool = False


class SessionTimer:
    """Tick-driven focus/short-break/long-break state machine.

    Time only advances through ``tick()``; the caller owns the clock. All
    mutation happens under an internal lock and notifications are delivered
    to subscribers after the lock is released, so listeners may query the
    timer freely.
    """

    def __init__(
        self,
        *,
        focus_duration_seconds: int = DEFAULT_FOCUS_SECONDS,
        short_break_duration_seconds: int = DEFAULT_SHORT_BREAK_SECONDS,
        long_break_duration_seconds: int = DEFAULT_LONG_BREAK_SECONDS,
        sessions_until_long_break: int = DEFAULT_SESSIONS_UNTIL_LONG_BREAK,
        events: Optional[SessionEventBus] = None,
        logger: Optional[logging.Logger] = None,
    ):
        for name, value in (
            ("focus_duration_seconds", focus_duration_seconds),
            ("short_break_duration_seconds", short_break_duration_seconds),
            ("long_break_duration_seconds", long_break_duration_seconds),
        ):
            if value <= 0:
                raise ValueError(f"{name} must be greater than zero")

        self._logger = logger or logging.getLogger("pomodoro")
        self._events = events or SessionEventBus()
        self._lock = threading.Lock()

        self._durations: dict[str, int] = {
            MODE_FOCUS: int(focus_duration_seconds),
            MODE_SHORT_BREAK: int(short_break_duration_seconds),
            MODE_LONG_BREAK: int(long_break_duration_seconds),
        }
        self._sessions_until_long_break = max(1, int(sessions_until_long_break))

        self._mode: SessionMode = MODE_FOCUS
        self._remaining = self._durations[MODE_FOCUS]
        self._running = False
        self._idle_auto_paused = False
        self._completed_focus_sessions = 0
        self._about_to_end_fired = False

    @property
    def events(self) -> SessionEventBus:
        return self._events

    def subscribe(self, listener: SessionListener) -> None:
        self._events.subscribe(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        self._events.unsubscribe(listener)

    # Queries

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def current_mode(self) -> SessionMode:
        with self._lock:
            return self._mode

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def remaining_seconds(self) -> int:
        with self._lock:
            return self._remaining

    def display_text(self) -> str:
        return self.snapshot().display_text

    # Countdown

    def tick(self) -> Optional[SessionTick]:
        """Advance the countdown by one second; ``None`` while stopped."""
        pending: _Pending = []
        with self._lock:
            if not self._running:
                return None

            transitioned = False
            if self._remaining > 0:
                self._remaining -= 1
                if (
                    self._mode == MODE_FOCUS
                    and self._remaining == ABOUT_TO_END_SECONDS
                    and not self._about_to_end_fired
                ):
                    self._about_to_end_fired = True
                    self._logger.info("Focus session about to end: remaining=%ss", self._remaining)
                    pending.append((self._events.about_to_end, self._snapshot_locked()))
            else:
                transitioned = True
                if self._mode == MODE_FOCUS:
                    self._complete_focus_locked(pending)
                else:
                    self._logger.info("Break finished: mode=%s", self._mode)
                    self._enter_focus_locked()

            self._queue_display_locked(pending)
            tick = SessionTick(snapshot=self._snapshot_locked(), transitioned=transitioned)

        self._notify(pending)
        return tick

    # Commands

    def start(self) -> SessionActionResult:
        pending: _Pending = []
        with self._lock:
            if self._running:
                return self._result_locked(ACTION_START, False, REASON_ALREADY_RUNNING)

            self._running = True
            self._idle_auto_paused = False
            self._logger.info(
                "Session started: mode=%s remaining=%ss",
                self._mode,
                self._remaining,
            )
            self._queue_display_locked(pending)
            result = self._result_locked(ACTION_START, True, REASON_STARTED)

        self._notify(pending)
        return result

    def pause(self, reason: PauseReason = PAUSE_USER) -> SessionActionResult:
        if reason not in (PAUSE_USER, PAUSE_IDLE):
            raise ValueError(f"Unknown pause reason: {reason!r}")

        pending: _Pending = []
        with self._lock:
            if self._running:
                self._running = False
                self._idle_auto_paused = reason == PAUSE_IDLE
            elif reason == PAUSE_USER and self._idle_auto_paused:
                # An explicit pause takes over an idle pause so it is never auto-resumed.
                self._idle_auto_paused = False
            else:
                return self._result_locked(ACTION_PAUSE, False, REASON_NOT_RUNNING)

            self._logger.info(
                "Session paused: reason=%s mode=%s remaining=%ss",
                reason,
                self._mode,
                self._remaining,
            )
            self._queue_display_locked(pending)
            result_reason = REASON_IDLE if reason == PAUSE_IDLE else REASON_PAUSED
            result = self._result_locked(ACTION_PAUSE, True, result_reason)

        self._notify(pending)
        return result

    def reset(self) -> SessionActionResult:
        pending: _Pending = []
        with self._lock:
            self._running = False
            self._idle_auto_paused = False
            self._completed_focus_sessions = 0
            self._enter_focus_locked()
            self._logger.info("Session reset: remaining=%ss", self._remaining)
            self._queue_display_locked(pending)
            result = self._result_locked(ACTION_RESET, True, REASON_RESET)

        self._notify(pending)
        return result

    def skip_break(self) -> SessionActionResult:
        pending: _Pending = []
        with self._lock:
            if self._mode not in BREAK_MODES:
                return self._result_locked(ACTION_SKIP_BREAK, False, REASON_NOT_ON_BREAK)

            self._logger.info("Break skipped: mode=%s remaining=%ss", self._mode, self._remaining)
            self._running = False
            self._idle_auto_paused = False
            self._enter_focus_locked()
            self._queue_display_locked(pending)
            result = self._result_locked(ACTION_SKIP_BREAK, True, REASON_SKIPPED)

        self._notify(pending)
        return result

    def start_break(self) -> SessionActionResult:
        """End the current focus session early and begin the earned break."""
        pending: _Pending = []
        with self._lock:
            if self._mode != MODE_FOCUS:
                return self._result_locked(ACTION_START_BREAK, False, REASON_NOT_IN_FOCUS)

            self._complete_focus_locked(pending)
            self._running = True
            self._idle_auto_paused = False
            self._queue_display_locked(pending)
            result = self._result_locked(ACTION_START_BREAK, True, REASON_BREAK_STARTED)

        self._notify(pending)
        return result

    def add_time(self, minutes: int) -> SessionActionResult:
        pending: _Pending = []
        with self._lock:
            minutes = int(minutes)
            if minutes <= 0:
                return self._result_locked(ACTION_ADD_TIME, False, REASON_INVALID_MINUTES)

            self._remaining += minutes * 60
            self._logger.info(
                "Time added: minutes=%s mode=%s remaining=%ss",
                minutes,
                self._mode,
                self._remaining,
            )
            self._queue_display_locked(pending)
            result = self._result_locked(ACTION_ADD_TIME, True, REASON_TIME_ADDED)

        self._notify(pending)
        return result

    def set_focus_duration(self, minutes: int) -> SessionActionResult:
        return self._set_duration(ACTION_SET_FOCUS_DURATION, MODE_FOCUS, minutes)

    def set_short_break_duration(self, minutes: int) -> SessionActionResult:
        return self._set_duration(ACTION_SET_SHORT_BREAK_DURATION, MODE_SHORT_BREAK, minutes)

    def set_long_break_duration(self, minutes: int) -> SessionActionResult:
        return self._set_duration(ACTION_SET_LONG_BREAK_DURATION, MODE_LONG_BREAK, minutes)

    def set_sessions_until_long_break(self, sessions: int) -> SessionActionResult:
        with self._lock:
            self._sessions_until_long_break = max(1, int(sessions))
            self._logger.info(
                "Sessions until long break updated: %s",
                self._sessions_until_long_break,
            )
            return self._result_locked(
                ACTION_SET_SESSIONS_UNTIL_LONG_BREAK,
                True,
                REASON_UPDATED,
            )

    def _set_duration(self, action: str, mode: SessionMode, minutes: int) -> SessionActionResult:
        pending: _Pending = []
        with self._lock:
            seconds = max(1, int(minutes)) * 60
            self._durations[mode] = seconds
            # Changing the active mode's duration snaps the countdown to it.
            if self._mode == mode:
                self._remaining = seconds
                self._queue_display_locked(pending)
            self._logger.info("Duration updated: mode=%s seconds=%s", mode, seconds)
            result = self._result_locked(action, True, REASON_UPDATED)

        self._notify(pending)
        return result

    def _complete_focus_locked(self, pending: _Pending) -> None:
        self._completed_focus_sessions += 1
        self._remaining = 0
        pending.append((self._events.session_complete, self._snapshot_locked()))

        if self._completed_focus_sessions % self._sessions_until_long_break == 0:
            self._mode = MODE_LONG_BREAK
        else:
            self._mode = MODE_SHORT_BREAK
        self._remaining = self._durations[self._mode]
        self._logger.info(
            "Focus session completed: completed=%s next=%s duration=%ss",
            self._completed_focus_sessions,
            self._mode,
            self._remaining,
        )
        pending.append((self._events.break_started, self._snapshot_locked()))

    def _enter_focus_locked(self) -> None:
        self._mode = MODE_FOCUS
        self._remaining = self._durations[MODE_FOCUS]
        self._about_to_end_fired = False

    def _queue_display_locked(self, pending: _Pending) -> None:
        text = format_display(
            self._mode,
            self._remaining,
            self._running,
            self._idle_auto_paused,
        )
        self._logger.debug("Display updated: %s", text)
        pending.append((self._events.display_update, text))

    def _notify(self, pending: _Pending) -> None:
        for emit, argument in pending:
            emit(argument)

    def _result_locked(self, action: str, accepted: bool, reason: str) -> SessionActionResult:
        return SessionActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self._snapshot_locked(),
        )

    def _snapshot_locked(self) -> SessionSnapshot:
        return SessionSnapshot(
            mode=self._mode,
            remaining_seconds=self._remaining,
            running=self._running,
            idle_auto_paused=self._idle_auto_paused,
            completed_focus_sessions=self._completed_focus_sessions,
            focus_duration_seconds=self._durations[MODE_FOCUS],
            short_break_duration_seconds=self._durations[MODE_SHORT_BREAK],
            long_break_duration_seconds=self._durations[MODE_LONG_BREAK],
            sessions_until_long_break=self._sessions_until_long_break,
        )
