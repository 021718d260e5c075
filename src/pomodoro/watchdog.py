"""Inactivity watchdog that idle-pauses and auto-resumes a session."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .constants import DEFAULT_INACTIVITY_THRESHOLD_SECONDS, PAUSE_IDLE
from .service import SessionTimer


class InactivityWatchdog:
    """Pauses a running session after a stretch without user input.

    Only pauses the watchdog itself caused are resumed on activity; a pause
    requested by the user stays in place until the user starts again.
    """

    def __init__(
        self,
        timer: SessionTimer,
        *,
        threshold_seconds: float = DEFAULT_INACTIVITY_THRESHOLD_SECONDS,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        if threshold_seconds <= 0:
            raise ValueError("threshold_seconds must be greater than zero")

        self._timer = timer
        self._threshold_seconds = float(threshold_seconds)
        self._enabled = enabled
        self._clock = clock
        self._logger = logger or logging.getLogger("watchdog")
        self._last_activity = clock()

    @property
    def last_activity(self) -> float:
        return self._last_activity

    @property
    def threshold_seconds(self) -> float:
        return self._threshold_seconds

    @property
    def enabled(self) -> bool:
        return self._enabled

    def idle_seconds(self) -> float:
        return max(0.0, self._clock() - self._last_activity)

    def check(self) -> bool:
        """Run one watchdog cadence step; returns True when it idle-paused."""
        if not self._enabled or not self._timer.is_running():
            return False

        idle_for = self.idle_seconds()
        if idle_for < self._threshold_seconds:
            return False

        result = self._timer.pause(reason=PAUSE_IDLE)
        if result.accepted:
            self._logger.info("No activity for %.0fs, session idle-paused", idle_for)
        return result.accepted

    def touch(self) -> None:
        """Record activity without resuming an idle-paused session."""
        self._last_activity = self._clock()

    def report_activity(self) -> bool:
        """Record activity and resume an idle-paused session; True if resumed."""
        self._last_activity = self._clock()
        if not self._enabled:
            return False

        snapshot = self._timer.snapshot()
        if snapshot.running or not snapshot.idle_auto_paused:
            return False
        if snapshot.remaining_seconds <= 0:
            return False

        result = self._timer.start()
        if result.accepted:
            self._logger.info(
                "Activity detected, session resumed: remaining=%ss",
                result.snapshot.remaining_seconds,
            )
        return result.accepted
