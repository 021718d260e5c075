"""Keyboard and pointer listeners that report user activity."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

from .errors import ActivityDependencyError, ActivityMonitorError

DEFAULT_MIN_REPORT_INTERVAL_SECONDS = 1.0


class ActivityMonitor:
    """Forwards global input events to ``on_activity``, at most once per interval.

    Pointer moves arrive at a very high rate; throttling keeps the scheduler
    queue from filling with redundant activity reports.
    """

    def __init__(
        self,
        on_activity: Callable[[], Any],
        *,
        min_report_interval_seconds: float = DEFAULT_MIN_REPORT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        if min_report_interval_seconds < 0:
            raise ValueError("min_report_interval_seconds must not be negative")

        self._on_activity = on_activity
        self._min_report_interval = float(min_report_interval_seconds)
        self._clock = clock
        self._logger = logger or logging.getLogger("activity")
        self._lock = threading.Lock()
        self._last_report: Optional[float] = None
        self._keyboard_listener: Any = None
        self._mouse_listener: Any = None

    @property
    def is_running(self) -> bool:
        return self._keyboard_listener is not None or self._mouse_listener is not None

    def start(self) -> None:
        if self.is_running:
            self._logger.warning("Activity monitor is already running")
            return

        keyboard, mouse = self._load_backend()
        try:
            self._keyboard_listener = keyboard.Listener(on_press=self._on_key_press)
            self._mouse_listener = mouse.Listener(
                on_move=self._on_mouse_move,
                on_click=self._on_mouse_click,
                on_scroll=self._on_mouse_scroll,
            )
            self._keyboard_listener.start()
            self._mouse_listener.start()
        except Exception as error:  # pragma: no cover - depends on desktop session
            self.stop()
            raise ActivityMonitorError(f"Failed to start input listeners: {error}") from error

        self._logger.info("Activity monitor started")

    def stop(self) -> None:
        for listener in (self._keyboard_listener, self._mouse_listener):
            if listener is None:
                continue
            try:
                listener.stop()
            except Exception as error:  # pragma: no cover - depends on desktop session
                self._logger.error("Error stopping input listener: %s", error, exc_info=True)
        self._keyboard_listener = None
        self._mouse_listener = None

    def record_input(self) -> bool:
        """Report one input event; returns True when it was forwarded."""
        now = self._clock()
        with self._lock:
            if (
                self._last_report is not None
                and now - self._last_report < self._min_report_interval
            ):
                return False
            self._last_report = now

        try:
            self._on_activity()
        except Exception as error:
            self._logger.error("Activity callback failed: %s", error, exc_info=True)
            return False
        return True

    def _on_key_press(self, key) -> None:
        del key
        self.record_input()

    def _on_mouse_move(self, x, y) -> None:
        del x, y
        self.record_input()

    def _on_mouse_click(self, x, y, button, pressed) -> None:
        del x, y, button
        if pressed:
            self.record_input()

    def _on_mouse_scroll(self, x, y, dx, dy) -> None:
        del x, y, dx, dy
        self.record_input()

    @staticmethod
    def _load_backend():
        try:
            from pynput import keyboard, mouse
        except ImportError as error:  # pragma: no cover - depends on desktop session
            raise ActivityDependencyError(
                "pynput input listeners are unavailable "
                f"({error}). A desktop session (X11, Wayland with XWayland, "
                "macOS accessibility access, or Windows) is required."
            ) from error
        return keyboard, mouse
