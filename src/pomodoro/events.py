"""Outbound notification port for session lifecycle and display changes."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .service import SessionSnapshot


class SessionListener:
    """Base subscriber; override only the notifications you care about."""

    def on_display_update(self, text: str) -> None:
        pass

    def on_break_started(self, snapshot: "SessionSnapshot") -> None:
        pass

    def on_about_to_end(self, snapshot: "SessionSnapshot") -> None:
        pass

    def on_session_complete(self, snapshot: "SessionSnapshot") -> None:
        pass


class SessionEventBus:
    """Ordered subscriber list; one failing listener never blocks the others."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("pomodoro.events")
        self._listeners: list[SessionListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: SessionListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def display_update(self, text: str) -> None:
        self._dispatch("on_display_update", text)

    def break_started(self, snapshot: "SessionSnapshot") -> None:
        self._dispatch("on_break_started", snapshot)

    def about_to_end(self, snapshot: "SessionSnapshot") -> None:
        self._dispatch("on_about_to_end", snapshot)

    def session_complete(self, snapshot: "SessionSnapshot") -> None:
        self._dispatch("on_session_complete", snapshot)

    def _dispatch(self, method_name: str, argument: object) -> None:
        with self._lock:
            listeners = tuple(self._listeners)

        for listener in listeners:
            try:
                getattr(listener, method_name)(argument)
            except Exception as error:
                self._logger.error(
                    "Session listener %s.%s failed: %s",
                    type(listener).__name__,
                    method_name,
                    error,
                    exc_info=True,
                )
