from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from contracts.ui_protocol import (
    EVENT_ABOUT_TO_END,
    EVENT_BREAK_STARTED,
    EVENT_COMMAND_RESULT,
    EVENT_DISPLAY,
    EVENT_ERROR,
    EVENT_SESSION_COMPLETE,
)
from pomodoro import SessionActionResult, SessionListener, SessionSnapshot

from .messages import (
    about_to_end_text,
    break_started_text,
    command_rejection_text,
    session_complete_text,
)


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


def snapshot_payload(snapshot: SessionSnapshot) -> dict[str, Any]:
    return {
        "mode": snapshot.mode,
        "running": snapshot.running,
        "idle": snapshot.idle_auto_paused,
        "remaining_seconds": snapshot.remaining_seconds,
        "completed_focus_sessions": snapshot.completed_focus_sessions,
    }


class RuntimeUIPublisher(SessionListener):
    """Forwards session notifications to the websocket UI server."""

    def __init__(
        self,
        ui_server: Optional[UIServerLike],
        snapshot_fn: Callable[[], SessionSnapshot],
    ):
        self._ui_server = ui_server
        self._snapshot_fn = snapshot_fn

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def on_display_update(self, text: str) -> None:
        self.publish(EVENT_DISPLAY, text=text, **snapshot_payload(self._snapshot_fn()))

    def on_break_started(self, snapshot: SessionSnapshot) -> None:
        self.publish(
            EVENT_BREAK_STARTED,
            message=break_started_text(snapshot),
            **snapshot_payload(snapshot),
        )

    def on_about_to_end(self, snapshot: SessionSnapshot) -> None:
        self.publish(
            EVENT_ABOUT_TO_END,
            message=about_to_end_text(snapshot),
            **snapshot_payload(snapshot),
        )

    def on_session_complete(self, snapshot: SessionSnapshot) -> None:
        self.publish(
            EVENT_SESSION_COMPLETE,
            message=session_complete_text(snapshot),
            **snapshot_payload(snapshot),
        )

    def publish_display(self) -> None:
        snapshot = self._snapshot_fn()
        self.publish(EVENT_DISPLAY, text=snapshot.display_text, **snapshot_payload(snapshot))

    def publish_command_result(self, result: SessionActionResult) -> None:
        payload: dict[str, Any] = {
            "action": result.action,
            "accepted": result.accepted,
            "reason": result.reason,
            **snapshot_payload(result.snapshot),
        }
        if not result.accepted:
            payload["message"] = command_rejection_text(result.action, result.reason)
        self.publish(EVENT_COMMAND_RESULT, **payload)

    def publish_error(self, message: str) -> None:
        self.publish(EVENT_ERROR, message=message)
