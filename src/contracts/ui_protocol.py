"""Web UI websocket event and message constants."""

from __future__ import annotations

# Websocket event types (server -> client)
EVENT_HELLO = "hello"
EVENT_DISPLAY = "display"
EVENT_BREAK_STARTED = "break_started"
EVENT_ABOUT_TO_END = "about_to_end"
EVENT_SESSION_COMPLETE = "session_complete"
EVENT_COMMAND_RESULT = "command_result"
EVENT_ERROR = "error"

# Websocket message types (client -> server)
MESSAGE_COMMAND = "command"
MESSAGE_ACTIVITY = "activity"

# Latest event of each sticky type is replayed to newly connected clients.
STICKY_EVENT_TYPES: frozenset[str] = frozenset({EVENT_DISPLAY, EVENT_COMMAND_RESULT})

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_COMMAND_RESULT,
    EVENT_DISPLAY,
)
