from .display import format_display, format_remaining
from .events import SessionEventBus, SessionListener
from .service import (
    PauseReason,
    SessionActionResult,
    SessionMode,
    SessionSnapshot,
    SessionTick,
    SessionTimer,
)
from .watchdog import InactivityWatchdog

__all__ = [
    "InactivityWatchdog",
    "PauseReason",
    "SessionActionResult",
    "SessionEventBus",
    "SessionListener",
    "SessionMode",
    "SessionSnapshot",
    "SessionTick",
    "SessionTimer",
    "format_display",
    "format_remaining",
]
