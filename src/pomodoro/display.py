"""Label text shown to presentation collaborators (menu bar, web UI)."""

from __future__ import annotations

from .constants import MODE_LONG_BREAK, MODE_SHORT_BREAK

_MODE_PREFIXES = {
    MODE_SHORT_BREAK: "Break ",
    MODE_LONG_BREAK: "Long Break ",
}


def format_remaining(remaining_seconds: int) -> str:
    """Render whole minutes above the final minute, seconds inside it."""
    remaining = max(0, int(remaining_seconds))
    if remaining > 59:
        return f"{remaining // 60}m"
    return f"{remaining}s"


def format_display(
    mode: str,
    remaining_seconds: int,
    running: bool,
    idle_auto_paused: bool,
) -> str:
    if not running:
        prefix = "Idle " if idle_auto_paused else "Paused "
    else:
        prefix = _MODE_PREFIXES.get(mode, "")
    return prefix + format_remaining(remaining_seconds)
