"""Runtime engine exports."""

from .commands import CommandError, SessionCommandDispatcher, parse_command
from .loop import RuntimeBootstrap, RuntimeEngine
from .scheduler import PeriodicTrigger, SessionScheduler

__all__ = [
    "CommandError",
    "PeriodicTrigger",
    "RuntimeBootstrap",
    "RuntimeEngine",
    "SessionCommandDispatcher",
    "SessionScheduler",
    "parse_command",
]
