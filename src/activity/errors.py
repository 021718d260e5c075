class ActivityMonitorError(Exception):
    """Base exception for input activity detection."""


class ActivityDependencyError(ActivityMonitorError):
    """Raised when the input listener backend cannot be loaded on this host."""
