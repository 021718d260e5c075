from .errors import ActivityDependencyError, ActivityMonitorError
from .monitor import DEFAULT_MIN_REPORT_INTERVAL_SECONDS, ActivityMonitor

__all__ = [
    "DEFAULT_MIN_REPORT_INTERVAL_SECONDS",
    "ActivityDependencyError",
    "ActivityMonitor",
    "ActivityMonitorError",
]
