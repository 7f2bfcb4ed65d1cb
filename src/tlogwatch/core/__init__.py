from .monitor import TreeMonitor, UpdateResult
from .settings import TlogwatchSettings, get_settings

__all__ = [
    "TreeMonitor",
    "UpdateResult",
    "TlogwatchSettings",
    "get_settings",
]
