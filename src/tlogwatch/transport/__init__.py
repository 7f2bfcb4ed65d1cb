from .base import LogClient
from .http import HTTPLogClient, DEFAULT_TIMEOUT

__all__ = ["LogClient", "HTTPLogClient", "DEFAULT_TIMEOUT"]
