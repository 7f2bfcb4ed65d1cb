from .json import json_dumps, json_loads
from .encoding import b64encode, b64decode
from .logging import configure_logging

__all__ = [
    "json_dumps",
    "json_loads",
    "b64encode",
    "b64decode",
    "configure_logging",
]
