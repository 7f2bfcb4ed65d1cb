"""
Durable record of the last trusted tree state.
"""

from .store import (
    StateStore,
    default_state_path,
    encode_state,
    decode_state,
)

__all__ = [
    "StateStore",
    "default_state_path",
    "encode_state",
    "decode_state",
]
