from .protocol import (
    TreeState,
    SignedTreeHead,
    ConsistencyProof,
    UpdateStatus,
    TlogwatchError,
)
from .merkle import ConsistencyVerifier, RFC6962Hasher, verify_consistency
from .security import SignedHeadVerifier
from .state import StateStore
from .transport import LogClient, HTTPLogClient
from .core.monitor import TreeMonitor, UpdateResult

__version__ = "0.1.0"

__all__ = [
    "TreeState",
    "SignedTreeHead",
    "ConsistencyProof",
    "UpdateStatus",
    "TlogwatchError",
    "ConsistencyVerifier",
    "RFC6962Hasher",
    "verify_consistency",
    "SignedHeadVerifier",
    "StateStore",
    "LogClient",
    "HTTPLogClient",
    "TreeMonitor",
    "UpdateResult",
]
