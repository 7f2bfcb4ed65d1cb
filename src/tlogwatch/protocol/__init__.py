from .enums import ErrorCode, UpdateStatus, UpdatePhase, ConsistencyOutcome
from .errors import (
    TlogwatchError,
    StateStoreError,
    StateReadError,
    StateDecodeError,
    PersistError,
    FetchError,
    ResponseDecodeError,
    HeadVerificationError,
    InvalidKey,
    InvalidSignature,
    InvalidLogRoot,
    ConsistencyViolation,
    RollbackDetected,
)
from .models import (
    HASH_SIZE,
    TreeState,
    SignedTreeHead,
    ConsistencyProof,
    SignedLogRoot,
    LatestResponse,
)
from .logroot import LogRootV1

__all__ = [
    "ErrorCode",
    "UpdateStatus",
    "UpdatePhase",
    "ConsistencyOutcome",
    "TlogwatchError",
    "StateStoreError",
    "StateReadError",
    "StateDecodeError",
    "PersistError",
    "FetchError",
    "ResponseDecodeError",
    "HeadVerificationError",
    "InvalidKey",
    "InvalidSignature",
    "InvalidLogRoot",
    "ConsistencyViolation",
    "RollbackDetected",
    "HASH_SIZE",
    "TreeState",
    "SignedTreeHead",
    "ConsistencyProof",
    "SignedLogRoot",
    "LatestResponse",
    "LogRootV1",
]
