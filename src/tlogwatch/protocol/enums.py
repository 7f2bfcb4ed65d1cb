from enum import Enum


class ErrorCode(str, Enum):
    STATE_READ_ERROR = "state_read_error"
    STATE_DECODE_ERROR = "state_decode_error"
    PERSIST_ERROR = "persist_error"
    FETCH_ERROR = "fetch_error"
    RESPONSE_DECODE_ERROR = "response_decode_error"
    INVALID_KEY = "invalid_key"
    INVALID_SIGNATURE = "invalid_signature"
    INVALID_LOG_ROOT = "invalid_log_root"
    CONSISTENCY_VIOLATION = "consistency_violation"
    ROLLBACK_DETECTED = "rollback_detected"
    INTERNAL_ERROR = "internal_error"


class UpdateStatus(str, Enum):
    """Terminal outcome of a single update run."""

    BOOTSTRAPPED = "bootstrapped"
    UNCHANGED = "unchanged"
    EXTENDED = "extended"
    VIOLATION = "violation"
    ABORTED = "aborted"


class UpdatePhase(str, Enum):
    """States an update run passes through."""

    BOOTSTRAP = "bootstrap"
    VERIFIED = "verified"
    UNCHANGED = "unchanged"
    EXTENDED = "extended"
    VIOLATED = "violated"
    PERSISTED = "persisted"
    ABORTED = "aborted"


class ConsistencyOutcome(str, Enum):
    UNCHANGED = "unchanged"
    EXTENDED = "extended"
