from typing import Optional

from .enums import ErrorCode


class TlogwatchError(Exception):
    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or ErrorCode.INTERNAL_ERROR


# ---------------------------------------------------------------------------
# Persisted state
# ---------------------------------------------------------------------------

class StateStoreError(TlogwatchError):
    """Base class for persisted-state failures (never means "no state")."""


class StateReadError(StateStoreError):
    """Raised when the state file exists but cannot be read."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.STATE_READ_ERROR)


class StateDecodeError(StateStoreError):
    """Raised when the state file was read but its contents are corrupt."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.STATE_DECODE_ERROR)


class PersistError(StateStoreError):
    """Raised when a verified state could not be written."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PERSIST_ERROR)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class FetchError(TlogwatchError):
    """Raised when the log server cannot be reached or answers with an error."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.FETCH_ERROR)


class ResponseDecodeError(TlogwatchError):
    """Raised when the log server answer is not a well-formed latest response."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.RESPONSE_DECODE_ERROR)


# ---------------------------------------------------------------------------
# Head verification
# ---------------------------------------------------------------------------

class HeadVerificationError(TlogwatchError):
    """Base class for signed tree head failures."""


class InvalidKey(HeadVerificationError):
    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INVALID_KEY)


class InvalidSignature(HeadVerificationError):
    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INVALID_SIGNATURE)


class InvalidLogRoot(HeadVerificationError):
    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INVALID_LOG_ROOT)


# ---------------------------------------------------------------------------
# Append-only violations
# ---------------------------------------------------------------------------

class ConsistencyViolation(TlogwatchError):
    """Raised when the log cannot be proven to extend the trusted tree."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONSISTENCY_VIOLATION)


class RollbackDetected(TlogwatchError):
    """Raised when the log reports fewer entries than previously trusted."""

    def __init__(self, old_size: int, new_size: int):
        super().__init__(
            f"tree size went backwards: trusted {old_size}, log reports {new_size}",
            ErrorCode.ROLLBACK_DETECTED,
        )
        self.old_size = old_size
        self.new_size = new_size
