"""
Merkle primitives for append-only log monitoring.

- RFC 6962 domain-separated hashing
- Consistency proof verification between two tree heads
"""

from tlogwatch.merkle.hasher import RFC6962Hasher, DEFAULT_HASHER
from tlogwatch.merkle.consistency import ConsistencyVerifier, verify_consistency

__all__ = [
    "RFC6962Hasher",
    "DEFAULT_HASHER",
    "ConsistencyVerifier",
    "verify_consistency",
]
