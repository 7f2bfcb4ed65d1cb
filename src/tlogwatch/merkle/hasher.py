"""
RFC 6962 Merkle hashing.

- LeafHash(data) = SHA256(0x00 || data)
- NodeHash(left, right) = SHA256(0x01 || left || right)

Leaf and interior hashes are domain-separated to prevent
second-preimage attacks.
"""

from __future__ import annotations

import hashlib

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"


class RFC6962Hasher:
    """SHA-256 tree hasher used by Certificate Transparency style logs."""

    @property
    def size(self) -> int:
        """Digest size in bytes."""
        return hashlib.sha256().digest_size

    def empty_root(self) -> bytes:
        return hashlib.sha256().digest()

    def hash_leaf(self, data: bytes) -> bytes:
        hasher = hashlib.sha256()
        hasher.update(LEAF_PREFIX)
        hasher.update(data)
        return hasher.digest()

    def hash_children(self, left: bytes, right: bytes) -> bytes:
        hasher = hashlib.sha256()
        hasher.update(NODE_PREFIX)
        hasher.update(left)
        hasher.update(right)
        return hasher.digest()


DEFAULT_HASHER = RFC6962Hasher()
