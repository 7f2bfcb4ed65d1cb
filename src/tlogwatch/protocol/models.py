"""
Core data models for tlogwatch.

Models:
- TreeState: one committed snapshot of the log (size + root hash)
- SignedTreeHead: a TreeState whose signature has been verified
- ConsistencyProof: ordered node hashes between two tree sizes
- SignedLogRoot: serialized log root + signature as served by the log
- LatestResponse: decoded body of the log's "latest" endpoint

Byte fields travel as standard base64 in JSON, matching the log's
wire encoding and the persisted state record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from tlogwatch.utils.encoding import b64decode, b64encode

# SHA-256 digest size; every root and proof node has this length.
HASH_SIZE = 32

MAX_TREE_SIZE = 2 ** 64 - 1


# ===========================================================================
# Tree State
# ===========================================================================


@dataclass(frozen=True)
class TreeState:
    """
    A committed snapshot of the log.

    Attributes:
        size: Number of leaves in the tree (unsigned 64-bit)
        root_hash: Merkle root over those leaves (HASH_SIZE bytes)
    """
    size: int
    root_hash: bytes

    def __post_init__(self) -> None:
        if isinstance(self.size, bool) or not isinstance(self.size, int):
            raise ValueError(f"tree size must be an integer, got {type(self.size).__name__}")
        if self.size < 0 or self.size > MAX_TREE_SIZE:
            raise ValueError(f"tree size out of range: {self.size}")
        if not isinstance(self.root_hash, (bytes, bytearray)):
            raise ValueError("root hash must be bytes")
        if len(self.root_hash) != HASH_SIZE:
            raise ValueError(
                f"root hash must be {HASH_SIZE} bytes, got {len(self.root_hash)}"
            )
        object.__setattr__(self, "root_hash", bytes(self.root_hash))

    @property
    def root_hex(self) -> str:
        return self.root_hash.hex()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "rootHash": self.root_hex,
        }


# ===========================================================================
# Signed Tree Head
# ===========================================================================


@dataclass(frozen=True)
class SignedTreeHead:
    """
    Tree head whose signature was checked against the log key.

    Only SignedHeadVerifier creates these; holding one means `state`
    may be compared with and persisted over the trusted state.
    """
    state: TreeState
    signature: bytes
    timestamp: Optional[datetime] = None
    log_root: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "signature": b64encode(self.signature),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


# ===========================================================================
# Consistency Proof
# ===========================================================================


@dataclass(frozen=True)
class ConsistencyProof:
    """
    Proof that the tree at new_size extends the tree at old_size.

    Attributes:
        old_size: Size of the earlier tree
        new_size: Size of the later tree
        hashes: Node hashes, consumed left to right during verification
    """
    old_size: int
    new_size: int
    hashes: List[bytes] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "oldSize": self.old_size,
            "newSize": self.new_size,
            "hashes": [b64encode(h) for h in self.hashes],
        }


# ===========================================================================
# Wire Models
# ===========================================================================


@dataclass
class SignedLogRoot:
    """Serialized LogRootV1 bytes plus the log's signature over them."""
    log_root: bytes
    log_root_signature: bytes
    key_hint: bytes = b""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignedLogRoot":
        return cls(
            log_root=b64decode(data["log_root"]),
            log_root_signature=b64decode(data["log_root_signature"]),
            key_hint=b64decode(data.get("key_hint") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key_hint": b64encode(self.key_hint),
            "log_root": b64encode(self.log_root),
            "log_root_signature": b64encode(self.log_root_signature),
        }


@dataclass
class LatestResponse:
    """
    Decoded answer of the log's latest-tree-head endpoint.

    Attributes:
        signed_log_root: The signed head
        proof_hashes: Consistency proof from the requested previous size
            (empty when none was requested)
        key: DER (SubjectPublicKeyInfo) public key advertised by the log
        status: Free-form status object reported by the server
    """
    signed_log_root: SignedLogRoot
    proof_hashes: List[bytes] = field(default_factory=list)
    key: bytes = b""
    status: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LatestResponse":
        proof = _pick(data, "Proof", "proof")
        if not isinstance(proof, dict):
            raise KeyError("Proof")
        signed_log_root = SignedLogRoot.from_dict(proof["signed_log_root"])

        inner = proof.get("proof") or {}
        hashes = [b64decode(h) for h in (inner.get("hashes") or [])]

        return cls(
            signed_log_root=signed_log_root,
            proof_hashes=hashes,
            key=b64decode(_pick(data, "Key", "key") or ""),
            status=_pick(data, "Status", "status") or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Status": self.status,
            "Proof": {
                "signed_log_root": self.signed_log_root.to_dict(),
                "proof": {"hashes": [b64encode(h) for h in self.proof_hashes]},
            },
            "Key": b64encode(self.key),
        }


def _pick(data: Dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in data:
            return data[name]
    return None
