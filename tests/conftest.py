"""
Shared fixtures for tlogwatch tests.

The log side (tree building, proof generation, head signing) only exists
here: tlogwatch itself never builds trees or proofs.
"""

import os
import shutil
import tempfile
from typing import List, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives import hashes

from tlogwatch.merkle.hasher import RFC6962Hasher
from tlogwatch.protocol.errors import FetchError
from tlogwatch.protocol.logroot import LogRootV1
from tlogwatch.protocol.models import LatestResponse, SignedLogRoot, TreeState
from tlogwatch.transport.base import LogClient


# ===========================================================================
# Reference RFC 6962 log
# ===========================================================================


def _split(n: int) -> int:
    """Largest power of two strictly less than n (n >= 2)."""
    return 1 << ((n - 1).bit_length() - 1)


class ReferenceLog:
    """In-memory RFC 6962 tree that can produce roots and consistency proofs."""

    def __init__(self, hasher: Optional[RFC6962Hasher] = None):
        self.hasher = hasher or RFC6962Hasher()
        self.leaves: List[bytes] = []

    @property
    def size(self) -> int:
        return len(self.leaves)

    def append(self, data: bytes) -> None:
        self.leaves.append(data)

    def grow(self, count: int) -> "ReferenceLog":
        start = self.size
        for i in range(start, start + count):
            self.append(f"entry-{i}".encode())
        return self

    def root(self, size: Optional[int] = None) -> bytes:
        size = self.size if size is None else size
        return self._mth(self.leaves[:size])

    def state(self, size: Optional[int] = None) -> TreeState:
        size = self.size if size is None else size
        return TreeState(size=size, root_hash=self.root(size))

    def consistency_proof(self, old_size: int, new_size: Optional[int] = None) -> List[bytes]:
        new_size = self.size if new_size is None else new_size
        if old_size == 0 or old_size >= new_size:
            return []
        return self._subproof(old_size, self.leaves[:new_size], True)

    def _mth(self, leaves: List[bytes]) -> bytes:
        n = len(leaves)
        if n == 0:
            return self.hasher.empty_root()
        if n == 1:
            return self.hasher.hash_leaf(leaves[0])
        k = _split(n)
        return self.hasher.hash_children(self._mth(leaves[:k]), self._mth(leaves[k:]))

    def _subproof(self, m: int, leaves: List[bytes], complete: bool) -> List[bytes]:
        n = len(leaves)
        if m == n:
            return [] if complete else [self._mth(leaves)]
        k = _split(n)
        if m <= k:
            return self._subproof(m, leaves[:k], complete) + [self._mth(leaves[k:])]
        return self._subproof(m - k, leaves[k:], False) + [self._mth(leaves[:k])]


# ===========================================================================
# Log root signer
# ===========================================================================


class LogRootSigner:
    """Signs LogRootV1 structures the way the log operator does."""

    def __init__(self, private_key):
        self.private_key = private_key

    @classmethod
    def ed25519(cls) -> "LogRootSigner":
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def ecdsa(cls) -> "LogRootSigner":
        return cls(ec.generate_private_key(ec.SECP256R1()))

    @classmethod
    def rsa(cls) -> "LogRootSigner":
        return cls(rsa.generate_private_key(public_exponent=65537, key_size=2048))

    @property
    def public_key_der(self) -> bytes:
        return self.private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    @property
    def public_key_pem(self) -> bytes:
        return self.private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def sign(self, data: bytes) -> bytes:
        if isinstance(self.private_key, Ed25519PrivateKey):
            return self.private_key.sign(data)
        if isinstance(self.private_key, ec.EllipticCurvePrivateKey):
            return self.private_key.sign(data, ec.ECDSA(hashes.SHA256()))
        return self.private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())

    def sign_bytes(self, log_root: bytes) -> SignedLogRoot:
        return SignedLogRoot(log_root=log_root, log_root_signature=self.sign(log_root))

    def sign_state(self, state: TreeState, timestamp_nanos: int = 1_600_000_000_000_000_000) -> SignedLogRoot:
        root = LogRootV1(
            tree_size=state.size,
            root_hash=state.root_hash,
            timestamp_nanos=timestamp_nanos,
            revision=state.size,
        )
        return self.sign_bytes(root.marshal())


# ===========================================================================
# Stub log client
# ===========================================================================


class StubLogClient(LogClient):
    """
    Serves heads from a ReferenceLog.

    Knobs:
        reported_state: serve this head instead of the real one
        proof_override: serve these proof hashes instead of the real proof
        error: raise this instead of answering
    """

    def __init__(self, log: ReferenceLog, signer: LogRootSigner):
        self.log = log
        self.signer = signer
        self.reported_state: Optional[TreeState] = None
        self.proof_override: Optional[List[bytes]] = None
        self.error: Optional[Exception] = None
        self.calls: List[Optional[int]] = []
        self.closed = False

    def fetch_latest(self, last_size: Optional[int] = None) -> LatestResponse:
        self.calls.append(last_size)
        if self.error is not None:
            raise self.error

        state = self.reported_state or self.log.state()
        if self.proof_override is not None:
            proof = list(self.proof_override)
        elif last_size is not None and last_size <= state.size <= self.log.size:
            proof = self.log.consistency_proof(last_size, state.size)
        else:
            proof = []

        return LatestResponse(
            signed_log_root=self.signer.sign_state(state),
            proof_hashes=proof,
            key=self.signer.public_key_der,
            status={"file_received": "ok"},
        )

    def close(self) -> None:
        self.closed = True


# ===========================================================================
# Fixtures
# ===========================================================================


@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test data."""
    d = tempfile.mkdtemp(prefix="tlogwatch_test_")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def state_path(tmp_dir):
    return os.path.join(tmp_dir, "state", "state.json")


@pytest.fixture
def hasher():
    return RFC6962Hasher()


@pytest.fixture
def ref_log():
    return ReferenceLog()


@pytest.fixture
def signer():
    return LogRootSigner.ed25519()


@pytest.fixture
def signer_factory():
    return {
        "ed25519": LogRootSigner.ed25519,
        "ecdsa": LogRootSigner.ecdsa,
        "rsa": LogRootSigner.rsa,
    }


@pytest.fixture
def stub_client(ref_log, signer):
    return StubLogClient(ref_log, signer)


@pytest.fixture
def fetch_error():
    return FetchError("connection refused")
