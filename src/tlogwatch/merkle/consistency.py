"""
Merkle consistency proof verification (RFC 6962 section 2.1.2,
RFC 9162 section 2.1.4.2).

A consistency proof between tree sizes m < n lets a client that trusts
the root of the first m leaves confirm the root of n leaves commits to
the same first m leaves. Nothing here performs I/O; every function is
deterministic over its byte inputs.

CRITICAL INVARIANTS:
1. A smaller new tree is a rollback and is never "skipped"
2. Equal sizes never consult the proof
3. Any reconstruction mismatch is a ConsistencyViolation
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from tlogwatch.protocol.enums import ConsistencyOutcome
from tlogwatch.protocol.errors import ConsistencyViolation, RollbackDetected
from tlogwatch.protocol.models import ConsistencyProof, TreeState

from .hasher import DEFAULT_HASHER, RFC6962Hasher


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


# ===========================================================================
# Pure verification
# ===========================================================================


def verify_consistency(
    hasher: RFC6962Hasher,
    old_size: int,
    new_size: int,
    old_root: bytes,
    new_root: bytes,
    proof: Sequence[bytes],
) -> None:
    """
    Verify that the tree (new_size, new_root) extends (old_size, old_root).

    Args:
        hasher: Tree hasher the log uses
        old_size: Size of the trusted tree
        new_size: Size of the candidate tree
        old_root: Root hash of the trusted tree
        new_root: Root hash of the candidate tree
        proof: Consistency proof node hashes, in log order

    Raises:
        RollbackDetected: If new_size < old_size
        ConsistencyViolation: If the proof does not reconstruct both roots
    """
    if new_size < old_size:
        raise RollbackDetected(old_size, new_size)

    for i, node in enumerate(proof):
        if len(node) != hasher.size:
            raise ConsistencyViolation(
                f"proof node {i} has {len(node)} bytes, expected {hasher.size}"
            )

    if old_size == new_size:
        if proof:
            raise ConsistencyViolation(
                f"expected empty proof for equal tree sizes, got {len(proof)} nodes"
            )
        if old_root != new_root:
            raise ConsistencyViolation(
                f"root hash changed at unchanged tree size {new_size}: "
                f"{old_root.hex()} != {new_root.hex()}"
            )
        return

    if old_size == 0:
        # Every tree extends the empty tree.
        if old_root != hasher.empty_root():
            raise ConsistencyViolation(
                f"trusted root at size 0 is not the empty tree root: {old_root.hex()}"
            )
        if proof:
            raise ConsistencyViolation(
                f"expected empty proof from empty tree, got {len(proof)} nodes"
            )
        return

    if not proof:
        raise ConsistencyViolation(
            f"empty consistency proof between sizes {old_size} and {new_size}"
        )

    path = list(proof)
    if _is_power_of_two(old_size):
        # The old root is itself a complete subtree of the new tree.
        path.insert(0, old_root)

    fn = old_size - 1
    sn = new_size - 1
    while fn & 1:
        fn >>= 1
        sn >>= 1

    fr = sr = path[0]
    for node in path[1:]:
        if sn == 0:
            raise ConsistencyViolation(
                f"consistency proof too long between sizes {old_size} and {new_size}"
            )
        if fn & 1 or fn == sn:
            fr = hasher.hash_children(node, fr)
            sr = hasher.hash_children(node, sr)
            if not fn & 1:
                while fn != 0 and not fn & 1:
                    fn >>= 1
                    sn >>= 1
        else:
            sr = hasher.hash_children(sr, node)
        fn >>= 1
        sn >>= 1

    if sn != 0:
        raise ConsistencyViolation(
            f"consistency proof too short between sizes {old_size} and {new_size}"
        )
    if fr != old_root:
        raise ConsistencyViolation(
            f"proof does not reconstruct trusted root at size {old_size}: "
            f"got {fr.hex()}, trusted {old_root.hex()}"
        )
    if sr != new_root:
        raise ConsistencyViolation(
            f"proof does not reconstruct reported root at size {new_size}: "
            f"got {sr.hex()}, reported {new_root.hex()}"
        )


# ===========================================================================
# Consistency Verifier
# ===========================================================================


class ConsistencyVerifier:
    """
    Checks that a freshly verified tree head extends the trusted state.

    Usage:
        verifier = ConsistencyVerifier()
        outcome = verifier.verify(old_state, new_state, proof)
    """

    def __init__(
        self,
        hasher: Optional[RFC6962Hasher] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._hasher = hasher or DEFAULT_HASHER
        self._log = logger or logging.getLogger(__name__)

    @property
    def hasher(self) -> RFC6962Hasher:
        return self._hasher

    def verify(
        self,
        old_state: TreeState,
        new_state: TreeState,
        proof: ConsistencyProof,
    ) -> ConsistencyOutcome:
        """
        Compare two tree states.

        Returns:
            UNCHANGED if both states are identical (the proof is not read),
            EXTENDED if the proof shows new_state extends old_state.

        Raises:
            RollbackDetected: new_state is smaller than old_state
            ConsistencyViolation: the states are not append-only consistent
        """
        if new_state.size < old_state.size:
            raise RollbackDetected(old_state.size, new_state.size)

        if new_state.size == old_state.size:
            if new_state.root_hash != old_state.root_hash:
                raise ConsistencyViolation(
                    f"root hash changed at unchanged tree size {new_state.size}: "
                    f"{old_state.root_hex} != {new_state.root_hex}"
                )
            self._log.debug("Tree unchanged at size %d", new_state.size)
            return ConsistencyOutcome.UNCHANGED

        if proof.old_size != old_state.size or proof.new_size != new_state.size:
            raise ConsistencyViolation(
                f"proof is for sizes {proof.old_size}->{proof.new_size}, "
                f"expected {old_state.size}->{new_state.size}"
            )

        verify_consistency(
            self._hasher,
            old_state.size,
            new_state.size,
            old_state.root_hash,
            new_state.root_hash,
            proof.hashes,
        )
        self._log.info(
            "Consistency proof valid between sizes %d and %d",
            old_state.size,
            new_state.size,
        )
        return ConsistencyOutcome.EXTENDED
