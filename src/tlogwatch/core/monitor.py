"""
Tree monitor: one incremental append-only check of a transparency log.

Flow of a single run:

    load trusted state
      -> fetch latest signed head (+ proof from the trusted size)
      -> verify head signature            (VERIFIED)
      -> compare with trusted state       (UNCHANGED | EXTENDED | VIOLATED)
      -> persist new trusted state        (PERSISTED)

Any failure before VERIFIED aborts the run (ABORTED) and leaves the
trusted state untouched. A violation is never persisted.

The monitor never exits the process; it returns an UpdateResult and the
caller decides what to do with it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from tlogwatch.merkle.consistency import ConsistencyVerifier
from tlogwatch.protocol.enums import ConsistencyOutcome, UpdatePhase, UpdateStatus
from tlogwatch.protocol.errors import (
    ConsistencyViolation,
    FetchError,
    HeadVerificationError,
    PersistError,
    ResponseDecodeError,
    RollbackDetected,
    StateStoreError,
    TlogwatchError,
)
from tlogwatch.protocol.models import ConsistencyProof, TreeState
from tlogwatch.security.head import SignedHeadVerifier
from tlogwatch.state.store import StateStore
from tlogwatch.transport.base import LogClient


# ===========================================================================
# Update Result
# ===========================================================================


@dataclass
class UpdateResult:
    """
    Outcome of one monitor run.

    Attributes:
        status: Terminal status of the run
        phases: States the run passed through, in order
        old_state: Trusted state before the run (None on bootstrap)
        new_state: Verified state reported by the log (None if aborted
            before verification)
        persisted: Whether new_state was written to the state store
        error: The failure that ended the run, or a PersistError after
            a successful verification
    """
    status: UpdateStatus
    phases: List[UpdatePhase] = field(default_factory=list)
    old_state: Optional[TreeState] = None
    new_state: Optional[TreeState] = None
    persisted: bool = False
    error: Optional[TlogwatchError] = None
    checked_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def verified(self) -> bool:
        return UpdatePhase.VERIFIED in self.phases

    @property
    def ok(self) -> bool:
        if self.status == UpdateStatus.UNCHANGED:
            return True
        if self.status in (UpdateStatus.BOOTSTRAPPED, UpdateStatus.EXTENDED):
            return self.persisted
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "phases": [p.value for p in self.phases],
            "oldState": self.old_state.to_dict() if self.old_state else None,
            "newState": self.new_state.to_dict() if self.new_state else None,
            "persisted": self.persisted,
            "error": _error_dict(self.error),
            "checkedAt": self.checked_at,
        }


def _error_dict(error: Optional[TlogwatchError]) -> Optional[Dict[str, str]]:
    if error is None:
        return None
    return {
        "type": type(error).__name__,
        "code": error.code.value,
        "message": str(error),
    }


# ===========================================================================
# Tree Monitor
# ===========================================================================


class TreeMonitor:
    """
    Coordinates fetch, verification and persistence for one state file.

    Usage:
        monitor = TreeMonitor(
            client=HTTPLogClient("https://log.example.com"),
            store=StateStore("~/.tlogwatch/state.json"),
            head_verifier=SignedHeadVerifier(),
        )
        result = monitor.update()

    Runs against the same StateStore must not overlap.
    """

    def __init__(
        self,
        client: LogClient,
        store: StateStore,
        head_verifier: SignedHeadVerifier,
        consistency_verifier: Optional[ConsistencyVerifier] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._client = client
        self._store = store
        self._head_verifier = head_verifier
        self._log = logger or logging.getLogger(__name__)
        self._consistency = consistency_verifier or ConsistencyVerifier(logger=self._log)

    def update(self) -> UpdateResult:
        """
        Run one incremental check.

        Returns:
            UpdateResult; this method only raises for programming errors
        """
        phases: List[UpdatePhase] = []

        try:
            old_state = self._store.load()
        except StateStoreError as e:
            return self._abort(phases, e, None)

        if old_state is None:
            phases.append(UpdatePhase.BOOTSTRAP)

        try:
            response = self._client.fetch_latest(old_state.size if old_state else None)
            head = self._head_verifier.verify(response.signed_log_root, response.key or None)
        except (FetchError, ResponseDecodeError, HeadVerificationError) as e:
            return self._abort(phases, e, old_state)

        phases.append(UpdatePhase.VERIFIED)
        new_state = head.state

        if old_state is None:
            self._log.info(
                "No trusted state, accepting tree head at size %d (trust on first use)",
                new_state.size,
            )
            return self._persist(UpdateStatus.BOOTSTRAPPED, phases, None, new_state)

        proof = ConsistencyProof(
            old_size=old_state.size,
            new_size=new_state.size,
            hashes=list(response.proof_hashes),
        )
        try:
            outcome = self._consistency.verify(old_state, new_state, proof)
        except (RollbackDetected, ConsistencyViolation) as e:
            phases.append(UpdatePhase.VIOLATED)
            self._log.critical(
                "LOG INTEGRITY VIOLATION: %s (trusted size=%d root=%s, reported size=%d root=%s)",
                e,
                old_state.size,
                old_state.root_hex,
                new_state.size,
                new_state.root_hex,
            )
            return UpdateResult(
                status=UpdateStatus.VIOLATION,
                phases=phases,
                old_state=old_state,
                new_state=new_state,
                error=e,
            )

        if outcome == ConsistencyOutcome.UNCHANGED:
            phases.append(UpdatePhase.UNCHANGED)
            self._log.info("Tree is unchanged at size %d", new_state.size)
            return UpdateResult(
                status=UpdateStatus.UNCHANGED,
                phases=phases,
                old_state=old_state,
                new_state=new_state,
            )

        phases.append(UpdatePhase.EXTENDED)
        self._log.info(
            "Proof correct between sizes %d and %d", old_state.size, new_state.size
        )
        return self._persist(UpdateStatus.EXTENDED, phases, old_state, new_state)

    def _persist(
        self,
        status: UpdateStatus,
        phases: List[UpdatePhase],
        old_state: Optional[TreeState],
        new_state: TreeState,
    ) -> UpdateResult:
        result = UpdateResult(
            status=status,
            phases=phases,
            old_state=old_state,
            new_state=new_state,
        )
        try:
            self._store.save(new_state)
        except PersistError as e:
            # Verification stands; the next run repeats it from the old state.
            self._log.error(
                "Tree head verified at size %d but state was not saved: %s",
                new_state.size,
                e,
            )
            result.error = e
            return result

        phases.append(UpdatePhase.PERSISTED)
        result.persisted = True
        self._log.info("State updated to size %d", new_state.size)
        return result

    def _abort(
        self,
        phases: List[UpdatePhase],
        error: TlogwatchError,
        old_state: Optional[TreeState],
    ) -> UpdateResult:
        phases.append(UpdatePhase.ABORTED)
        self._log.error("Update aborted (%s): %s", error.code.value, error)
        return UpdateResult(
            status=UpdateStatus.ABORTED,
            phases=phases,
            old_state=old_state,
            error=error,
        )
