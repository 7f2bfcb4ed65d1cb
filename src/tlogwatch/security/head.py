"""
Signed tree head verification.

A head fetched from the log is untrusted until:
1. the log key parses,
2. the signature over the serialized LogRootV1 verifies,
3. the LogRootV1 decodes and carries a full-length root hash.

Only then is a SignedTreeHead produced. Nothing downstream compares
or persists a head that did not come out of this module.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from tlogwatch.merkle.hasher import DEFAULT_HASHER
from tlogwatch.protocol.errors import InvalidKey, InvalidLogRoot
from tlogwatch.protocol.logroot import LogRootV1
from tlogwatch.protocol.models import SignedLogRoot, SignedTreeHead, TreeState

from .keys import LogPublicKey, parse_public_key, public_key_der, verify_signature


class SignedHeadVerifier:
    """
    Verifier for signed tree heads.

    Usage:
        # Pin the log key (recommended)
        verifier = SignedHeadVerifier.from_pem_file("/etc/tlogwatch/log.pub")

        # Trust the key advertised by the log
        verifier = SignedHeadVerifier()

        head = verifier.verify(response.signed_log_root, response.key)
    """

    def __init__(
        self,
        public_key: Optional[Union[bytes, str, LogPublicKey]] = None,
        *,
        hash_algorithm: str = "sha256",
        logger: Optional[logging.Logger] = None,
    ):
        if isinstance(public_key, (bytes, str)):
            public_key = parse_public_key(public_key)
        self._pinned_key: Optional[LogPublicKey] = public_key
        self._hash_algorithm = hash_algorithm
        self._log = logger or logging.getLogger(__name__)

    @classmethod
    def from_pem_file(cls, path: str, **kwargs) -> "SignedHeadVerifier":
        """Create a verifier pinned to the PEM or DER key stored at path."""
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise InvalidKey(f"cannot read public key file {path}: {e}") from e
        return cls(data, **kwargs)

    @property
    def is_pinned(self) -> bool:
        return self._pinned_key is not None

    def resolve_key(self, embedded_key: Optional[bytes]) -> LogPublicKey:
        """
        Pick the key to verify against.

        A pinned key wins; an embedded key that disagrees with it is an
        error rather than silently ignored.
        """
        if self._pinned_key is None:
            if not embedded_key:
                raise InvalidKey("log response carries no public key and none is configured")
            return parse_public_key(embedded_key)

        if embedded_key:
            embedded = parse_public_key(embedded_key)
            if public_key_der(embedded) != public_key_der(self._pinned_key):
                raise InvalidKey("public key advertised by the log does not match the configured key")
        return self._pinned_key

    def verify(
        self,
        signed_log_root: SignedLogRoot,
        embedded_key: Optional[bytes] = None,
    ) -> SignedTreeHead:
        """
        Verify a signed log root.

        Args:
            signed_log_root: Serialized root and signature from the log
            embedded_key: DER public key shipped with the response

        Returns:
            Trusted SignedTreeHead

        Raises:
            InvalidKey: Key missing, malformed, or not matching the pinned key
            InvalidSignature: Signature does not verify
            InvalidLogRoot: Signed bytes are not a valid LogRootV1
        """
        key = self.resolve_key(embedded_key)

        verify_signature(
            key,
            signed_log_root.log_root_signature,
            signed_log_root.log_root,
            self._hash_algorithm,
        )

        root = LogRootV1.unmarshal(signed_log_root.log_root)
        if len(root.root_hash) != DEFAULT_HASHER.size:
            raise InvalidLogRoot(
                f"root hash is {len(root.root_hash)} bytes, expected {DEFAULT_HASHER.size}"
            )
        if root.tree_size == 0 and root.root_hash != DEFAULT_HASHER.empty_root():
            raise InvalidLogRoot(
                f"empty tree has root {root.root_hash.hex()}, expected the empty tree root"
            )

        head = SignedTreeHead(
            state=TreeState(size=root.tree_size, root_hash=root.root_hash),
            signature=signed_log_root.log_root_signature,
            timestamp=root.timestamp if root.timestamp_nanos else None,
            log_root=signed_log_root.log_root,
        )
        self._log.debug(
            "Verified tree head size=%d root=%s",
            head.state.size,
            head.state.root_hex,
        )
        return head
