"""
Signature verification for transparency log tree heads.
"""

from tlogwatch.security.keys import (
    LogPublicKey,
    parse_public_key,
    public_key_der,
    verify_signature,
)
from tlogwatch.security.head import SignedHeadVerifier

__all__ = [
    "LogPublicKey",
    "parse_public_key",
    "public_key_der",
    "verify_signature",
    "SignedHeadVerifier",
]
