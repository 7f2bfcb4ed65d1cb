"""
Public key handling for log signature verification.

Supported log keys (SubjectPublicKeyInfo, PEM or DER):
- Ed25519: signature over the raw message
- ECDSA (any named curve): ASN.1 DER signature over SHA-256
- RSA: PKCS#1 v1.5 over SHA-256

Verification is OFFLINE - the key either comes pinned from
configuration or embedded in the fetched response.
"""

from __future__ import annotations

from typing import Union

from cryptography.exceptions import InvalidSignature as _CryptoInvalidSignature
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from tlogwatch.protocol.errors import InvalidKey, InvalidSignature

LogPublicKey = Union[Ed25519PublicKey, ec.EllipticCurvePublicKey, rsa.RSAPublicKey]

_HASHES = {
    "sha256": hashes.SHA256,
}

_PEM_MARKER = b"-----BEGIN"


def parse_public_key(data: Union[bytes, str]) -> LogPublicKey:
    """
    Parse a PEM or DER encoded public key.

    Raises:
        InvalidKey: If the data is not a supported public key
    """
    if isinstance(data, str):
        data = data.encode("ascii", errors="replace")
    if not data:
        raise InvalidKey("no public key provided")

    try:
        if data.lstrip().startswith(_PEM_MARKER):
            key = serialization.load_pem_public_key(data)
        else:
            key = serialization.load_der_public_key(data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise InvalidKey(f"cannot parse public key: {e}") from e

    if not isinstance(key, (Ed25519PublicKey, ec.EllipticCurvePublicKey, rsa.RSAPublicKey)):
        raise InvalidKey(f"unsupported public key type: {type(key).__name__}")
    return key


def public_key_der(key: LogPublicKey) -> bytes:
    """DER SubjectPublicKeyInfo encoding, used to compare keys."""
    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def verify_signature(
    key: LogPublicKey,
    signature: bytes,
    data: bytes,
    hash_algorithm: str = "sha256",
) -> None:
    """
    Verify a log signature over data.

    Raises:
        InvalidSignature: If the signature does not verify
        InvalidKey: If the hash algorithm is unknown
    """
    if hash_algorithm not in _HASHES:
        raise InvalidKey(f"unsupported hash algorithm: {hash_algorithm}")
    digest = _HASHES[hash_algorithm]()

    try:
        if isinstance(key, Ed25519PublicKey):
            key.verify(signature, data)
        elif isinstance(key, ec.EllipticCurvePublicKey):
            key.verify(signature, data, ec.ECDSA(digest))
        else:
            key.verify(signature, data, padding.PKCS1v15(), digest)
    except _CryptoInvalidSignature as e:
        raise InvalidSignature("log root signature does not verify") from e
