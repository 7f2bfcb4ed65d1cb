"""
LogRootV1 codec.

The log signs a TLS-encoded (RFC 5246 section 4) structure:

    struct {
        uint16 version;                 // LOG_ROOT_V1 = 1
        uint64 tree_size;
        opaque root_hash<0..128>;       // 1-byte length prefix
        uint64 timestamp_nanos;
        uint64 revision;
        opaque metadata<0..65535>;      // 2-byte length prefix
    } LogRoot;

The signature covers exactly these bytes, so decoding is strict:
unknown versions, short reads and trailing data are all rejected.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Tuple

from .errors import InvalidLogRoot

LOG_ROOT_V1 = 1

MAX_ROOT_HASH_LEN = 128
MAX_METADATA_LEN = 65535


@dataclass(frozen=True)
class LogRootV1:
    tree_size: int
    root_hash: bytes
    timestamp_nanos: int = 0
    revision: int = 0
    metadata: bytes = b""

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp_nanos / 1e9, tz=timezone.utc)

    def marshal(self) -> bytes:
        if len(self.root_hash) > MAX_ROOT_HASH_LEN:
            raise ValueError(f"root hash too long: {len(self.root_hash)}")
        if len(self.metadata) > MAX_METADATA_LEN:
            raise ValueError(f"metadata too long: {len(self.metadata)}")
        return b"".join([
            struct.pack(">HQ", LOG_ROOT_V1, self.tree_size),
            struct.pack(">B", len(self.root_hash)),
            self.root_hash,
            struct.pack(">QQ", self.timestamp_nanos, self.revision),
            struct.pack(">H", len(self.metadata)),
            self.metadata,
        ])

    @classmethod
    def unmarshal(cls, data: bytes) -> "LogRootV1":
        reader = _Reader(data)
        (version,) = reader.unpack(">H")
        if version != LOG_ROOT_V1:
            raise InvalidLogRoot(f"unsupported log root version: {version}")

        (tree_size,) = reader.unpack(">Q")
        root_hash = reader.opaque(">B")
        timestamp_nanos, revision = reader.unpack(">QQ")
        metadata = reader.opaque(">H")

        if reader.remaining:
            raise InvalidLogRoot(f"{reader.remaining} trailing bytes after log root")

        return cls(
            tree_size=tree_size,
            root_hash=root_hash,
            timestamp_nanos=timestamp_nanos,
            revision=revision,
            metadata=metadata,
        )


class _Reader:
    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def take(self, n: int) -> bytes:
        if n > self.remaining:
            raise InvalidLogRoot(
                f"log root truncated: need {n} bytes at offset {self._pos}, "
                f"have {self.remaining}"
            )
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def unpack(self, fmt: str) -> Tuple[int, ...]:
        return struct.unpack(fmt, self.take(struct.calcsize(fmt)))

    def opaque(self, length_fmt: str) -> bytes:
        (length,) = self.unpack(length_fmt)
        return self.take(length)
