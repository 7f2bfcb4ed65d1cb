"""
Tests for the LogRootV1 codec and wire models.
"""

import struct

import pytest

from tlogwatch.protocol.errors import InvalidLogRoot
from tlogwatch.protocol.logroot import LogRootV1
from tlogwatch.protocol.models import LatestResponse, TreeState

ROOT = bytes(range(32))


class TestLogRootV1:
    def test_layout(self):
        """version | size | len+hash | timestamp | revision | len+metadata"""
        root = LogRootV1(tree_size=5, root_hash=ROOT, timestamp_nanos=7, revision=9)

        data = root.marshal()

        assert len(data) == 2 + 8 + 1 + 32 + 8 + 8 + 2
        assert data[:2] == b"\x00\x01"
        assert struct.unpack(">Q", data[2:10]) == (5,)
        assert data[10] == 32
        assert data[11:43] == ROOT
        assert struct.unpack(">QQ", data[43:59]) == (7, 9)
        assert data[59:] == b"\x00\x00"

    def test_unmarshal(self):
        root = LogRootV1(
            tree_size=2 ** 64 - 1,
            root_hash=ROOT,
            timestamp_nanos=1_600_000_000_000_000_000,
            revision=3,
            metadata=b"meta",
        )

        decoded = LogRootV1.unmarshal(root.marshal())

        assert decoded == root
        assert decoded.timestamp.year == 2020

    def test_unknown_version(self):
        data = b"\x00\x02" + LogRootV1(tree_size=1, root_hash=ROOT).marshal()[2:]

        with pytest.raises(InvalidLogRoot, match="version"):
            LogRootV1.unmarshal(data)

    def test_truncated(self):
        data = LogRootV1(tree_size=1, root_hash=ROOT).marshal()

        with pytest.raises(InvalidLogRoot, match="truncated"):
            LogRootV1.unmarshal(data[:-3])

    def test_trailing_bytes(self):
        data = LogRootV1(tree_size=1, root_hash=ROOT).marshal() + b"\x00"

        with pytest.raises(InvalidLogRoot, match="trailing"):
            LogRootV1.unmarshal(data)

    def test_empty_input(self):
        with pytest.raises(InvalidLogRoot):
            LogRootV1.unmarshal(b"")


class TestTreeState:
    def test_rejects_short_hash(self):
        with pytest.raises(ValueError, match="32 bytes"):
            TreeState(size=1, root_hash=b"\x00" * 31)

    def test_rejects_negative_size(self):
        with pytest.raises(ValueError, match="out of range"):
            TreeState(size=-1, root_hash=ROOT)

    def test_rejects_oversized(self):
        with pytest.raises(ValueError, match="out of range"):
            TreeState(size=2 ** 64, root_hash=ROOT)

    def test_rejects_bool_size(self):
        with pytest.raises(ValueError):
            TreeState(size=True, root_hash=ROOT)

    def test_is_immutable(self):
        state = TreeState(size=1, root_hash=ROOT)

        with pytest.raises(AttributeError):
            state.size = 2


class TestLatestResponse:
    def _body(self):
        return {
            "Status": {"file_received": "ok"},
            "Proof": {
                "signed_log_root": {
                    "key_hint": "",
                    "log_root": "AAE=",
                    "log_root_signature": "c2ln",
                },
                "proof": {"hashes": ["AAAA", "AQEB"]},
            },
            "Key": "a2V5",
        }

    def test_from_dict(self):
        latest = LatestResponse.from_dict(self._body())

        assert latest.signed_log_root.log_root == b"\x00\x01"
        assert latest.signed_log_root.log_root_signature == b"sig"
        assert latest.proof_hashes == [b"\x00\x00\x00", b"\x01\x01\x01"]
        assert latest.key == b"key"
        assert latest.status == {"file_received": "ok"}

    def test_lowercase_keys(self):
        body = {k.lower(): v for k, v in self._body().items()}

        latest = LatestResponse.from_dict(body)

        assert latest.key == b"key"

    def test_missing_proof_hashes(self):
        body = self._body()
        del body["Proof"]["proof"]

        assert LatestResponse.from_dict(body).proof_hashes == []

    def test_missing_signed_root(self):
        body = self._body()
        del body["Proof"]["signed_log_root"]

        with pytest.raises(KeyError):
            LatestResponse.from_dict(body)

    def test_bad_base64(self):
        body = self._body()
        body["Proof"]["signed_log_root"]["log_root"] = "not base64!"

        with pytest.raises(ValueError):
            LatestResponse.from_dict(body)

    def test_to_dict_matches_wire_shape(self):
        body = self._body()
        body["Proof"]["signed_log_root"]["key_hint"] = ""

        assert LatestResponse.from_dict(body).to_dict() == body
