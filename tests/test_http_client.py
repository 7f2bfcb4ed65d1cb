"""
Tests for the HTTP log client.
"""

import json

import pytest
import requests

from tlogwatch.protocol.errors import FetchError, ResponseDecodeError
from tlogwatch.transport.http import HTTPLogClient


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def post(self, url, params=None, timeout=None):
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def latest_body(stub_client, ref_log):
    ref_log.grow(5)
    return stub_client.fetch_latest(3).to_dict()


class TestHTTPLogClient:
    def test_first_request_has_no_last_size(self, latest_body):
        session = FakeSession(FakeResponse(json.dumps(latest_body)))
        client = HTTPLogClient("https://log.example.com/", session=session)

        client.fetch_latest()

        assert session.requests == [
            {"url": "https://log.example.com/api/v1/latest", "params": None, "timeout": 5.0}
        ]

    def test_sends_last_size(self, latest_body):
        session = FakeSession(FakeResponse(json.dumps(latest_body)))
        client = HTTPLogClient("https://log.example.com", timeout=2.5, session=session)

        client.fetch_latest(3)

        assert session.requests[0]["params"] == {"lastSize": "3"}
        assert session.requests[0]["timeout"] == 2.5

    def test_decodes_response(self, latest_body, ref_log, signer):
        session = FakeSession(FakeResponse(json.dumps(latest_body)))

        latest = HTTPLogClient("https://log.example.com", session=session).fetch_latest(3)

        assert latest.key == signer.public_key_der
        assert latest.proof_hashes == ref_log.consistency_proof(3, 5)
        assert latest.status == {"file_received": "ok"}

    def test_timeout(self):
        session = FakeSession(error=requests.Timeout("read timed out"))

        with pytest.raises(FetchError, match="timed out"):
            HTTPLogClient("https://log.example.com", session=session).fetch_latest()

    def test_connection_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))

        with pytest.raises(FetchError, match="cannot reach"):
            HTTPLogClient("https://log.example.com", session=session).fetch_latest()

    def test_http_error_status(self):
        session = FakeSession(FakeResponse("oops", status_code=503))

        with pytest.raises(FetchError, match="503"):
            HTTPLogClient("https://log.example.com", session=session).fetch_latest()

    def test_invalid_json(self):
        session = FakeSession(FakeResponse("<html>"))

        with pytest.raises(ResponseDecodeError, match="not valid JSON"):
            HTTPLogClient("https://log.example.com", session=session).fetch_latest()

    def test_non_object_body(self):
        session = FakeSession(FakeResponse("[]"))

        with pytest.raises(ResponseDecodeError, match="JSON object"):
            HTTPLogClient("https://log.example.com", session=session).fetch_latest()

    def test_missing_proof(self):
        session = FakeSession(FakeResponse(json.dumps({"Status": {}, "Key": ""})))

        with pytest.raises(ResponseDecodeError, match="malformed"):
            HTTPLogClient("https://log.example.com", session=session).fetch_latest()

    def test_bad_base64(self, latest_body):
        latest_body["Proof"]["proof"]["hashes"] = ["***"]
        session = FakeSession(FakeResponse(json.dumps(latest_body)))

        with pytest.raises(ResponseDecodeError):
            HTTPLogClient("https://log.example.com", session=session).fetch_latest(3)

    def test_close(self):
        session = FakeSession()
        HTTPLogClient("https://log.example.com", session=session).close()
        assert session.closed

    def test_requires_server(self):
        with pytest.raises(ValueError):
            HTTPLogClient("")

    def test_duplicate_keys_rejected(self, latest_body):
        body = json.dumps(latest_body)
        body = body[:-1] + ', "Key": ""}'
        session = FakeSession(FakeResponse(body))

        with pytest.raises(ResponseDecodeError, match="not valid JSON"):
            HTTPLogClient("https://log.example.com", session=session).fetch_latest(3)

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_requires_positive_timeout(self, timeout):
        with pytest.raises(ValueError, match="timeout must be positive"):
            HTTPLogClient("https://log.example.com", timeout=timeout, session=FakeSession())
