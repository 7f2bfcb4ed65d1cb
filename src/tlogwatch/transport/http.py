"""
HTTP client for the log's latest-tree-head endpoint.

    POST {server}/api/v1/latest[?lastSize=N]

Response body:

    {
      "Status": {...},
      "Proof": {
        "signed_log_root": {"key_hint": b64, "log_root": b64, "log_root_signature": b64},
        "proof": {"hashes": [b64, ...]}
      },
      "Key": b64 (DER SubjectPublicKeyInfo)
    }
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from tlogwatch.protocol.errors import FetchError, ResponseDecodeError
from tlogwatch.protocol.models import LatestResponse
from tlogwatch.utils.json import json_loads

from .base import LogClient

LATEST_PATH = "/api/v1/latest"
DEFAULT_TIMEOUT = 5.0


class HTTPLogClient(LogClient):
    """
    Fetches signed tree heads over HTTP(S).

    No retries: a failed fetch aborts the run and the next scheduled run
    tries again.
    """

    def __init__(
        self,
        server_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not server_url:
            raise ValueError("server_url is required")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self._url = server_url.rstrip("/") + LATEST_PATH
        self._timeout = timeout
        self._session = session or requests.Session()
        self._log = logger or logging.getLogger(__name__)

    @property
    def url(self) -> str:
        return self._url

    @property
    def timeout(self) -> float:
        return self._timeout

    def fetch_latest(self, last_size: Optional[int] = None) -> LatestResponse:
        params = {"lastSize": str(last_size)} if last_size is not None else None

        try:
            response = self._session.post(
                self._url,
                params=params,
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.Timeout as e:
            raise FetchError(f"timed out after {self._timeout}s fetching {self._url}") from e
        except requests.HTTPError as e:
            raise FetchError(f"log server returned an error for {self._url}: {e}") from e
        except requests.RequestException as e:
            raise FetchError(f"cannot reach log server at {self._url}: {e}") from e

        try:
            decoded = json_loads(response.text)
        except ValueError as e:
            raise ResponseDecodeError(f"log response is not valid JSON: {e}") from e

        if not isinstance(decoded, dict):
            raise ResponseDecodeError(
                f"log response must be a JSON object, got {type(decoded).__name__}"
            )

        try:
            latest = LatestResponse.from_dict(decoded)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ResponseDecodeError(f"malformed latest response: {e!r}") from e

        self._log.info("Status: %s", latest.status)
        return latest

    def close(self) -> None:
        self._session.close()
