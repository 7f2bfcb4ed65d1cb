from __future__ import annotations

"""
Log client boundary.

Clients DO NOT:
  - verify signatures
  - verify proofs
  - touch persisted state

Clients ONLY:
  - ask the log for its latest signed head (and a proof from a size)
  - decode the wire body into a LatestResponse
"""

from abc import ABC, abstractmethod
from typing import Optional

from tlogwatch.protocol.models import LatestResponse


class LogClient(ABC):
    """
    Abstract base class for log clients.

    Implementations raise FetchError for transport failures and
    ResponseDecodeError for bodies that cannot be decoded.
    """

    @abstractmethod
    def fetch_latest(self, last_size: Optional[int] = None) -> LatestResponse:
        """
        Fetch the latest signed tree head.

        Args:
            last_size: Size of the last trusted tree. When given, the
                response carries a consistency proof from that size to
                the returned head.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release transport resources. Default: nothing to release."""
