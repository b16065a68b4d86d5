"""Transport port — how the classifier reaches the network.

The classifier only needs ``post(url, body, headers)``; anything with that
method works (tests pass in-memory fakes).  ``RequestsTransport`` is the
default online implementation, ``OfflineTransport`` forces local-only mode.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol

import requests


class TransportError(Exception):
    """The request never produced an HTTP response (DNS, refused, timeout...)."""


@dataclass(frozen=True, slots=True)
class TransportResponse:
    status: int
    body: str


class Transport(Protocol):
    def post(self, url: str, body: str, headers: dict[str, str]) -> TransportResponse:
        ...


class RequestsTransport:
    """HTTP transport backed by a pooled ``requests.Session``."""

    def __init__(self, timeout: float = 5.0, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def post(self, url: str, body: str, headers: dict[str, str]) -> TransportResponse:
        try:
            response = self._session.post(
                url,
                data=body.encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"POST {url} failed: {e}") from e
        return TransportResponse(status=response.status_code, body=response.text)

    def close(self) -> None:
        self._session.close()


class OfflineTransport:
    """Refuses every request; the pipeline then runs on local signals only."""

    def post(self, url: str, body: str, headers: dict[str, str]) -> TransportResponse:
        raise TransportError("offline mode")
