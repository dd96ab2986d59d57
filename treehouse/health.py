"""HTTP health checks."""

from __future__ import annotations

import urllib.error
import urllib.request
from collections.abc import Iterable
from typing import Protocol

DEFAULT_HEALTH_INTERVAL = 2
DEFAULT_HEALTH_TIMEOUT = 30


class HTTPClient(Protocol):
    """Anything that can GET a URL and report the response status code."""

    def get(self, url: str) -> int:
        ...


class UrllibClient:
    """An :class:`HTTPClient` built on :mod:`urllib.request`."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def get(self, url: str) -> int:
        """GET ``url`` and return its status code; raises OSError when unreachable."""
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as response:
                return response.status
        except urllib.error.HTTPError as exc:
            exc.close()
            return exc.code


def check_status(client: HTTPClient, url: str, codes: Iterable[int]) -> tuple[bool, int]:
    """GET ``url`` and return ``(status is among codes, status)``."""
    code = client.get(url)
    return code in codes, code