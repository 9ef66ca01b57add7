"""DownstreamClient: one outbound HTTP call per gateway operation.

Every call resolves to exactly one ``DownstreamOutcome``.  The outcome
kind is decided here, once, from what httpx reports:

- ``SUCCESS``            the dependency answered with a non-error status
- ``CLIENT_ERROR``       the dependency answered with a 4xx
- ``SERVER_ERROR``       the dependency answered with a 5xx
- ``TRANSPORT_FAILURE``  no structured answer (refused, timeout, protocol error)

Callers match on ``outcome.kind``; no transport exception leaves this
module.  There is no retry: a call either completes or fails once.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum

import httpx

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    """Classification of a single downstream call."""

    SUCCESS = "success"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class DownstreamOutcome:
    """Result of a downstream call.

    Attributes:
        kind:        Outcome classification.
        status_code: HTTP status reported by the dependency (``None`` on
                     transport failure).
        content:     Raw response body, untouched.
        media_type:  Response ``Content-Type`` header, if any.
        detail:      Transport failure description, for diagnostics only.
        elapsed_ms:  Round-trip time in milliseconds.
    """

    kind: OutcomeKind
    status_code: int | None = None
    content: bytes = b""
    media_type: str | None = None
    detail: str = ""
    elapsed_ms: float = 0.0

    @property
    def is_error(self) -> bool:
        return self.kind is not OutcomeKind.SUCCESS


def classify_status(status_code: int) -> OutcomeKind:
    """Map an HTTP status answered by a dependency to an ``OutcomeKind``."""
    if 400 <= status_code < 500:
        return OutcomeKind.CLIENT_ERROR
    if status_code >= 500:
        return OutcomeKind.SERVER_ERROR
    return OutcomeKind.SUCCESS


class DownstreamClient:
    """HTTP client bound to one dependency's base address.

    Holds no state across calls besides the pooled connection.

    Args:
        name:     Dependency name (for diagnostics).
        base_url: Base address, e.g. ``http://localhost:8081/users``.
        timeout:  Transport timeout per call in seconds.
        client:   Optional pre-built ``httpx.AsyncClient`` (tests inject a
                  ``MockTransport`` here).
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def send(
        self,
        method: str,
        path: str,
        *,
        content: bytes | None = None,
        content_type: str | None = None,
        request_id: str | None = None,
    ) -> DownstreamOutcome:
        """Send one request and classify the result.

        Args:
            method:       ``GET``, ``POST``, ``PUT`` or ``DELETE``.
            path:         Path appended to the base address.
            content:      Opaque request body, forwarded verbatim.
            content_type: ``Content-Type`` of *content*.
            request_id:   Propagated as ``X-Request-ID``.
        """
        url = self.url_for(path)
        headers: dict[str, str] = {}
        if content_type:
            headers["Content-Type"] = content_type
        if request_id:
            headers["X-Request-ID"] = request_id

        start = time.monotonic()
        try:
            response = await self._get_client().request(
                method.upper(),
                url,
                content=content or None,
                headers=headers,
                timeout=self.timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            elapsed_ms = round((time.monotonic() - start) * 1000, 2)
            logger.debug("%s %s failed after %.1fms: %r", method, url, elapsed_ms, exc)
            return DownstreamOutcome(
                kind=OutcomeKind.TRANSPORT_FAILURE,
                detail=f"{type(exc).__name__}: {exc}",
                elapsed_ms=elapsed_ms,
            )

        elapsed_ms = round((time.monotonic() - start) * 1000, 2)
        return DownstreamOutcome(
            kind=classify_status(response.status_code),
            status_code=response.status_code,
            content=response.content,
            media_type=response.headers.get("content-type"),
            elapsed_ms=elapsed_ms,
        )

    async def close(self) -> None:
        """Close the pooled httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
