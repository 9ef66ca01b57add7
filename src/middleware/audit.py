"""AuditMiddleware: JSONL audit trail of gateway requests.

One line per non-health request, appended asynchronously with
``aiofiles``.  Request and response bodies are opaque to the gateway and
are never written; only the declared request size is recorded.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiofiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_audit_logger = logging.getLogger("api_gateway.audit")

# Paths excluded from audit logging
_EXCLUDED_PATHS: set[str] = {"/health", "/health/"}


@dataclass
class AuditEntry:
    """Structured audit record for one gateway request."""

    timestamp: str = ""
    request_id: str = ""
    method: str = ""
    path: str = ""
    source_ip: str = ""
    request_bytes: int = 0
    status: str = ""
    status_code: int = 0
    latency_ms: float = 0.0

    def to_json(self) -> str:
        """Serialize to a single-line JSON string (JSONL-safe)."""
        return json.dumps(asdict(self), separators=(",", ":"), default=str)


def create_audit_entry(
    *,
    request_id: str,
    method: str,
    path: str,
    source_ip: str,
    request_bytes: int,
    status_code: int,
    latency_ms: float,
) -> AuditEntry:
    """Factory for ``AuditEntry`` with timestamp and outcome label."""
    return AuditEntry(
        timestamp=datetime.now(UTC).isoformat(),
        request_id=request_id,
        method=method,
        path=path,
        source_ip=source_ip,
        request_bytes=request_bytes,
        status="success" if status_code < 400 else "error",
        status_code=status_code,
        latency_ms=latency_ms,
    )


def _declared_size(request: Request) -> int:
    try:
        return int(request.headers.get("content-length", "0"))
    except ValueError:
        return 0


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs every non-health request as a JSONL audit entry."""

    def __init__(self, app: Any, log_path: str = "logs/audit.jsonl") -> None:
        super().__init__(app)
        self.log_path = log_path

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        if request.url.path in _EXCLUDED_PATHS:
            return await call_next(request)

        start = time.monotonic()
        response = await call_next(request)
        latency_ms = (time.monotonic() - start) * 1000

        entry = create_audit_entry(
            request_id=getattr(request.state, "request_id", "") or response.headers.get("x-request-id", ""),
            method=request.method,
            path=request.url.path,
            source_ip=request.client.host if request.client else "unknown",
            request_bytes=_declared_size(request),
            status_code=response.status_code,
            latency_ms=round(latency_ms, 2),
        )

        try:
            path = Path(self.log_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "a") as f:
                await f.write(entry.to_json() + "\n")
        except OSError:
            _audit_logger.warning("Could not write audit entry to %s", self.log_path)

        return response
