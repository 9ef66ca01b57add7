"""Error hierarchy and structured error bodies for the api-gateway.

Downstream outcomes are not exceptions here: they travel as
``DownstreamOutcome`` values.  Exceptions are reserved for configuration
problems and operator calls naming something that does not exist.
"""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable codes carried by every synthesized error body."""

    DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    DOWNSTREAM_CLIENT_ERROR = "DOWNSTREAM_CLIENT_ERROR"
    DOWNSTREAM_SERVER_ERROR = "DOWNSTREAM_SERVER_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ApiGatewayError(Exception):
    """Base exception for all api-gateway errors."""


class ServiceNotRegisteredError(ApiGatewayError):
    """Raised when a dependency name has no base address in the registry."""

    def __init__(self, service_name: str) -> None:
        self.service_name = service_name
        super().__init__(f"No base address registered for '{service_name}'")


class UnknownDependencyError(ApiGatewayError):
    """Raised when no circuit breaker exists for the given dependency name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown dependency: '{name}'")


class StructuredErrorResponse(BaseModel):
    """Error body returned to callers.

    ``{"error": str, "code": str, "request_id": str}`` with a fixed short
    message, never exception detail.
    """

    error: str
    code: ErrorCode
    request_id: str

    @classmethod
    def from_exception(cls, exc: Exception, request_id: str) -> "StructuredErrorResponse":
        """Create from an exception without leaking internal details."""
        if isinstance(exc, UnknownDependencyError):
            return cls(error=str(exc), code=ErrorCode.NOT_FOUND, request_id=request_id)
        return cls(
            error="An internal error occurred",
            code=ErrorCode.INTERNAL_ERROR,
            request_id=request_id,
        )
