"""Pydantic models for gateway-owned responses and API documentation.

Request and response bodies of the gateway operations are opaque and
are never validated against these models; ``EmailDetails`` only
documents the notification payload in the OpenAPI schema.
"""

from pydantic import BaseModel, Field

from src.resilience.circuit_breaker import CircuitState


class CircuitSnapshot(BaseModel):
    """State of one dependency's circuit breaker."""

    name: str
    state: CircuitState
    base_url: str | None = None


class HealthResponse(BaseModel):
    """Response model for GET /health."""

    service: str
    version: str
    status: str
    uptime_seconds: float
    circuits: list[CircuitSnapshot] = Field(default_factory=list)


class EmailDetails(BaseModel):
    """Notification payload, as documented for POST /sendEmail."""

    recipient: str = Field(..., description="Recipient email address")
    message: str = Field(..., description="Message text")
    subject: str = Field(..., description="Message subject")
