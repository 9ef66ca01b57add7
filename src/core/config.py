"""Settings for the api-gateway service.

Centralized configuration, loaded from environment variables with the
``API_GATEWAY_`` prefix.  Downstream base addresses are only consumed
through ``src.service_registry.ServiceRegistry``.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """API Gateway configuration.

    All fields can be overridden by environment variables prefixed with
    ``API_GATEWAY_``.  For example, ``API_GATEWAY_PORT=9999`` overrides
    the default port.
    """

    # ── Service identity ────────────────────────────────────────────
    SERVICE_NAME: str = "api-gateway"
    SERVICE_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    ROOT_PATH: str = "/apigateway"

    # ── Downstream dependencies ─────────────────────────────────────
    USER_SERVICE_NAME: str = "user-service"
    USER_SERVICE_URL: str = "http://localhost:8081/users"
    NOTIFICATION_SERVICE_NAME: str = "notification-service"
    NOTIFICATION_SERVICE_URL: str = "http://localhost:8082/notifications"
    SERVICE_REGISTRY_PATH: str = ""  # Optional YAML overrides: {services: {name: url}}

    # ── Outbound calls ──────────────────────────────────────────────
    DOWNSTREAM_TIMEOUT_SECONDS: float = 30.0

    # ── Audit ───────────────────────────────────────────────────────
    AUDIT_ENABLED: bool = True
    AUDIT_LOG_PATH: str = "logs/audit.jsonl"

    # ── Operator endpoints ──────────────────────────────────────────
    ADMIN_ENABLED: bool = True

    model_config = {
        "env_prefix": "API_GATEWAY_",
    }
