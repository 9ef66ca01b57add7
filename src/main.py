"""FastAPI application entrypoint.

Builds the gateway: service registry, one circuit breaker and one
downstream client per dependency, the gateway operations under
``Settings.ROOT_PATH``, request-ID and audit middleware, the operator
endpoints and ``/health``.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from src.admin_router import circuit_snapshots
from src.admin_router import router as admin_router
from src.core.config import Settings
from src.downstream_client import DownstreamClient
from src.gateway_router import build_gateway
from src.gateway_router import router as gateway_router
from src.middleware.audit import AuditMiddleware
from src.models.schemas import HealthResponse
from src.resilience.circuit_breaker import CircuitBreakerRegistry, CircuitState
from src.service_registry import ServiceRegistry

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    services: ServiceRegistry | None = None,
    clients: dict[str, DownstreamClient] | None = None,
) -> FastAPI:
    """Create the gateway application.

    Args:
        settings: Configuration; read from the environment when omitted.
        services: Name → URL registry; built from *settings* when omitted.
        clients:  Pre-built downstream clients keyed by dependency name.

    Raises:
        ServiceNotRegisteredError: If a dependency has no base address.
    """
    settings = settings or Settings()
    services = services or ServiceRegistry.from_settings(settings)
    breakers = CircuitBreakerRegistry()
    gateway = build_gateway(settings, services, breakers, clients)
    start_time = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for dependency in gateway.dependencies():
            logger.info("%s → %s", dependency.name, dependency.client.base_url)
        yield
        await gateway.close()

    app = FastAPI(
        title="Gateway API",
        description="API that routes user requests to the appropriate services",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services
    app.state.breakers = breakers
    app.state.gateway = gateway

    # Starlette add_middleware prepends, so LAST added = OUTERMOST.
    if settings.AUDIT_ENABLED:
        app.add_middleware(AuditMiddleware, log_path=settings.AUDIT_LOG_PATH)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        """Assign or preserve a unique request ID on every request."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Return service health with version, uptime and circuit states."""
        circuits = circuit_snapshots(breakers, services)
        degraded = any(c.state is CircuitState.OPEN for c in circuits)
        return HealthResponse(
            service=settings.SERVICE_NAME,
            version=settings.SERVICE_VERSION,
            status="degraded" if degraded else "healthy",
            uptime_seconds=round(time.monotonic() - start_time, 2),
            circuits=circuits,
        )

    app.include_router(gateway_router, prefix=settings.ROOT_PATH)
    if settings.ADMIN_ENABLED:
        app.include_router(admin_router, prefix=settings.ROOT_PATH)

    return app


app = create_app()
