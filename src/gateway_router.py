"""Gateway operations: the six client-facing endpoints.

Every operation follows the same contract, implemented once in
``Gateway.forward``:

1. Ask the dependency's circuit breaker; if OPEN answer 503 without
   touching the network.
2. Forward the opaque request to the dependency.
3. Transport failure → open the breaker, answer 503.
4. Error answer → ``translate`` it, or pass it through if unmapped.
5. Success → pass through (or a fixed empty 200 where the operation
   defines one).

Nothing raised below escapes to the caller; each failure path logs a
diagnostic before returning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from src.core.config import Settings
from src.core.errors import ErrorCode, StructuredErrorResponse
from src.downstream_client import DownstreamClient, DownstreamOutcome
from src.error_translator import GatewayOperation, opens_circuit, translate
from src.models.schemas import EmailDetails
from src.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerRegistry
from src.service_registry import ServiceRegistry

logger = logging.getLogger(__name__)


# ── Dependency handles ──────────────────────────────────────────────────


@dataclass
class Dependency:
    """One downstream dependency with its breaker and client.

    Attributes:
        name:    Registry name (e.g. ``user-service``).
        label:   Human-readable name used in client-facing messages.
        breaker: The dependency's shared circuit breaker.
        client:  Outbound HTTP client bound to its base address.
    """

    name: str
    label: str
    breaker: CircuitBreaker
    client: DownstreamClient

    @property
    def unavailable_message(self) -> str:
        return f"{self.label} unavailable"

    @property
    def failure_message(self) -> str:
        return f"{self.label} unavailable due to failure"


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request.headers.get("X-Request-ID", "")


def error_response(status_code: int, message: str, code: ErrorCode, request_id: str) -> JSONResponse:
    body = StructuredErrorResponse(error=message, code=code, request_id=request_id)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def passthrough_response(outcome: DownstreamOutcome, status_code: int | None = None) -> Response:
    return Response(
        content=outcome.content,
        status_code=status_code or outcome.status_code,
        media_type=outcome.media_type,
    )


class Gateway:
    """Holds the per-dependency handles shared by every request.

    Owns no request state; breakers are the only shared mutable state.
    """

    def __init__(self, users: Dependency, notifications: Dependency) -> None:
        self.users = users
        self.notifications = notifications

    def dependencies(self) -> list[Dependency]:
        return [self.users, self.notifications]

    async def forward(
        self,
        operation: GatewayOperation,
        dependency: Dependency,
        method: str,
        path: str,
        request: Request,
        *,
        content: bytes | None = None,
        success_status: int | None = None,
        keep_body: bool = True,
    ) -> Response:
        """Run one operation against *dependency*.

        Args:
            success_status: Fixed status for a successful answer; ``None``
                            keeps the downstream status.
            keep_body:      ``False`` answers success with an empty body.
        """
        request_id = request_id_of(request)

        if not dependency.breaker.is_available():
            logger.error("%s: %s is unavailable, circuit is open", operation.value, dependency.name)
            return error_response(503, dependency.unavailable_message, ErrorCode.DEPENDENCY_UNAVAILABLE, request_id)

        outcome = await dependency.client.send(
            method,
            path,
            content=content,
            content_type=request.headers.get("content-type") if content else None,
            request_id=request_id or None,
        )

        if opens_circuit(operation, outcome):
            await dependency.breaker.open()
            logger.error(
                "%s: could not reach %s (%s) after %.1fms, circuit opened",
                operation.value,
                dependency.name,
                outcome.detail or f"HTTP {outcome.status_code}",
                outcome.elapsed_ms,
            )
            return error_response(503, dependency.failure_message, ErrorCode.TRANSPORT_FAILURE, request_id)

        if outcome.is_error:
            translated = translate(operation, outcome)
            if translated is None:
                logger.warning(
                    "%s: %s answered %d in %.1fms, passing through",
                    operation.value,
                    dependency.name,
                    outcome.status_code,
                    outcome.elapsed_ms,
                )
                return passthrough_response(outcome)
            logger.warning(
                "%s: %s answered %d in %.1fms, responding %d (%s)",
                operation.value,
                dependency.name,
                outcome.status_code,
                outcome.elapsed_ms,
                translated.status_code,
                translated.message,
            )
            return error_response(translated.status_code, translated.message, translated.code, request_id)

        logger.info(
            "%s: %s answered %d in %.1fms",
            operation.value,
            dependency.name,
            outcome.status_code,
            outcome.elapsed_ms,
        )
        if not keep_body:
            return Response(status_code=success_status or outcome.status_code)
        return passthrough_response(outcome, success_status)

    async def close(self) -> None:
        for dependency in self.dependencies():
            await dependency.client.close()


def build_gateway(
    settings: Settings,
    services: ServiceRegistry,
    breakers: CircuitBreakerRegistry,
    clients: dict[str, DownstreamClient] | None = None,
) -> Gateway:
    """Wire both dependencies from the registry.

    Raises:
        ServiceNotRegisteredError: If either dependency has no base address.
    """
    clients = clients or {}

    def _dependency(name: str, label: str) -> Dependency:
        client = clients.get(name) or DownstreamClient(
            name,
            services.require_url(name),
            timeout=settings.DOWNSTREAM_TIMEOUT_SECONDS,
        )
        return Dependency(name=name, label=label, breaker=breakers.register(name), client=client)

    return Gateway(
        users=_dependency(settings.USER_SERVICE_NAME, "User service"),
        notifications=_dependency(settings.NOTIFICATION_SERVICE_NAME, "Notification service"),
    )


def get_gateway(request: Request) -> Gateway:
    return request.app.state.gateway


# ── OpenAPI metadata ────────────────────────────────────────────────────

_NOTIFICATION_TAG = "Notification service"
_USER_TAG = "User service"

_OPAQUE_JSON_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": {"type": "object", "additionalProperties": True}}},
    }
}
_EMAIL_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": EmailDetails.model_json_schema()}},
    }
}


def _responses(codes: dict[int, str]) -> dict:
    return {
        code: {"description": text, "model": StructuredErrorResponse} if code >= 400 else {"description": text}
        for code, text in codes.items()
    }


# ── Routes ──────────────────────────────────────────────────────────────

router = APIRouter()


@router.post(
    "/sendEmail",
    tags=[_NOTIFICATION_TAG],
    summary="Send an email to a user",
    description="Forwards `{recipient, message, subject}` to the notification service.",
    responses=_responses({200: "Email sent", 503: "Notification service temporarily unavailable"}),
    openapi_extra=_EMAIL_BODY,
)
async def send_email(request: Request, gateway: Gateway = Depends(get_gateway)) -> Response:
    body = await request.body()
    logger.info("sendEmail called (%d bytes)", len(body))
    return await gateway.forward(
        GatewayOperation.SEND_NOTIFICATION,
        gateway.notifications,
        "POST",
        "/sendEmail",
        request,
        content=body,
    )


@router.post(
    "/createUser",
    tags=[_USER_TAG],
    summary="Create a user",
    responses=_responses(
        {
            201: "User created",
            400: "Invalid data",
            500: "Email already in use",
            503: "User service temporarily unavailable",
        }
    ),
    openapi_extra=_OPAQUE_JSON_BODY,
)
async def create_user(request: Request, gateway: Gateway = Depends(get_gateway)) -> Response:
    body = await request.body()
    logger.info("createUser called (%d bytes)", len(body))
    return await gateway.forward(
        GatewayOperation.CREATE_USER,
        gateway.users,
        "POST",
        "/create",
        request,
        content=body,
    )


# Registered before /users/{user_id} so "all" is never read as an id.
@router.get(
    "/users/all",
    tags=[_USER_TAG],
    summary="List all users",
    responses=_responses({200: "Users listed", 503: "User service temporarily unavailable"}),
)
async def get_all_users(request: Request, gateway: Gateway = Depends(get_gateway)) -> Response:
    logger.info("getAllUsers called")
    return await gateway.forward(
        GatewayOperation.LIST_USERS,
        gateway.users,
        "GET",
        "/all",
        request,
        success_status=200,
    )


@router.get(
    "/users/{user_id}",
    tags=[_USER_TAG],
    summary="Get a user by id",
    responses=_responses(
        {200: "User found", 404: "User not found", 503: "User service temporarily unavailable"}
    ),
)
async def get_user_by_id(user_id: int, request: Request, gateway: Gateway = Depends(get_gateway)) -> Response:
    logger.info("getUserById called with id=%d", user_id)
    return await gateway.forward(
        GatewayOperation.GET_USER,
        gateway.users,
        "GET",
        f"/{user_id}",
        request,
    )


@router.put(
    "/users/update/{user_id}",
    tags=[_USER_TAG],
    summary="Update a user",
    responses=_responses(
        {
            200: "User updated",
            400: "Invalid data",
            404: "User not found",
            503: "User service temporarily unavailable",
        }
    ),
    openapi_extra=_OPAQUE_JSON_BODY,
)
async def update_user(user_id: int, request: Request, gateway: Gateway = Depends(get_gateway)) -> Response:
    body = await request.body()
    logger.info("updateUser called with id=%d (%d bytes)", user_id, len(body))
    return await gateway.forward(
        GatewayOperation.UPDATE_USER,
        gateway.users,
        "PUT",
        f"/update/{user_id}",
        request,
        content=body,
        success_status=200,
        keep_body=False,
    )


@router.delete(
    "/users/delete/{user_id}",
    tags=[_USER_TAG],
    summary="Delete a user",
    responses=_responses(
        {
            200: "User deleted",
            400: "id must be at least 1",
            404: "User not found",
            503: "User service temporarily unavailable",
        }
    ),
)
async def delete_user(user_id: int, request: Request, gateway: Gateway = Depends(get_gateway)) -> Response:
    logger.info("deleteUser called with id=%d", user_id)
    return await gateway.forward(
        GatewayOperation.DELETE_USER,
        gateway.users,
        "DELETE",
        f"/delete/{user_id}",
        request,
        success_status=200,
        keep_body=False,
    )
