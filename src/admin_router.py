"""Operator endpoints for circuit breakers.

Closing a circuit is never automatic: a dependency that was observed
unreachable stays OPEN until an operator calls
``POST {root}/admin/circuits/{name}/close``, or closes them all
at once with ``POST {root}/admin/circuits/close``.
"""

import logging

from fastapi import APIRouter, Request

from src.core.errors import StructuredErrorResponse, UnknownDependencyError
from src.gateway_router import error_response, request_id_of
from src.models.schemas import CircuitSnapshot
from src.resilience.circuit_breaker import CircuitBreakerRegistry
from src.service_registry import ServiceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Administration"])


def circuit_snapshots(breakers: CircuitBreakerRegistry, services: ServiceRegistry) -> list[CircuitSnapshot]:
    return [
        CircuitSnapshot(name=snap["name"], state=snap["state"], base_url=services.get_url(snap["name"]))
        for snap in breakers.all_snapshots()
    ]


@router.get("/circuits", response_model=list[CircuitSnapshot], summary="List circuit breakers")
async def list_circuits(request: Request) -> list[CircuitSnapshot]:
    return circuit_snapshots(request.app.state.breakers, request.app.state.services)


@router.post(
    "/circuits/{name}/close",
    response_model=CircuitSnapshot,
    summary="Close a circuit breaker",
    responses={404: {"description": "Unknown dependency", "model": StructuredErrorResponse}},
)
async def close_circuit(name: str, request: Request):
    breakers: CircuitBreakerRegistry = request.app.state.breakers
    try:
        cb = breakers.get(name)
    except UnknownDependencyError as exc:
        logger.warning("Close requested for unknown dependency %s", name)
        body = StructuredErrorResponse.from_exception(exc, request_id_of(request))
        return error_response(404, body.error, body.code, body.request_id)

    await cb.close()
    logger.info("Circuit for %s closed by operator", name)
    return CircuitSnapshot(name=cb.name, state=cb.state, base_url=request.app.state.services.get_url(name))


@router.post("/circuits/close", response_model=list[CircuitSnapshot], summary="Close every circuit breaker")
async def close_all_circuits(request: Request) -> list[CircuitSnapshot]:
    breakers: CircuitBreakerRegistry = request.app.state.breakers
    await breakers.close_all()
    logger.info("All circuits closed by operator: %s", ", ".join(breakers.names()))
    return circuit_snapshots(breakers, request.app.state.services)
