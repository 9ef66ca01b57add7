"""Error translation: downstream outcome → gateway status and message.

Pure functions, no state.  ``translate`` is consulted only when the
dependency actually answered with an error status; transport failures
never reach it.  ``None`` means "no mapping for this operation": the
caller passes the downstream response through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.core.errors import ErrorCode
from src.downstream_client import DownstreamOutcome, OutcomeKind

EMAIL_IN_USE = "Email already in use"
INVALID_DATA = "Check that the data is complete and satisfies the constraints"
USER_NOT_FOUND = "User not found"
INVALID_USER_ID = "id must be at least 1"


class GatewayOperation(str, Enum):
    """The operations exposed by the gateway."""

    SEND_NOTIFICATION = "sendEmail"
    CREATE_USER = "createUser"
    GET_USER = "getUserById"
    LIST_USERS = "getAllUsers"
    UPDATE_USER = "updateUser"
    DELETE_USER = "deleteUser"


@dataclass(frozen=True)
class TranslatedError:
    """Gateway-facing status, message and machine code."""

    status_code: int
    message: str
    code: ErrorCode


def _client_error(status_code: int, message: str) -> TranslatedError:
    return TranslatedError(status_code, message, ErrorCode.DOWNSTREAM_CLIENT_ERROR)


def translate(operation: GatewayOperation, outcome: DownstreamOutcome) -> TranslatedError | None:
    """Return the mapped error for *operation*, or ``None`` to pass through."""
    kind = outcome.kind
    status = outcome.status_code

    if operation is GatewayOperation.CREATE_USER:
        # A duplicate email comes back as a server error or a 409 Conflict.
        if kind is OutcomeKind.SERVER_ERROR or status == 409:
            return TranslatedError(500, EMAIL_IN_USE, ErrorCode.DOWNSTREAM_SERVER_ERROR)
        if kind is OutcomeKind.CLIENT_ERROR:
            return _client_error(400, INVALID_DATA)

    elif operation is GatewayOperation.GET_USER:
        if kind is OutcomeKind.CLIENT_ERROR:
            return _client_error(404, USER_NOT_FOUND)

    elif operation is GatewayOperation.UPDATE_USER:
        if kind is OutcomeKind.CLIENT_ERROR and status == 404:
            return _client_error(404, USER_NOT_FOUND)
        if kind is OutcomeKind.CLIENT_ERROR and status == 400:
            return _client_error(400, INVALID_DATA)

    elif operation is GatewayOperation.DELETE_USER:
        if kind is OutcomeKind.CLIENT_ERROR and status == 400:
            return _client_error(400, INVALID_USER_ID)

    return None


def opens_circuit(operation: GatewayOperation, outcome: DownstreamOutcome) -> bool:
    """Whether *outcome* must open the dependency's circuit.

    Transport failures always do.  Sending a notification does not
    distinguish an error answer from an unreachable service, so any error
    outcome counts there.
    """
    if outcome.kind is OutcomeKind.TRANSPORT_FAILURE:
        return True
    return operation is GatewayOperation.SEND_NOTIFICATION and outcome.is_error
