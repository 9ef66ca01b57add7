"""Tests for the pure error translation table."""

from __future__ import annotations

import pytest

from src.core.errors import ErrorCode
from src.downstream_client import DownstreamOutcome, OutcomeKind, classify_status
from src.error_translator import (
    EMAIL_IN_USE,
    INVALID_DATA,
    INVALID_USER_ID,
    USER_NOT_FOUND,
    GatewayOperation,
    opens_circuit,
    translate,
)


def answered(status: int) -> DownstreamOutcome:
    return DownstreamOutcome(kind=classify_status(status), status_code=status)


TRANSPORT_FAILURE = DownstreamOutcome(kind=OutcomeKind.TRANSPORT_FAILURE, detail="ConnectError")


class TestCreateUser:
    @pytest.mark.parametrize("status", [500, 502, 409])
    def test_uniqueness_conflict(self, status):
        result = translate(GatewayOperation.CREATE_USER, answered(status))
        assert result.status_code == 500
        assert result.message == EMAIL_IN_USE
        assert result.code is ErrorCode.DOWNSTREAM_SERVER_ERROR

    @pytest.mark.parametrize("status", [400, 422])
    def test_invalid_data(self, status):
        result = translate(GatewayOperation.CREATE_USER, answered(status))
        assert (result.status_code, result.message) == (400, INVALID_DATA)
        assert result.code is ErrorCode.DOWNSTREAM_CLIENT_ERROR


class TestGetUser:
    def test_not_found(self):
        result = translate(GatewayOperation.GET_USER, answered(404))
        assert (result.status_code, result.message) == (404, USER_NOT_FOUND)

    def test_server_error_passes_through(self):
        assert translate(GatewayOperation.GET_USER, answered(500)) is None


class TestUpdateUser:
    def test_not_found(self):
        result = translate(GatewayOperation.UPDATE_USER, answered(404))
        assert (result.status_code, result.message) == (404, USER_NOT_FOUND)

    def test_bad_request(self):
        result = translate(GatewayOperation.UPDATE_USER, answered(400))
        assert (result.status_code, result.message) == (400, INVALID_DATA)

    @pytest.mark.parametrize("status", [409, 500])
    def test_unmapped_passes_through(self, status):
        assert translate(GatewayOperation.UPDATE_USER, answered(status)) is None


class TestDeleteUser:
    def test_bad_request(self):
        result = translate(GatewayOperation.DELETE_USER, answered(400))
        assert (result.status_code, result.message) == (400, INVALID_USER_ID)

    def test_not_found_passes_through(self):
        assert translate(GatewayOperation.DELETE_USER, answered(404)) is None


class TestListUsers:
    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_nothing_mapped(self, status):
        assert translate(GatewayOperation.LIST_USERS, answered(status)) is None


class TestOpensCircuit:
    @pytest.mark.parametrize("operation", list(GatewayOperation))
    def test_transport_failure_always_opens(self, operation):
        assert opens_circuit(operation, TRANSPORT_FAILURE) is True

    @pytest.mark.parametrize("operation", list(GatewayOperation))
    def test_success_never_opens(self, operation):
        assert opens_circuit(operation, answered(200)) is False

    @pytest.mark.parametrize(
        "operation",
        [op for op in GatewayOperation if op is not GatewayOperation.SEND_NOTIFICATION],
    )
    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_user_errors_do_not_open(self, operation, status):
        assert opens_circuit(operation, answered(status)) is False

    @pytest.mark.parametrize("status", [400, 500])
    def test_notification_errors_open(self, status):
        assert opens_circuit(GatewayOperation.SEND_NOTIFICATION, answered(status)) is True
