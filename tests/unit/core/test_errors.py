"""Structured error tests: hierarchy and caller-facing error bodies."""

from src.core.errors import (
    ApiGatewayError,
    ErrorCode,
    ServiceNotRegisteredError,
    StructuredErrorResponse,
    UnknownDependencyError,
)


class TestErrorHierarchy:
    def test_service_not_registered_inherits(self) -> None:
        assert issubclass(ServiceNotRegisteredError, ApiGatewayError)

    def test_unknown_dependency_inherits(self) -> None:
        assert issubclass(UnknownDependencyError, ApiGatewayError)

    def test_service_not_registered_message(self) -> None:
        err = ServiceNotRegisteredError("user-service")
        assert "user-service" in str(err)
        assert err.service_name == "user-service"


class TestStructuredErrorResponse:
    def test_serializes_to_dict(self) -> None:
        resp = StructuredErrorResponse(
            error="User service unavailable",
            code=ErrorCode.DEPENDENCY_UNAVAILABLE,
            request_id="req-1",
        )
        assert resp.model_dump(mode="json") == {
            "error": "User service unavailable",
            "code": "DEPENDENCY_UNAVAILABLE",
            "request_id": "req-1",
        }

    def test_unknown_dependency_maps_to_not_found(self) -> None:
        resp = StructuredErrorResponse.from_exception(UnknownDependencyError("billing"), "req-2")
        assert resp.code is ErrorCode.NOT_FOUND
        assert "billing" in resp.error

    def test_unhandled_exception_hides_detail(self) -> None:
        resp = StructuredErrorResponse.from_exception(RuntimeError("secret db password"), "req-3")
        assert resp.code is ErrorCode.INTERNAL_ERROR
        assert "secret" not in resp.error
