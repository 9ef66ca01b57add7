"""Shared fixtures: fake downstream services behind ``httpx.MockTransport``.

``FakeBackend`` records every request it receives so tests can assert
that a short-circuited call never reached the network.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from src.core.config import Settings
from src.downstream_client import DownstreamClient
from src.main import create_app


class FakeBackend:
    """Callable MockTransport handler with a swappable response."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(200, json={})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self.handler(request)

    def respond(self, status_code: int, **kwargs) -> None:
        self.handler = lambda request: httpx.Response(status_code, **kwargs)

    def refuse(self) -> None:
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        self.handler = _refuse

    def client(self, name: str, base_url: str) -> DownstreamClient:
        transport = httpx.MockTransport(self)
        return DownstreamClient(name, base_url, client=httpx.AsyncClient(transport=transport))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(AUDIT_LOG_PATH=str(tmp_path / "audit.jsonl"))


@pytest.fixture
def user_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def notification_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def app(settings, user_backend, notification_backend):
    clients = {
        settings.USER_SERVICE_NAME: user_backend.client(settings.USER_SERVICE_NAME, settings.USER_SERVICE_URL),
        settings.NOTIFICATION_SERVICE_NAME: notification_backend.client(
            settings.NOTIFICATION_SERVICE_NAME, settings.NOTIFICATION_SERVICE_URL
        ),
    }
    return create_app(settings, clients=clients)


@pytest.fixture
async def client(app):
    """Async test client driving the gateway app in-process."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac


@pytest.fixture
def user_breaker(app, settings):
    return app.state.breakers.get(settings.USER_SERVICE_NAME)


@pytest.fixture
def notification_breaker(app, settings):
    return app.state.breakers.get(settings.NOTIFICATION_SERVICE_NAME)
