"""Shared fixtures: isolated settings, a recording fake ChatKit API, the app."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

from chatkit_starter.broker.service import SessionBroker
from chatkit_starter.broker.upstream import ChatKitClient
from chatkit_starter.config.settings import Settings

_ENV_VARS = (
    "OPENAI_API_KEY",
    "CHATKIT_WORKFLOW_ID",
    "NEXT_PUBLIC_CHATKIT_WORKFLOW_ID",
    "CHATKIT_API_BASE",
    "CHATKIT_SCRIPT_URL",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "CORS_ORIGINS",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove starter variables from the process environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "OPENAI_API_KEY": "sk-test-key",
        "CHATKIT_WORKFLOW_ID": "wf_default123",
        "CHATKIT_API_BASE": "https://chatkit.test",
        "ENVIRONMENT": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    return make_settings


class FakeChatKitAPI:
    """Records session requests and answers with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: Any = {"client_secret": "cs_secret_1", "expires_after": 600}
        self.raise_error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]

    @property
    def users(self) -> list[str]:
        return [p["user"] for p in self.payloads]


@pytest.fixture
def fake_api() -> FakeChatKitAPI:
    return FakeChatKitAPI()


@pytest.fixture
def broker_factory(fake_api) -> Callable[..., SessionBroker]:
    """Build a broker wired to the fake API, with settings overrides."""

    def _factory(**overrides: Any) -> SessionBroker:
        settings = make_settings(**overrides)
        client = ChatKitClient(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.CHATKIT_API_BASE,
            transport=fake_api.transport,
        )
        return SessionBroker(settings, client=client)

    return _factory


@pytest.fixture
def app_factory(broker_factory):
    """Build the FastAPI app with the broker dependency overridden."""
    from chatkit_starter.api.routes.session import get_broker
    from chatkit_starter.main import create_app

    def _factory(**overrides: Any):
        app = create_app()
        broker = broker_factory(**overrides)
        app.dependency_overrides[get_broker] = lambda: broker
        return app

    return _factory


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
