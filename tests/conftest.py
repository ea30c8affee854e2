"""
Pytest configuration and shared fixtures for the onboarding tutorial tests.

Authlete is never contacted: every test that reaches the relay gets an
AuthleteStub answering through httpx.MockTransport.
"""

import json
from typing import Any, Dict, List, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from src.guide.main import app as guide_app
from src.par_tutorial.main import app as par_app
from src.par_tutorial.routes import get_par_relay
from src.shared.config import Credentials, Settings, get_settings
from src.shared.relay import AuthleteRelay, get_relay


class AuthleteStub:
    """
    Stand-in for the Authlete API.

    Replies are registered per provider path suffix; every request the relay
    sends is recorded for inspection.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.replies: Dict[str, Union[Tuple[int, Any], Exception]] = {}

    def respond(self, path_suffix: str, body: Any, status_code: int = 200):
        self.replies[path_suffix] = (status_code, body)

    def fail(self, path_suffix: str, error: Exception):
        self.replies[path_suffix] = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        for suffix, reply in self.replies.items():
            if not request.url.path.endswith(suffix):
                continue
            if isinstance(reply, Exception):
                raise reply
            status_code, body = reply
            if isinstance(body, str):
                return httpx.Response(status_code, text=body)
            return httpx.Response(status_code, json=body)

        return httpx.Response(404, json={"resultCode": "A000404", "resultMessage": "No stubbed reply"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last_request.content)


@pytest.fixture
def settings() -> Settings:
    """Settings with recognizable test credentials and no simulated delay."""
    return Settings(
        authlete_base_url="https://authlete.test",
        service_access_token="test-service-token",
        credentials=Credentials(
            service_id="svc-123",
            service_secret="svc-secret",
            client_id="client-456",
            client_secret="client-secret",
        ),
        redirect_uri="http://localhost:3002/callback",
        session_secret="test-session-secret",
        simulated_delay_seconds=0,
    )


@pytest.fixture
def authlete() -> AuthleteStub:
    return AuthleteStub()


@pytest.fixture
def relay(settings, authlete) -> AuthleteRelay:
    """Relay wired to the stub."""
    return AuthleteRelay(settings, transport=authlete.transport())


@pytest.fixture
def guide_client(settings, authlete):
    """Test client for the onboarding guide."""
    guide_app.dependency_overrides[get_settings] = lambda: settings
    guide_app.dependency_overrides[get_relay] = lambda: AuthleteRelay(settings, transport=authlete.transport())
    with TestClient(guide_app) as client:
        yield client
    guide_app.dependency_overrides.clear()


@pytest.fixture
def par_client(settings, authlete):
    """Test client for the PAR tutorial."""
    par_app.dependency_overrides[get_settings] = lambda: settings
    par_app.dependency_overrides[get_par_relay] = lambda: AuthleteRelay(
        settings, transport=authlete.transport(), component="PAR-TUTORIAL"
    )
    with TestClient(par_app) as client:
        yield client
    par_app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def disable_logging():
    """Disable logging during tests to reduce noise."""
    import logging
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that run a whole tutorial flow"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file names."""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
