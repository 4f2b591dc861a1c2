from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from text_extraction.main import create_app
from tests.stubs.azure_di_stub import API_KEY, ENDPOINT, FakeDocumentIntelligence, use_transport

_ENV_KEYS = (
    "AZURE_DI_ENDPOINT",
    "AZURE_DI_KEY",
    "AZURE_DOCUMENT_INTELLIGENCE_ENDPOINT",
    "AZURE_DOCUMENT_INTELLIGENCE_KEY",
    "AZURE_DI_API_VERSION",
    "AZURE_DI_FALLBACK_API_VERSION",
    "AZURE_DI_POLL_INTERVAL_SECONDS",
    "AZURE_DI_POLL_TIMEOUT_SECONDS",
    "AZURE_DI_REQUEST_TIMEOUT_SECONDS",
    "CORS_ALLOW_ORIGIN",
    "CORS_ALLOW_HEADERS",
    "CORS_MAX_AGE",
    "ENABLE_METRICS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ENABLE_METRICS", "false")
    return monkeypatch


@pytest.fixture
def azure_env(clean_env):
    clean_env.setenv("AZURE_DI_ENDPOINT", ENDPOINT)
    clean_env.setenv("AZURE_DI_KEY", API_KEY)
    clean_env.setenv("AZURE_DI_POLL_INTERVAL_SECONDS", "0")
    return clean_env


@pytest.fixture
def fake_service() -> FakeDocumentIntelligence:
    return FakeDocumentIntelligence()


def build_client(service: FakeDocumentIntelligence | None = None) -> TestClient:
    app = create_app()
    if service is not None:
        use_transport(app, service.transport)
    return TestClient(app)


@pytest.fixture
def client(azure_env, fake_service) -> TestClient:
    return build_client(fake_service)


@pytest.fixture
def client_factory(azure_env):
    return build_client
