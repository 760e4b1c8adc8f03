"""Pytest fixtures for policy lookup and claims tests."""

import httpx
import pytest
from fastapi.testclient import TestClient

from src.claims.claim_service import ClaimService
from src.database.postgres import PostgresDB
from src.database.postgres_real import PostgresDB as SqlPostgresDB
from src.integrations.clients.mocks.policy_api import MockPolicyApiClient
from src.integrations.clients.real_http.policy_api import PolicyApiClient
from src.integrations.policy.policy_service import PolicyService
from src.utils.config_loader import PolicyApiConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep developer .env / shell settings out of the tests."""
    for name in (
        "API_BASE_URL",
        "API_USERNAME",
        "API_PASSWORD",
        "API_KEY",
        "API_BEARER_TOKEN",
        "TEST_ENVIRONMENT",
        "POLICY_API_CONFIG",
        "DATABASE_URL",
        "INTEGRATIONS_MODE",
        "API_KEYS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db():
    """In-memory PostgresDB stub for tests."""
    return PostgresDB()


@pytest.fixture
def sql_db(tmp_path):
    """SQLAlchemy store on a throwaway SQLite file."""
    store = SqlPostgresDB(f"sqlite:///{tmp_path / 'claims.db'}")
    store.create_tables()
    yield store
    store.engine.dispose()


@pytest.fixture
def policy_service():
    return PolicyService(MockPolicyApiClient())


@pytest.fixture
def claim_service(db, policy_service):
    return ClaimService(db, policy_service)


@pytest.fixture
def api_client(claim_service, policy_service, db):
    """TestClient with the claims service wired to in-memory stores and the mock policy client."""
    from src.api import dependencies
    from src.api.main import app

    app.dependency_overrides[dependencies.get_claim_service] = lambda: claim_service
    # /health reads the cached services directly
    dependencies._db = db
    dependencies._policy_service = policy_service
    dependencies._claim_service = claim_service

    client = TestClient(app, raise_server_exceptions=False)
    yield client

    app.dependency_overrides.clear()
    dependencies._db = None
    dependencies._policy_service = None
    dependencies._claim_service = None


class RecordingTransport:
    """httpx.MockTransport wrapper that records requests and replies from a handler."""

    def __init__(self, handler):
        self.requests = []
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_api_client():
    """Build a PolicyApiClient whose HTTP traffic goes to a handler function."""

    def _make(handler, config=None):
        config = config or PolicyApiConfig(base_url="https://policy.test")
        recorder = RecordingTransport(handler)
        http_client = httpx.Client(base_url=config.base_url, transport=recorder.transport)
        return PolicyApiClient(config, http_client=http_client), recorder

    return _make
