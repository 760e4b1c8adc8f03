"""
FastAPI dependencies: API key protection and service wiring.

Wiring is decided by environment variables:
- DATABASE_URL set      -> SQLAlchemy claims store, else the in-memory store
- INTEGRATIONS_MODE     -> "real" uses the HTTP policy client, anything else the mock
- API_KEYS              -> comma-separated keys; when set, requests need X-API-KEY
"""

import hmac
import logging
import os
import threading
from typing import Optional

from dotenv import load_dotenv
from fastapi import Header, HTTPException, Request, status

from src.claims.claim_service import ClaimService
from src.integrations.clients.mocks.policy_api import MockPolicyApiClient
from src.integrations.policy.policy_service import PolicyService, get_service_factory
from src.utils.config_loader import load_policy_api_config

load_dotenv()

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-KEY"

ROOT_PATH = "/"
HEALTH_PATH = "/health"

# Service endpoints reachable without a key; the app's docs URLs are added per request.
PUBLIC_PATHS = frozenset({ROOT_PATH, HEALTH_PATH})


def configured_api_keys() -> frozenset:
    """Keys from API_KEYS (comma-separated). Empty means the API is open."""
    return frozenset(k.strip() for k in os.getenv("API_KEYS", "").split(",") if k.strip())


def _is_public(request: Request) -> bool:
    app = request.app
    docs_paths = {app.docs_url, app.redoc_url, app.openapi_url, app.swagger_ui_oauth2_redirect_url}
    return request.url.path in PUBLIC_PATHS or request.url.path in docs_paths


async def api_key_protection(request: Request, x_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER)):
    keys = configured_api_keys()
    if not keys or _is_public(request):
        return

    candidate = (x_api_key or "").strip()
    if candidate and any(hmac.compare_digest(candidate, key) for key in keys):
        return

    logger.warning(f"Rejected {request.method} {request.url.path}: missing or unknown {API_KEY_HEADER}")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing API Key")


def _should_use_real_integrations() -> bool:
    mode = os.getenv("INTEGRATIONS_MODE", "").strip().lower()
    return mode in ("real", "http", "prod", "production")


def build_db():
    if os.getenv("DATABASE_URL"):
        from src.database.postgres_real import PostgresDB

        return PostgresDB(connection_string=os.environ["DATABASE_URL"])

    from src.database.postgres import PostgresDB

    return PostgresDB()


def build_policy_service() -> PolicyService:
    if _should_use_real_integrations():
        factory = get_service_factory()
        factory.set_default_configuration(load_policy_api_config())
        logger.info("Using real policy API client")
        return factory.create_policy_service()

    logger.info("Using mock policy API client")
    return PolicyService(MockPolicyApiClient())


_lock = threading.Lock()
_db = None
_policy_service: Optional[PolicyService] = None
_claim_service: Optional[ClaimService] = None


def get_db():
    global _db
    with _lock:
        if _db is None:
            _db = build_db()
            _db.create_tables()
        return _db


def get_policy_service() -> PolicyService:
    global _policy_service
    with _lock:
        if _policy_service is None:
            _policy_service = build_policy_service()
        return _policy_service


def get_claim_service() -> ClaimService:
    global _claim_service
    db = get_db()
    policy_service = get_policy_service()
    with _lock:
        if _claim_service is None:
            _claim_service = ClaimService(db, policy_service)
        return _claim_service


def reset_services() -> None:
    """Drop cached services so the next request rebuilds them from the environment."""
    global _db, _policy_service, _claim_service
    with _lock:
        if _policy_service is not None:
            _policy_service.close()
        _db = None
        _policy_service = None
        _claim_service = None
