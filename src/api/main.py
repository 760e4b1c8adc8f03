"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from datetime import datetime, timezone
from urllib.parse import urlparse

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.claims_router import api as claims_api
from src.api.dependencies import HEALTH_PATH, ROOT_PATH, api_key_protection, get_db, get_policy_service, reset_services
from src.api.responses import error
from src.claims.exceptions import PolicyValidationError, ResourceNotFoundError
from src.claims.validation import FormValidationError

# Setup logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Claims & Policy Lookup API",
    description="Insurance claims CRUD with policy checks against the upstream policy API",
    version="1.0.0",
    dependencies=[Depends(api_key_protection)],
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(claims_api)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================
@app.exception_handler(FormValidationError)
async def form_validation_error_handler(request: Request, exc: FormValidationError):
    return error(400, exc.message, errors=exc.field_errors)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        errors.setdefault(field or "request", err.get("msg", "Invalid value"))
    return error(400, "Validation failed", errors=errors)


@app.exception_handler(PolicyValidationError)
async def policy_validation_error_handler(request: Request, exc: PolicyValidationError):
    return error(400, exc.message)


@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(request: Request, exc: ResourceNotFoundError):
    return error(404, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error(exc.status_code, str(exc.detail))


@app.exception_handler(httpx.TransportError)
async def upstream_unavailable_handler(request: Request, exc: httpx.TransportError):
    logger.error(f"External service unavailable: {exc}")
    return error(503, f"External service is unavailable: {exc}")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error(500, f"An unexpected error occurred: {exc}")


# ============================================================================
# ENDPOINTS
# ============================================================================
@app.get(ROOT_PATH, tags=["Health"])
async def root():
    """Health check endpoint."""
    return {"service": "Claims & Policy Lookup API", "status": "healthy", "version": "1.0.0", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get(HEALTH_PATH, tags=["Health"])
def health_check():
    """Detailed health check (claims store, upstream policy API)."""
    db = get_db()
    policy_api_up = get_policy_service().is_service_healthy()
    return {
        "status": "healthy" if policy_api_up else "degraded",
        "database": {"claims_store": type(db).__module__.rsplit(".", 1)[-1]},
        "policy_api": "up" if policy_api_up else "down",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ============================================================================
# STARTUP/SHUTDOWN EVENTS
# ============================================================================
@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    logger.info("Starting Claims & Policy Lookup API...")

    # Log sanitized DB target details (no credentials) for connectivity debugging.
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        try:
            parsed = urlparse(db_url)
            logger.info(
                "DATABASE_URL target: scheme=%s host=%s port=%s db=%s",
                parsed.scheme,
                parsed.hostname,
                parsed.port,
                (parsed.path or "").lstrip("/"),
            )
        except ValueError as e:
            logger.warning("Could not parse DATABASE_URL for startup logging: %s", e)
    else:
        logger.info("DATABASE_URL not set; using in-memory claims store")

    try:
        get_db()
        logger.info("Database tables initialized")
    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Claims & Policy Lookup API...")
    reset_services()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.api.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=False)
