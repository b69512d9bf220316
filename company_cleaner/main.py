"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Configure middleware (CORS, request context)
  - Mount router with the clean endpoint under /v1 prefix
  - Expose health check and metrics endpoints

Collaborators:
  - FastAPI: ASGI web framework
  - CORSMiddleware: Cross-Origin Resource Sharing handler
  - RequestContextMiddleware: Request ID and logging context
  - routes.router: POST /v1/clean
  - container.close_clients: HTTP client shutdown

Constraints:
  - CORS configurable via ALLOWED_ORIGINS env var (comma-separated)
  - No authentication (deploy behind a private network or gateway)

Notes:
  - Middleware order matters: RequestContext → CORS → routes
  - /healthz follows Kubernetes health check convention
  - /metrics exposes Prometheus metrics

Production Readiness:
  - Credentials validated at startup (via lifespan, not import time)
  - Request tracing with X-Request-Id header
  - Structured JSON logging with request correlation
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .container import close_clients
from .exception_handlers import register_exception_handlers
from .logger import logger
from .metrics import get_metrics_response
from .middleware import RequestContextMiddleware
from .routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Validates settings, closes clients."""
    settings = get_settings()
    # R: Missing credentials are fatal at startup (ConfigurationError)
    settings.validate_required()

    logger.info(
        "Company cleaner API starting up",
        extra={
            "app_env": settings.app_env,
            "chunk_size": settings.chunk_size,
            "batch_size": settings.batch_size,
            "polish_enabled": settings.polish_enabled,
            "idempotent_runs": settings.idempotent_runs,
            "fake_document_store": settings.fake_document_store,
        },
    )
    yield

    await close_clients()
    logger.info("Company cleaner API shutting down")


def _get_allowed_origins() -> list[str]:
    """Get CORS origins from settings, with fallback for import-time errors."""
    try:
        return get_settings().get_allowed_origins_list()
    except ValueError:
        return ["http://localhost:3000"]


app = FastAPI(
    title="Company Cleaner API",
    version=__version__,
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "clean",
            "description": "Clean a Notion company page into the standard layout",
        },
    ],
)

# R: Middleware order (bottom = first to execute):
# 1. CORSMiddleware - handles preflight
# 2. RequestContextMiddleware - sets request_id
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_allowed_origins(),
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-Id"],
)

app.include_router(router, prefix="/v1")
register_exception_handlers(app)


@app.get("/healthz")
def healthz():
    """R: Liveness probe (does not call Notion)."""
    settings = get_settings()
    return {"ok": True, "version": __version__, "env": settings.app_env}


@app.get("/metrics")
def metrics():
    """R: Prometheus exposition endpoint."""
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)
