"""Tenant Teardown API - administrative offboarding of tenant accounts.

This is the main entry point for the Tenant Teardown API.
"""

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import TeardownError
from app.core.logging import logger, setup_logging

VERSION = "1.0.0"
REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    logger.info(
        "api_starting",
        version=VERSION,
        env=settings.app_env,
        voice_platform_configured=settings.voice_platform_configured,
        telephony_configured=settings.telephony_configured,
        reset_shared_number_webhooks=settings.reset_shared_number_webhooks,
    )

    await init_db()

    yield

    logger.info("api_stopping")


app = FastAPI(
    title=settings.app_name,
    description="""
## Tenant Teardown API

Removes a business account and everything provisioned for it.

### What a teardown does
- **Voice agent**: deletes the agent and its phone number bindings on the voice AI platform
- **Telephony**: resets Twilio webhooks to neutral endpoints (numbers are kept, not released)
- **Database**: purges every tenant-scoped row in dependency order
- **Members**: removes roles, profiles and login identities

External cleanup is best-effort; database failures stop the run and are
reported with the failing step so the request can be retried.

### Authentication
Endpoints require a Bearer token for a platform super admin.
    """,
    version=VERSION,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "DELETE"],
    allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    """Tag every log line of a request with its X-Request-ID."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    with structlog.contextvars.bound_contextvars(request_id=request_id):
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Render 4xx errors in the same envelope as teardown responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(TeardownError)
async def teardown_exception_handler(request: Request, exc: TeardownError):
    """Teardown errors that escaped an endpoint."""
    logger.warning("teardown_error", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    # Don't expose internal errors in production
    error = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"success": False, "error": error})


app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint - basic API info."""
    return {
        "name": settings.app_name,
        "version": VERSION,
        "status": "operational",
    }


# Simple health check for load balancers (no DB required)
@app.get("/health")
async def health():
    """Simple health check for load balancer."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
