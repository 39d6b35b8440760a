"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from memstore.api.auth import verify_api_key
from memstore.api.dependencies import cleanup_dependencies, get_database, get_embedding_service
from memstore.api.middleware.timeout import TimeoutMiddleware
from memstore.api.routes import documents, health, memories, search, settings as settings_routes
from memstore.config.settings import get_settings
from memstore.exceptions import MemstoreError, StorageFailure
from memstore.observability.logging import bind_context, clear_context
from memstore.observability.metrics import get_metrics
from memstore.storage.schema import verify_embedding_dimension

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Opens the pool and checks the stored vector dimension against the
    embedding configuration. An unreachable database is logged and retried
    on first request; a dimension mismatch aborts startup.
    """
    logger.info("Memory API starting up")

    try:
        database = await get_database()
    except StorageFailure as e:
        logger.warning("Database unavailable at startup", error=str(e))
    else:
        embedding_service = await get_embedding_service()
        await verify_embedding_dimension(database, embedding_service.dimensions)

    yield

    logger.info("Memory API shutting down")
    await cleanup_dependencies()


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "documents", "description": "Store, list, update and delete documents"},
        {"name": "search", "description": "Semantic similarity search"},
        {"name": "memories", "description": "Memory-oriented aliases"},
        {"name": "settings", "description": "Single-record settings store"},
    ]

    app = FastAPI(
        title="Memstore API",
        description="""
Semantic memory store: text documents embedded into vectors and searched by
cosine similarity.

## Authentication

When `MEMSTORE_API_KEY` is set, every `/v3/*` and `/v4/*` request must carry
`Authorization: Bearer <key>`. `/health` is always open.

## Errors

Every error response has the shape `{"error": "<message>"}`.
        """,
        version=settings.service_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # Add CORS middleware (origins from CORS_ORIGINS env var, comma-separated)
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Request timeout middleware (added before logging middleware so the
    # timeout wraps the entire request lifecycle)
    if settings.request_timeout_seconds > 0:
        app.add_middleware(
            TimeoutMiddleware,
            timeout_seconds=settings.request_timeout_seconds,
        )

    # Request logging and correlation ID middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        bind_context(request_id=request_id)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            clear_context()

    # Rate limiting (opt-in via RATE_LIMIT_ENABLED=true)
    if settings.rate_limit_enabled:
        from slowapi import _rate_limit_exceeded_handler
        from slowapi.errors import RateLimitExceeded

        from memstore.api.rate_limit import limiter

        app.state.limiter = limiter
        app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Exception handlers: every error body is {"error": message}
    @app.exception_handler(MemstoreError)
    async def memstore_error_handler(request: Request, exc: MemstoreError):
        if isinstance(exc, StorageFailure):
            get_metrics().record_storage_error(type(exc.__cause__ or exc).__name__)
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                path=request.url.path,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        return _error_response(exc.status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error_response(400, _format_validation_error(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _error_response(500, "Internal server error")

    # Include routers; everything except /health requires the bearer token
    protected = [Depends(verify_api_key)]
    app.include_router(health.router, tags=["health"])
    app.include_router(documents.router, tags=["documents"], dependencies=protected)
    app.include_router(search.router, tags=["search"], dependencies=protected)
    app.include_router(memories.router, tags=["memories"], dependencies=protected)
    app.include_router(settings_routes.router, tags=["settings"], dependencies=protected)

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Memstore API",
            "version": settings.service_version,
            "docs": "/docs",
        }

    return app
