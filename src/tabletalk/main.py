"""
TableTalk - Main Application.

FastAPI application: upload a tabular file, then ask questions about it.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from uuid import UUID, uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tabletalk import __version__
from tabletalk.config import get_settings
from tabletalk.exceptions import TableTalkException
from tabletalk.observability import get_metrics_store
from tabletalk.schemas import ErrorDetail, ErrorResponse, HealthResponse

# Import module routers
from tabletalk.api.routes.metrics import router as metrics_router
from tabletalk.modules.assistant.router import router as assistant_router
from tabletalk.modules.conversations.router import router as conversations_router
from tabletalk.modules.datasets.router import router as datasets_router

# Configure standard logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("tabletalk")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.app_log_level.upper())
    logger.info(
        f"Starting TableTalk API v{__version__} "
        f"[env={settings.app_env}] "
        f"[reasoning={settings.reasoning.provider}] "
        f"[persistence={'supabase' if settings.supabase.enabled else 'memory'}]"
    )
    yield
    logger.info("Shutting down TableTalk API")


# Create FastAPI application
app = FastAPI(
    title="TableTalk API",
    description="Conversational analysis of uploaded CSV/Excel datasets.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Middleware
# =============================================================================


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(f"[{request_id}] {request.method} {request.url.path}")

    response = await call_next(request)

    logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code}")

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(TableTalkException)
async def tabletalk_exception_handler(request: Request, exc: TableTalkException):
    """Handle TableTalk custom exceptions."""
    request_id_str = getattr(request.state, "request_id", None)
    request_id = None
    if request_id_str:
        try:
            request_id = UUID(request_id_str)
        except (ValueError, TypeError):
            request_id = None

    logger.warning(f"TableTalkException: {exc.code} - {exc.message}")
    get_metrics_store().record_error(exc.code)

    body = ErrorResponse(
        error=ErrorDetail(
            code=exc.code,
            message=exc.message,
            details=exc.details,
            request_id=request_id,
        )
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    request_id_str = getattr(request.state, "request_id", None)

    logger.error(f"Unhandled exception on {request.url.path}")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Traceback:\n{traceback.format_exc()}")
    get_metrics_store().record_error("INTERNAL_ERROR")

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if get_settings().app_debug else "An unexpected error occurred",
                "request_id": request_id_str,
            }
        },
    )


# =============================================================================
# Health Check
# =============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    status = "healthy"
    if settings.reasoning.provider == "http" and not settings.reasoning.url:
        status = "degraded"
    return HealthResponse(
        status=status,
        version=__version__,
        app_env=settings.app_env,
        is_production=settings.is_production,
        reasoning_provider=settings.reasoning.provider,
        persistence="supabase" if settings.supabase.enabled else "memory",
    )


# =============================================================================
# Register Module Routers
# =============================================================================

app.include_router(datasets_router)
app.include_router(conversations_router)
app.include_router(assistant_router)
app.include_router(metrics_router)


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint redirect to docs."""
    return {"message": "Welcome to TableTalk API", "docs": "/docs"}
