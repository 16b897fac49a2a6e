"""
MultiVote Backend Application

Multi-tenant election manager: isolated workspaces, an election lifecycle
per workspace, one vote per voter and an audit trail of privileged actions.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.v1 import router as api_v1_router
from core.config import settings
from core.events import create_start_app_handler, create_stop_app_handler
from core.exceptions import (
    AlreadyVoted,
    AuthenticationError,
    DuplicateVoter,
    ElectionError,
    ElectionNotActive,
    InvalidTransition,
    PermissionDenied,
    ResultsNotPublished,
    StaleWorkspaceState,
    UnknownVoter,
    VoteRejected,
    WorkspaceExists,
    WorkspaceNotFound,
)
from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware

logger = structlog.get_logger(__name__)

# First match wins, so subclasses come before their bases
ERROR_STATUS_CODES: list[tuple[type[ElectionError], int]] = [
    (WorkspaceNotFound, 404),
    (UnknownVoter, 404),
    (VoteRejected, 422),
    (PermissionDenied, 403),
    (AlreadyVoted, 409),
    (ElectionNotActive, 409),
    (AuthenticationError, 401),
    (InvalidTransition, 409),
    (DuplicateVoter, 409),
    (WorkspaceExists, 409),
    (ResultsNotPublished, 409),
    (StaleWorkspaceState, 409),
]


def status_code_for(exc: ElectionError) -> int:
    return next((code for error_type, code in ERROR_STATUS_CODES if isinstance(exc, error_type)), 400)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    await create_start_app_handler(app)()
    yield
    await create_stop_app_handler(app)()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.APP_NAME,
        description="Multi-tenant election manager with per-workspace audit trails",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Add middleware (order matters - processed in reverse)
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(RequestContextMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    application.include_router(api_v1_router, prefix="/api/v1")

    @application.exception_handler(ElectionError)
    async def election_exception_handler(request: Request, exc: ElectionError) -> JSONResponse:
        """Translate domain errors into JSON with a stable code and a displayable message."""
        status_code = status_code_for(exc)
        logger.info(
            "election_error",
            code=exc.code,
            status_code=status_code,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    # Add global exception handler to ensure CORS headers are present on error responses
    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler to catch unhandled exceptions.

        Even unexpected errors get a structured JSON body, and the CORS
        middleware still adds its headers to it.
        """
        logger.exception(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later.",
                "error_type": type(exc).__name__ if settings.DEBUG else "InternalServerError",
            },
        )

    return application


app = create_application()


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy", "service": "multivote-api"}


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }
