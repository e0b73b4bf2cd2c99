"""
FastAPI Application

Main FastAPI application for the SQL agent with:
- Lifespan management for the application context (connector, catalog, agents)
- CORS middleware for frontend integration
- Global exception handlers for agent and connector errors
- SQL agent and project summary routers

Usage:
    uvicorn sqlagent.api.main:app --reload --port 8000
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from sqlagent import __version__
from sqlagent.api.routes import health, project_summary, sql_agent
from sqlagent.config import Settings, get_settings
from sqlagent.connectors.base import ConnectionError as ConnectorConnectionError
from sqlagent.models.agent import AgentError
from sqlagent.pipeline.context import AgentContext

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Build the application context on startup and release it on shutdown.

    A context already present on ``app.state`` is used as is and left open.
    """
    owns_context = False
    if getattr(app.state, "agent_context", None) is None:
        logger.info("Starting SQL agent API server...")
        app.state.agent_context = await AgentContext.create(app.state.settings)
        owns_context = True
        logger.info("SQL agent API server started successfully")

    try:
        yield  # Application runs here
    finally:
        if owns_context:
            logger.info("Shutting down SQL agent API server...")
            await app.state.agent_context.close()
            app.state.agent_context = None
            logger.info("SQL agent API server shut down complete")


async def agent_error_handler(request: Request, exc: AgentError) -> JSONResponse:
    """Handle agent errors with context."""
    logger.error(
        f"Agent error: {exc}",
        extra={"agent": exc.agent, "recoverable": exc.recoverable, "error_kind": exc.kind.value},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "agent_error",
            "message": str(exc),
            "agent": exc.agent,
            "recoverable": exc.recoverable,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


async def connection_error_handler(
    request: Request, exc: ConnectorConnectionError
) -> JSONResponse:
    """Handle database connection errors."""
    logger.error(f"Database connection error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": False,
            "error": "connection_error",
            "message": "Database connection failed. Please try again later.",
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTP errors in the standard response envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": str(exc.detail),
            "timestamp": datetime.now(UTC).isoformat(),
        },
        headers=getattr(exc, "headers", None),
    )


def create_app(
    settings: Settings | None = None,
    context: AgentContext | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Application settings (defaults to get_settings())
        context: Pre-built application context; skips startup wiring when given
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="SQL Agent API",
        description="Natural language questions answered from the MySQL database",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.agent_context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AgentError, agent_error_handler)
    app.add_exception_handler(ConnectorConnectionError, connection_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(sql_agent.router, prefix="/api/v1/sql-agent", tags=["sql-agent"])
    app.include_router(
        project_summary.router, prefix="/api/v1/project-summary", tags=["project-summary"]
    )

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "name": "SQL Agent API",
            "version": __version__,
            "description": "Natural language interface for the MySQL database",
            "docs": "/docs",
        }

    return app


app = create_app()
