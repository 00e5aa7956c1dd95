"""
FastAPI application for the quiz engine.

Provides REST API for:
- Quiz attempts (start, current question, answer, summary)
- Remediation loops for missed questions
- Practice sessions
- Scope listing and session housekeeping
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import get_settings
from quiz_engine import __version__
from quiz_engine.api.routers import (
    practice_router,
    quiz_router,
    remediation_router,
    sessions_router,
)
from quiz_engine.api.schemas import ERROR_RESPONSES, ErrorDetail, ErrorResponse
from quiz_engine.core.errors import QuizEngineError, error_payload
from quiz_engine.core.logging import configure_logging
from quiz_engine.db.database import check_database
from quiz_engine.services import EngineServices, build_services
from quiz_engine.sessions.store import SqlSessionStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    configure_logging(settings)

    # Startup
    logger.info("Starting quiz engine service...")
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down quiz engine service...")


async def engine_error_handler(request: Request, exc: QuizEngineError) -> JSONResponse:
    """Map the engine error taxonomy onto HTTP status codes."""
    if exc.status_code >= 500:
        logger.opt(exception=exc).error(f"{request.method} {request.url.path} failed")
    else:
        logger.debug(f"{request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    body = ErrorResponse(detail=ErrorDetail(**error_payload(exc)))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def create_app(services: EngineServices | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        services: Pre-built services (tests); built from settings at startup otherwise
    """
    app = FastAPI(
        title="Quiz Engine",
        description="""
        Quiz assessment and adaptive remediation engine.

        ## Flow

        ```
        POST /quizzes/{quiz_id}/attempts
            -> answer questions one at a time
            -> GET summary
            -> POST /remediations for each missed question
        ```

        Practice sessions (`/practice`) are independent of attempts.
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS middleware for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(QuizEngineError, engine_error_handler)

    app.include_router(quiz_router, tags=["Quiz"], responses=ERROR_RESPONSES)
    app.include_router(remediation_router, tags=["Remediation"], responses=ERROR_RESPONSES)
    app.include_router(practice_router, tags=["Practice"], responses=ERROR_RESPONSES)
    app.include_router(sessions_router, tags=["Sessions"], responses=ERROR_RESPONSES)

    @app.get("/health", tags=["Health"])
    def health_check() -> dict[str, Any]:
        """Health check with session store and question bank status."""
        services: EngineServices = app.state.services
        components: dict[str, Any] = {
            "question_bank": f"{len(services.repository.list_scopes())} scopes",
            "session_backend": services.settings.session_backend,
        }

        overall_status = "healthy"
        if isinstance(services.store, SqlSessionStore):
            db_status, db_error = check_database(services.store.engine)
            components["database"] = db_status
            if db_error:
                components["database_error"] = db_error
                overall_status = "unhealthy"

        return {
            "status": overall_status,
            "version": __version__,
            "components": components,
        }

    return app


app = create_app()
