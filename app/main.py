"""SeaChat API - Main Application Module.

This module initializes the FastAPI application with proper configuration,
middleware, routing, and lifecycle management for the chat backend.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import ConfigValidator, Settings, get_config_summary, settings
from app.core.logging_setup import setup_logging
from app.database import Database
from app.inference.base import InferenceProvider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle events."""
    config: Settings = app.state.settings
    database: Database = app.state.database
    setup_logging(config)
    if config.is_production:
        ConfigValidator.validate_required_settings(config)
    logger.info("Starting %s (%s)", config.app_name, config.environment.value)
    logger.info("Configuration: %s", get_config_summary(config))

    # Production schemas are managed outside the app
    if database.is_configured and (config.is_development or config.is_testing):
        await database.create_all()
        logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down %s", config.app_name)
    await database.dispose()


def create_app(
    config: Settings | None = None,
    database: Database | None = None,
    inference_provider: InferenceProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The database and inference provider are process-scoped: one instance each,
    shared by all requests through ``app.state``. Both connect lazily.
    """
    config = config or settings
    app = FastAPI(
        title=config.app_name,
        description="Chat backend that relays turns to a language model and keeps history",
        version=config.version,
        lifespan=lifespan,
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
    )
    app.state.settings = config
    app.state.database = database or Database(config.database_url, echo=config.debug)
    app.state.inference_provider = inference_provider

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app.state.settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def error_body(request: Request, message: str, details=None, error_type: str | None = None) -> dict:
    """Structured error payload: ``{error, details?, type?}``."""
    content = {"error": message}
    if details:
        content["details"] = details
    if error_type:
        content["type"] = error_type
    content["request_id"] = getattr(request.state, "request_id", None)
    return content


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Application exceptions carry a structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            details = exc.detail.get("details")
            error_type = exc.detail.get("type") or exc.detail.get("error_code")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            details = None
            error_type = None

        if exc.status_code >= 500:
            logger.error("Request %s failed: %s (%s)", request.url.path, message, error_type)

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, message, details, error_type),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            errors.append(error_dict)

        return JSONResponse(
            status_code=400,
            content=error_body(request, "Validation error", errors, "VALIDATION_ERROR"),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body(request, "An unexpected error occurred", error_type="INTERNAL_ERROR"),
        )


def setup_routers(app: FastAPI):
    """Configure application routers."""
    from app.domains.conversation.controller import router as conversation_router
    from app.domains.diagnostics.controller import router as diagnostics_router

    @app.get("/health")
    async def health_check(request: Request):
        """Database reachability and inference configuration."""
        config: Settings = request.app.state.settings
        database: Database = request.app.state.database

        db_status = "not_configured"
        if database.is_configured:
            try:
                await database.ping()
                db_status = "healthy"
            except Exception as e:
                logger.warning("Database health check failed: %s", str(e))
                db_status = "unhealthy"

        ai_status = "configured" if config.has_ai_enabled else "not_configured"

        body = {
            "status": "healthy" if db_status != "unhealthy" else "degraded",
            "version": config.version,
            "environment": config.environment.value,
            "timestamp": datetime.now(UTC).isoformat(),
            "services": {
                "database": db_status,
                "ai_service": ai_status,
            },
        }
        return JSONResponse(status_code=200 if db_status != "unhealthy" else 503, content=body)

    @app.get("/")
    async def root(request: Request):
        """Root endpoint with API information."""
        config: Settings = request.app.state.settings
        return {
            "name": config.app_name,
            "version": config.version,
            "description": "Chat with a language model, with history for signed-in users",
            "docs_url": "/docs" if config.is_development else None,
        }

    app.include_router(conversation_router)
    app.include_router(diagnostics_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
