"""
FastAPI application factory and configuration.

This module creates and configures the FastAPI application with all
necessary middleware, routes, and dependencies.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clientqa.config.settings import AssistantConfig, settings
from clientqa.clients.model_client import GenerativeModelClient
from clientqa.clients.sqlite_client import SQLiteClient
from clientqa.repositories.access_repository import AccessRepository
from clientqa.services.heuristic_service import HeuristicAnswerEngine
from clientqa.services.model_service import ModelService
from clientqa.services.orchestrator_service import AnswerOrchestrator
from clientqa.services.safety_service import SafetyFilter
from clientqa.routes.health import router as health_router
from clientqa.routes.query import router as query_router

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.telemetry.log_level.upper(), logging.INFO)
    ),
    logger_factory=structlog.WriteLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


class ApplicationState:
    """Application state container for shared resources."""

    def __init__(self):
        # Clients
        self.sqlite_client: Optional[SQLiteClient] = None
        self.model_client: Optional[GenerativeModelClient] = None

        # Repositories
        self.access_repository: Optional[AccessRepository] = None

        # Services
        self.assistant_config: Optional[AssistantConfig] = None
        self.orchestrator: Optional[AnswerOrchestrator] = None


# Global application state
app_state = ApplicationState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup and shutdown.

    Builds the access store and the answer pipeline once; the assistant
    configuration is frozen here and never re-read per request.
    """
    logger.info("Starting Client Q&A Bot application", version=settings.version)

    try:
        app_state.assistant_config = AssistantConfig.from_settings(settings.model)
        logger.info("Answer mode selected", mode=app_state.assistant_config.mode_label)

        # Access store
        app_state.sqlite_client = SQLiteClient(settings.database)
        app_state.access_repository = AccessRepository(app_state.sqlite_client)
        await app_state.access_repository.initialize(settings.database.seed_sample_data)

        # Answer pipeline
        safety_filter = SafetyFilter()
        heuristic_engine = HeuristicAnswerEngine(safety_filter)

        model_service = None
        if not app_state.assistant_config.free_tier:
            app_state.model_client = GenerativeModelClient(app_state.assistant_config)
            model_service = ModelService(app_state.model_client, app_state.assistant_config)
        else:
            logger.info("Model disabled; answering with the heuristic engine only")

        app_state.orchestrator = AnswerOrchestrator(
            app_state.assistant_config,
            safety_filter,
            heuristic_engine,
            model_service,
        )

        logger.info("Application startup completed successfully")

        yield

    except Exception as e:
        logger.error("Failed to start application", error=str(e))
        raise

    finally:
        logger.info("Shutting down application")

        try:
            if app_state.model_client:
                await app_state.model_client.close()
            if app_state.sqlite_client:
                await app_state.sqlite_client.close()

            logger.info("Application shutdown completed")

        except Exception as e:
            logger.error("Error during application shutdown", error=str(e))

        app_state.__init__()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Natural-language Q&A over client records with per-user access control",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    configure_middleware(app)
    configure_routes(app)
    configure_exception_handlers(app)

    logger.info(
        "Created FastAPI application",
        app_name=settings.app_name,
        version=settings.version,
        debug=settings.debug,
    )

    return app


def configure_middleware(app: FastAPI) -> None:
    """Configure application middleware."""

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )
        logger.info("Configured CORS middleware", origins=settings.cors_origins)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log HTTP requests and responses."""
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        request_id = str(uuid.uuid4())[:8]

        logger.info(
            "HTTP request started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "HTTP request failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=int((loop.time() - start_time) * 1000),
            )
            raise

        logger.info(
            "HTTP request completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=int((loop.time() - start_time) * 1000),
        )
        return response


def configure_routes(app: FastAPI) -> None:
    """Configure application routes."""
    app.include_router(health_router, prefix=settings.api_prefix, tags=["health"])
    app.include_router(query_router, prefix=settings.api_prefix, tags=["query"])

    logger.info("Configured application routes", api_prefix=settings.api_prefix)


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with structured logging."""
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path,
        )
        error = "Route not found" if exc.status_code == 404 and exc.detail == "Not Found" else exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": error},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report malformed request bodies and parameters as 400."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        logger.warning("Request validation failed", path=request.url.path, field=field, errors=len(errors))
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": f"Invalid {field}: {first.get('msg', 'invalid value')}" if field else "Invalid request",
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with structured logging."""
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        content = {"success": False, "error": "Internal server error"}
        if settings.debug:
            content["details"] = str(exc)
        return JSONResponse(status_code=500, content=content)


# Create the application instance
app = create_app()
