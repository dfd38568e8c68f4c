"""
Catalog Service - Main Application.

Wires the layers together:
- Domain: entities and errors
- Repositories: PostgreSQL data access
- Managers: query normalisation and orchestration
- Routers: HTTP endpoints
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import Settings, settings
from .container import ServiceContainer
from .domain.exceptions import CatalogError
from .logging_config import setup_logging
from .metrics import metrics_endpoint, track_request_metrics
from .routers import buildings_router, categories_router, companies_router, health_router
from .routers.envelope import error_envelope

logger = structlog.get_logger(__name__)

ContainerFactory = Callable[[Settings], Awaitable[ServiceContainer]]


def create_app(
    app_settings: Optional[Settings] = None,
    container_factory: Optional[ContainerFactory] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to use, the module-level settings by default
        container_factory: Coroutine building the service container at
            startup, ``ServiceContainer.start`` by default
    """
    app_settings = app_settings or settings
    container_factory = container_factory or ServiceContainer.start
    setup_logging(app_settings.LOG_LEVEL, use_json=app_settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Catalog Service", version=app_settings.SERVICE_VERSION)
        app.state.container = await container_factory(app_settings)
        logger.info("Catalog Service started")

        yield

        logger.info("Shutting down Catalog Service")
        await app.state.container.stop(app_settings.SHUTDOWN_TIMEOUT_SECONDS)
        app.state.container = None
        logger.info("Catalog Service stopped")

    app = FastAPI(
        title="Catalog Service",
        description="Buildings, companies and hierarchical categories",
        version=app_settings.SERVICE_VERSION,
        docs_url="/docs" if app_settings.DEBUG else None,
        redoc_url="/redoc" if app_settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    @app.middleware("http")
    async def track_metrics(request: Request, call_next):
        """Track Prometheus metrics."""
        start_time = time.time()
        response = await call_next(request)
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        track_request_metrics(request.method, endpoint, response.status_code, time.time() - start_time)
        return response

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Assign a request id and bind it to the log context."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        status_code, body = error_envelope(exc, getattr(request.state, "request_id", ""))
        log = logger.error if status_code >= 500 else logger.info
        log("Request failed", path=request.url.path, status=status_code, error=exc.message)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in error.get("loc", ()))
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": "validation_error",
                    "message": f"Invalid parameter {location}: {error.get('msg', 'invalid value')}",
                    "trace_id": getattr(request.state, "request_id", ""),
                }
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "internal_error",
                    "message": "An unexpected error occurred",
                    "trace_id": getattr(request.state, "request_id", ""),
                }
            },
        )

    app.include_router(buildings_router.router)
    app.include_router(companies_router.router)
    app.include_router(categories_router.router)
    app.include_router(health_router.router)
    app.add_api_route("/metrics", metrics_endpoint, include_in_schema=False)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog.app:create_app",
        factory=True,
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
