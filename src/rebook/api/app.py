"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from rebook.api.middleware.cors import setup_cors
from rebook.api.middleware.rate_limit import setup_rate_limit
from rebook.api.v1 import v1_router
from rebook.api.v1.schemas import ErrorResponse, FieldError
from rebook.config.settings import AppConfig
from rebook.engine.client import RebookEngine
from rebook.errors.rebook_errors import RebookError, ValidationError, classify
from rebook.metrics.collector import EngineMetrics
from rebook.metrics.middleware import PrometheusMiddleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {404: "not-found", 405: "method-not-allowed"}


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Initialises the engine (datastore, tables, services) on startup and
    gracefully shuts down on exit.
    """
    config: AppConfig = app.state.config
    engine = RebookEngine(config, metrics=app.state.metrics)

    try:
        await engine.initialize()
        app.state.engine = engine
        logger.info("Rebook engine initialized")
        yield
    finally:
        await engine.close()
        logger.info("Rebook engine shut down")


def _error_body(exc: RebookError, details: list[FieldError] | None = None) -> dict:
    body = ErrorResponse(error=exc.message, code=exc.code, details=details)
    return body.model_dump(exclude_none=True)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RebookError)
    async def _rebook_error_handler(request: Request, exc: RebookError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            FieldError(
                field=".".join(str(part) for part in error.get("loc", ()) if part != "body"),
                message=str(error.get("msg", "")),
            )
            for error in exc.errors()
        ]
        err = ValidationError("request validation failed")
        return JSONResponse(
            status_code=err.status_code,
            content=_error_body(err, details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": str(exc.detail),
                "code": _HTTP_ERROR_CODES.get(exc.status_code, "http-error"),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        err = classify(exc)
        return JSONResponse(status_code=err.status_code, content=_error_body(err))


def create_app(*, config: AppConfig | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="rebook",
        version=config.version,
        description="Emergency contact book API",
        lifespan=_lifespan,
    )

    # Store config and metrics on app.state for lifespan access
    app.state.config = config
    app.state.metrics = EngineMetrics()

    # -- Middleware --
    setup_cors(app, config.cors)
    setup_rate_limit(app, config.rate_limit)

    # -- Error handlers --
    _register_error_handlers(app)

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health(request: Request) -> JSONResponse:
        """Report engine and datastore status; 503 unless every part is ok."""
        engine: RebookEngine | None = getattr(request.app.state, "engine", None)
        if engine is None:
            components = {"engine": "not_initialized", "datastore": "unknown"}
        else:
            components = await engine.health_check()
        healthy = all(value == "ok" for value in components.values())
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={"status": "ok" if healthy else "degraded", **components},
        )

    if config.metrics.enabled:

        @app.get("/metrics", tags=["base"], include_in_schema=False)
        async def metrics_endpoint() -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(app.state.metrics.registry),
                media_type="text/plain; version=0.0.4; charset=utf-8",
            )

        app.add_middleware(PrometheusMiddleware, registry=app.state.metrics.registry)

    # -- Mount v1 API --
    app.include_router(v1_router)

    return app
