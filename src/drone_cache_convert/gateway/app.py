"""FastAPI application serving the conversion extension.

Key Responsibilities:
    - Application initialization and configuration
    - Middleware setup (request lifecycle, correlation ids)
    - Wiring of the document rewriter from settings and the process environment
    - Error handling and translation into problem+json responses

Collaborators:
    - Upstream: ASGI server (Uvicorn)
    - Downstream: Conversion routes, observability setup, rewriter

Side Effects:
    - Configures global logging when the application is created
    - Snapshots the process environment to derive the plugin environment

Thread Safety:
    - Thread-safe: all request handling reads immutable application state

Example:
    >>> from drone_cache_convert.gateway.app import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn --factory drone_cache_convert.gateway.app:create_app
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .. import __version__
from ..config.settings import AppSettings, get_settings
from ..conversion import DocumentRewriter
from ..observability import setup_observability
from ..utils.errors import FoundationError
from ..utils.logging import get_correlation_id, get_logger
from .middleware import RequestLifecycleMiddleware
from .models import ProblemDetail
from .routes import router

logger = get_logger(__name__)

# ==============================================================================
# ERROR HANDLING
# ==============================================================================


def create_problem_response(detail: ProblemDetail) -> JSONResponse:
    """Create a JSON response for problem details."""
    payload: dict[str, Any] = detail.model_dump(mode="json")
    return JSONResponse(
        payload,
        status_code=detail.status,
        media_type="application/problem+json",
    )


def _log_problem(event: str, detail: ProblemDetail) -> None:
    logger.error(
        event,
        extra={
            "correlation_id": get_correlation_id(),
            "problem": detail.model_dump(mode="json"),
        },
    )


# ==============================================================================
# APPLICATION FACTORY
# ==============================================================================


def create_app(
    settings: AppSettings | None = None,
    *,
    environment: Mapping[str, str] | None = None,
) -> FastAPI:
    """Build the conversion application.

    Args:
        settings: Application settings; defaults to :func:`get_settings`.
        environment: Environment snapshot from which ``CACHE_*`` variables are
            forwarded to generated steps; defaults to ``os.environ``.

    Raises:
        ConfigurationError: When no shared secret is configured.
    """
    settings = settings or get_settings()
    secret = settings.require_secret()

    app = FastAPI(title="Drone cache conversion extension", version=__version__)
    app.state.settings = settings
    app.state.secret = secret

    setup_observability(app, settings)

    app.state.rewriter = DocumentRewriter(
        image=settings.image,
        cache_path=settings.cache_path,
        environment=dict(os.environ if environment is None else environment),
    )

    app.add_middleware(
        RequestLifecycleMiddleware,
        correlation_header=settings.logging.correlation_id_header,
    )
    app.include_router(router)

    @app.exception_handler(FoundationError)
    async def handle_foundation_error(_: Request, exc: FoundationError) -> JSONResponse:
        detail = ProblemDetail.from_error(exc)
        _log_problem("gateway.conversion_error", detail)
        return create_problem_response(detail)

    @app.exception_handler(HTTPException)
    async def handle_http_exception(_: Request, exc: HTTPException) -> JSONResponse:
        detail = ProblemDetail(
            title=str(exc.detail),
            status=exc.status_code,
            type="https://httpstatuses.com/" + str(exc.status_code),
        )
        _log_problem("gateway.http_error", detail)
        return create_problem_response(detail)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(_: Request, exc: RequestValidationError) -> JSONResponse:
        detail = ProblemDetail(
            title="Request validation failed",
            status=422,
            type="https://httpstatuses.com/422",
            detail="The conversion request body is invalid.",
            extensions={"errors": jsonable_errors(exc)},
        )
        _log_problem("gateway.validation_error", detail)
        return create_problem_response(detail)

    logger.info(
        "gateway.started",
        extra={"image": settings.image, "cache_path": settings.cache_path},
    )
    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# ==============================================================================
# EXPORTS
# ==============================================================================

__all__ = [
    "create_app",
    "create_problem_response",
]
