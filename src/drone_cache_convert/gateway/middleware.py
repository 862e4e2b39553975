"""Request lifecycle tracking middleware.

Every request is assigned a correlation identifier (taken from the
configured header when the caller supplies one), which is bound to the
logging context for the duration of the request and echoed on the response.
Timing and status are recorded as Prometheus metrics.
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..observability.metrics import record_request
from ..utils.logging import bind_correlation_id, get_logger, reset_correlation_id

logger = get_logger(__name__)

UNMATCHED_ROUTE = "unmatched"
_KNOWN_METHODS = frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"})


def _route_label(request: Request) -> str:
    """Return the matched route template so metric labels stay bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


def _method_label(method: str) -> str:
    return method if method in _KNOWN_METHODS else "OTHER"


# ==============================================================================
# MIDDLEWARE IMPLEMENTATION
# ==============================================================================


class RequestLifecycleMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI, *, correlation_header: str = "X-Correlation-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self._header = correlation_header

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        correlation_id = request.headers.get(self._header) or str(uuid4())
        token = bind_correlation_id(correlation_id)
        started = perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[self._header] = correlation_id
            return response
        finally:
            duration = max(perf_counter() - started, 0.0)
            record_request(
                _method_label(request.method), _route_label(request), status_code, duration
            )
            logger.info(
                "gateway.request.completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": status_code,
                    "duration_ms": round(duration * 1000, 3),
                },
            )
            reset_correlation_id(token)


__all__ = ["RequestLifecycleMiddleware"]
