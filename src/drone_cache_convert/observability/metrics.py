"""Prometheus metrics for the conversion service.

Key Responsibilities:
    - Define request and conversion counters/histograms
    - Expose the Prometheus exposition endpoint on the FastAPI app

Collaborators:
    - Upstream: Request lifecycle middleware and the conversion route record
      observations
    - Downstream: Prometheus scraping the metrics route

Thread Safety:
    - Thread-safe: Prometheus client metrics use atomic updates
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

if TYPE_CHECKING:  # pragma: no cover - import hints only
    from fastapi import FastAPI

    from drone_cache_convert.config.settings import AppSettings

# ==============================================================================
# METRIC DEFINITIONS
# ==============================================================================

REQUESTS_TOTAL = Counter(
    "drone_cache_convert_requests_total",
    "HTTP requests handled by the gateway",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "drone_cache_convert_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
)

CONVERSIONS_TOTAL = Counter(
    "drone_cache_convert_conversions_total",
    "Configuration conversions by outcome",
    ["outcome"],
)

CACHE_STEPS_EXPANDED_TOTAL = Counter(
    "drone_cache_convert_cache_steps_expanded_total",
    "Steps wrapped with cache restore and rebuild steps",
)


# ==============================================================================
# RECORDING HELPERS
# ==============================================================================


def record_request(method: str, path: str, status_code: int, duration_seconds: float) -> None:
    REQUESTS_TOTAL.labels(method, path, str(status_code)).inc()
    REQUEST_LATENCY.labels(method, path).observe(duration_seconds)


def record_conversion(outcome: str, expanded_steps: int = 0) -> None:
    """Record one conversion and the number of steps it wrapped."""
    CONVERSIONS_TOTAL.labels(outcome).inc()
    if expanded_steps:
        CACHE_STEPS_EXPANDED_TOTAL.inc(expanded_steps)


# ==============================================================================
# REGISTRATION
# ==============================================================================


def register_metrics(app: FastAPI, settings: AppSettings) -> None:
    """Mount the Prometheus exposition route when metrics are enabled."""
    if not settings.metrics.enabled:
        return

    @app.get(settings.metrics.path, include_in_schema=False)
    def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "CACHE_STEPS_EXPANDED_TOTAL",
    "CONVERSIONS_TOTAL",
    "REQUESTS_TOTAL",
    "REQUEST_LATENCY",
    "record_conversion",
    "record_request",
    "register_metrics",
]
