"""HTTP routes exposed to the CI server.

Key Responsibilities:
    - ``POST /``: signed conversion endpoint returning the rewritten config
    - ``GET /healthz``: unauthenticated liveness probe

Collaborators:
    - Upstream: CI server conversion extension client, orchestrator probes
    - Downstream: :class:`~drone_cache_convert.conversion.DocumentRewriter`

Thread Safety:
    - Stateless: the rewriter held on ``app.state`` is immutable
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request

from ..auth import verify_signature
from ..conversion import DocumentRewriter
from ..observability.metrics import record_conversion
from ..utils.errors import FoundationError
from .models import ConversionRequest, ConversionResponse, HealthStatus

logger = structlog.get_logger(__name__)

router = APIRouter()


# ==============================================================================
# ROUTES
# ==============================================================================


@router.post(
    "/",
    response_model=ConversionResponse,
    dependencies=[Depends(verify_signature)],
    summary="Rewrite a pipeline configuration with cache steps",
)
def convert_configuration(payload: ConversionRequest, request: Request) -> ConversionResponse:
    rewriter: DocumentRewriter = request.app.state.rewriter
    logger.debug(
        "gateway.conversion.received",
        repo=payload.repo.get("slug"),
        build=payload.build.get("number"),
        config=payload.config.data,
    )
    try:
        result = rewriter.convert(payload.config.data)
    except FoundationError as exc:
        record_conversion(type(exc).__name__)
        raise
    record_conversion("converted", result.stats.expanded_steps)
    logger.debug("gateway.conversion.completed", config=result.text)
    return ConversionResponse(data=result.text)


@router.get("/healthz", response_model=HealthStatus, include_in_schema=False)
def health(request: Request) -> HealthStatus:
    return HealthStatus(version=request.app.version)


__all__ = ["router"]
