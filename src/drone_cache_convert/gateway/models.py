"""Request and response models for the conversion gateway.

The CI server posts a conversion request carrying the build, the repository
and the raw configuration text; it expects the (possibly rewritten)
configuration back under ``data``. Unknown fields are accepted so newer
server versions keep working.
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..utils.errors import FoundationError

# ==============================================================================
# ERROR MODELS
# ==============================================================================


class ProblemDetail(BaseModel):
    """RFC 7807 compliant problem details payload."""

    type: str = Field(default="about:blank")
    title: str
    status: int
    detail: str | None = None
    instance: str | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_error(cls, exc: FoundationError) -> ProblemDetail:
        problem = exc.problem
        return cls(
            type=problem.type,
            title=problem.title,
            status=problem.status,
            detail=problem.detail,
            instance=problem.instance,
            extensions=dict(problem.extra),
        )


# ==============================================================================
# CONVERSION MODELS
# ==============================================================================


class ConfigPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    data: str = ""


class ConversionRequest(BaseModel):
    """Conversion extension request sent by the CI server."""

    model_config = ConfigDict(extra="allow")

    build: dict[str, Any] = Field(default_factory=dict)
    repo: dict[str, Any] = Field(default_factory=dict)
    config: ConfigPayload = Field(default_factory=ConfigPayload)


class ConversionResponse(BaseModel):
    data: str


class HealthStatus(BaseModel):
    status: str = "ok"
    version: str


__all__ = [
    "ConfigPayload",
    "ConversionRequest",
    "ConversionResponse",
    "HealthStatus",
    "ProblemDetail",
]
