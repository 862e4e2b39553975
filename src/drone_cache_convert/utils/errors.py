"""Problem detail helpers for consistent error reporting across the service.

Key Responsibilities:
    - Provide RFC 7807 compliant data structures used by the gateway when
      returning errors
    - Supply a base exception that carries problem details for translation to
      API responses
    - Define the conversion error taxonomy raised by the rewriting engine

Collaborators:
    - Upstream: The rewriter, settings loader and signature verifier raise
      ``FoundationError`` subclasses
    - Downstream: Gateway exception handlers serialise :class:`ProblemDetail`
      instances into HTTP responses

Side Effects:
    - None; helpers are pure data containers

Thread Safety:
    - Thread-safe; instances are created per failure and never shared
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

# ==============================================================================
# TYPE DEFINITIONS
# ==============================================================================

__all__ = [
    "ConfigurationError",
    "ConversionError",
    "FoundationError",
    "InvalidDocumentError",
    "ParseError",
    "ProblemDetail",
]


@dataclass(slots=True)
class ProblemDetail:
    """Lightweight problem details object compliant with RFC 7807."""

    title: str
    status: int
    detail: str | None = None
    type: str = "about:blank"
    instance: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def model_dump(self) -> dict[str, Any]:
        """Return a dictionary representation with optional fields dropped."""
        payload = {key: value for key, value in asdict(self).items() if value is not None}
        if not payload.get("extra"):
            payload.pop("extra", None)
        return payload


class FoundationError(RuntimeError):
    """Base exception that carries a :class:`ProblemDetail` instance."""

    status: int = 500
    type: str = "about:blank"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        detail: str | None = None,
        type: str | None = None,
        instance: str | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialise the exception with structured problem detail attributes.

        Args:
            message: Human readable error summary.
            status: HTTP status code, defaults to the class level ``status``.
            detail: Optional detailed description of the failure.
            type: Problem type URI, defaults to the class level ``type``.
            instance: Optional URI reference identifying the specific occurrence.
            extra: Additional attributes included in the serialized payload.
        """
        super().__init__(message)
        self.problem = ProblemDetail(
            title=message,
            status=status if status is not None else self.status,
            detail=detail,
            type=type or self.type,
            instance=instance,
            extra=extra or {},
        )


# ==============================================================================
# CONVERSION ERRORS
# ==============================================================================


class ConversionError(FoundationError):
    """Raised when a pipeline configuration cannot be rewritten."""

    status = 422
    type = "https://drone-cache-convert/errors/conversion"


class ParseError(ConversionError):
    """The submitted text is not a well-formed YAML document stream."""

    status = 400
    type = "https://drone-cache-convert/errors/parse"

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        detail: str | None = None,
    ) -> None:
        extra: dict[str, Any] = {}
        if line is not None:
            extra["line"] = line
        if column is not None:
            extra["column"] = column
        super().__init__(message, detail=detail, extra=extra)
        self.line = line
        self.column = column


class InvalidDocumentError(ConversionError):
    """A document has a structure the rewriter cannot extend."""

    type = "https://drone-cache-convert/errors/invalid-document"


class ConfigurationError(FoundationError):
    """Application settings are missing or invalid."""

    type = "https://drone-cache-convert/errors/configuration"
