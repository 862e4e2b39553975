"""Utility modules shared across the service."""

from .errors import (
    ConfigurationError,
    ConversionError,
    FoundationError,
    InvalidDocumentError,
    ParseError,
    ProblemDetail,
)


__all__ = [
    "ConfigurationError",
    "ConversionError",
    "FoundationError",
    "InvalidDocumentError",
    "ParseError",
    "ProblemDetail",
]
