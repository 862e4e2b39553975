"""Configuration rewriting engine."""

from __future__ import annotations

from .environment import derive_plugin_environment
from .rewriter import (
    ConversionResult,
    DocumentRewriter,
    RewriterConfig,
    RewriteStats,
    clone_document,
)
from .yaml_stream import dump_documents, parse_documents

__all__ = [
    "ConversionResult",
    "DocumentRewriter",
    "RewriteStats",
    "RewriterConfig",
    "clone_document",
    "derive_plugin_environment",
    "dump_documents",
    "parse_documents",
]
