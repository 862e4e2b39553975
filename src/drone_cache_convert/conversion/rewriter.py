"""Pipeline document rewriter wrapping cache-enabled steps.

This module implements the conversion performed for every pipeline submitted
by the CI server. Steps that list supported ``caches`` are surrounded by a
restore step and a rebuild step running the cache plugin image, and the
pipeline gains the volumes those steps mount.

Key Responsibilities:
    - Parse a multi-document configuration stream
    - Expand cache-eligible steps into restore/original/rebuild triples
    - Aggregate the cache kinds used by a document into volume declarations
    - Serialise the documents back in input order

Collaborators:
    - Upstream: Gateway conversion endpoint and the ``convert`` CLI command
    - Downstream: :mod:`.yaml_stream`, :mod:`.steps`,
      :class:`~drone_cache_convert.cache.registry.CacheRegistry`

Side Effects:
    - Emits debug log events; never mutates the parsed input

Thread Safety:
    - Thread-safe: configuration is frozen at construction and every document
      is rewritten on a private clone

Example:
    >>> rewriter = DocumentRewriter(image="meltwater/drone-cache", cache_path="/var/lib/cache")
    >>> print(rewriter.rewrite("kind: pipeline\\nsteps:\\n- name: lint\\n"))
    ---
    kind: pipeline
    steps:
    - name: lint
    <BLANKLINE>
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from ..cache.registry import CacheRegistry, default_registry
from ..config.settings import DEFAULT_CACHE_PATH, DEFAULT_IMAGE
from ..utils.errors import InvalidDocumentError
from .environment import derive_plugin_environment
from .steps import (
    CACHE_ACTIONS,
    build_cache_step,
    cache_mounts,
    document_volumes,
    extend_volumes,
)
from .yaml_stream import dump_documents, parse_documents

logger = structlog.get_logger(__name__)

PIPELINE_KIND = "pipeline"
MAX_DOCUMENT_NODES = 100_000
MAX_DOCUMENT_DEPTH = 256


# ==============================================================================
# CONFIGURATION
# ==============================================================================


@dataclass(frozen=True, slots=True)
class RewriterConfig:
    """Immutable inputs shared by every rewrite."""

    image: str = DEFAULT_IMAGE
    cache_path: str = DEFAULT_CACHE_PATH
    environment: Mapping[str, str] = field(default_factory=dict)
    registry: CacheRegistry = field(default_factory=default_registry)


@dataclass(slots=True)
class RewriteStats:
    """Counters describing one :meth:`DocumentRewriter.rewrite_documents` call."""

    documents: int = 0
    pipelines: int = 0
    expanded_steps: int = 0


@dataclass(frozen=True, slots=True)
class ConversionResult:
    text: str
    stats: RewriteStats


# ==============================================================================
# HELPERS
# ==============================================================================


class _DocumentCloner:
    """Copies one document while tracking the containers on the current path."""

    __slots__ = ("_active", "_remaining", "_max_depth")

    def __init__(self, max_nodes: int, max_depth: int) -> None:
        self._active: set[int] = set()
        self._remaining = max_nodes
        self._max_depth = max_depth

    def clone(self, value: Any, depth: int = 0) -> Any:
        self._remaining -= 1
        if self._remaining < 0:
            raise InvalidDocumentError(
                "Document is too large",
                detail="Alias expansion exceeds the node limit",
            )
        if not isinstance(value, (dict, list)):
            return value
        if depth >= self._max_depth:
            raise InvalidDocumentError(
                "Document is nested too deeply",
                detail=f"Nesting exceeds {self._max_depth} levels",
            )
        marker = id(value)
        if marker in self._active:
            raise InvalidDocumentError(
                "Document contains a recursive alias",
                detail="An anchor is referenced from inside its own node",
            )
        self._active.add(marker)
        try:
            if isinstance(value, dict):
                return {key: self.clone(item, depth + 1) for key, item in value.items()}
            return [self.clone(item, depth + 1) for item in value]
        finally:
            self._active.discard(marker)


def clone_document(
    value: Any,
    *,
    max_nodes: int = MAX_DOCUMENT_NODES,
    max_depth: int = MAX_DOCUMENT_DEPTH,
) -> Any:
    """Return a recursive copy of a parsed YAML value.

    Unlike :func:`copy.deepcopy` no identity is shared between nodes, so
    sequences reached through YAML aliases become independent copies.

    Raises:
        InvalidDocumentError: When an alias refers to one of its own ancestors,
            or the expanded copy exceeds ``max_nodes`` nodes or ``max_depth``
            levels.
    """
    return _DocumentCloner(max_nodes, max_depth).clone(value)


def requested_caches(step: Any, registry: CacheRegistry) -> set[str]:
    """Return the supported, de-duplicated cache kinds requested by ``step``."""
    if not isinstance(step, dict):
        return set()
    caches = step.get("caches")
    if not isinstance(caches, list):
        return set()
    return {kind for kind in caches if registry.is_supported(kind)}


def is_pipeline(document: Any) -> bool:
    return (
        isinstance(document, dict)
        and document.get("kind") == PIPELINE_KIND
        and "steps" in document
    )


# ==============================================================================
# REWRITER
# ==============================================================================


class DocumentRewriter:
    """Rewrite CI configuration streams to add cache restore/rebuild steps."""

    def __init__(
        self,
        image: str = DEFAULT_IMAGE,
        cache_path: str = DEFAULT_CACHE_PATH,
        environment: Mapping[str, str] | None = None,
        *,
        registry: CacheRegistry | None = None,
    ) -> None:
        plugin_environment = derive_plugin_environment(environment)
        logger.debug(
            "conversion.environment",
            variables=sorted(plugin_environment),
        )
        self._config = RewriterConfig(
            image=image,
            cache_path=cache_path,
            environment=plugin_environment,
            registry=registry if registry is not None else default_registry(),
        )

    @property
    def config(self) -> RewriterConfig:
        return self._config

    def rewrite(self, config_text: str) -> str:
        """Rewrite every document of ``config_text`` and return the new stream.

        Raises:
            ParseError: When the stream is not valid YAML. Nothing is rewritten
                in that case.
        """
        return self.convert(config_text).text

    def convert(self, config_text: str) -> ConversionResult:
        """Like :meth:`rewrite` but also report what was changed."""
        documents = parse_documents(config_text)
        rewritten, stats = self.rewrite_documents(documents)
        output = dump_documents(rewritten)
        logger.debug(
            "conversion.completed",
            documents=stats.documents,
            pipelines=stats.pipelines,
            expanded_steps=stats.expanded_steps,
        )
        return ConversionResult(text=output, stats=stats)

    def rewrite_documents(self, documents: list[Any]) -> tuple[list[Any], RewriteStats]:
        stats = RewriteStats(documents=len(documents))
        rewritten = []
        for document in documents:
            result, expanded = self.transform_document(document)
            if expanded is not None:
                stats.pipelines += 1
                stats.expanded_steps += expanded
            rewritten.append(result)
        return rewritten, stats

    def transform_document(self, document: Any) -> tuple[Any, int | None]:
        """Return a rewritten clone of ``document`` and its expanded step count.

        The count is ``None`` when the document is not a pipeline with steps.
        """
        doc = clone_document(document)
        if not is_pipeline(doc) or not isinstance(doc["steps"], list):
            return doc, None

        registry = self._config.registry
        caches_used: set[str] = set()
        steps: list[Any] = []
        expanded = 0
        for step in doc["steps"]:
            step_caches = requested_caches(step, registry)
            if not step_caches:
                steps.append(step)
                continue
            caches_used.update(step_caches)
            steps.extend(self._expand_step(step, step_caches))
            expanded += 1
        doc["steps"] = steps

        if caches_used:
            extend_volumes(
                doc,
                document_volumes(self._config.cache_path, caches_used, registry),
                owner="pipeline",
            )
        return doc, expanded

    def _expand_step(self, step: dict[str, Any], caches: set[str]) -> list[dict[str, Any]]:
        config = self._config
        restore, rebuild = (
            build_cache_step(
                step,
                action,
                caches,
                image=config.image,
                environment=config.environment,
                registry=config.registry,
            )
            for action in CACHE_ACTIONS
        )
        owner = f"step {step.get('name')!r}"
        for target in (restore, step, rebuild):
            extend_volumes(target, cache_mounts(caches, config.registry), owner=owner)
        return [restore, step, rebuild]


__all__ = [
    "MAX_DOCUMENT_DEPTH",
    "MAX_DOCUMENT_NODES",
    "PIPELINE_KIND",
    "ConversionResult",
    "DocumentRewriter",
    "RewriteStats",
    "RewriterConfig",
    "clone_document",
    "is_pipeline",
    "requested_caches",
]
