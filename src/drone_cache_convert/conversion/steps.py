"""Builders for generated cache steps, step mounts and document volumes.

Key Responsibilities:
    - Construct the restore and rebuild steps that wrap a cache-eligible step
    - Produce ``{name, path}`` mounts for rooted cache kinds
    - Produce the document level host and temp volumes backing those mounts

Collaborators:
    - Upstream: :mod:`drone_cache_convert.conversion.rewriter`
    - Downstream: :class:`~drone_cache_convert.cache.registry.CacheRegistry`

Side Effects:
    - :func:`extend_volumes` appends to the ``volumes`` list of the mapping it
      is given; everything else returns fresh objects
"""

from __future__ import annotations

import copy
from collections.abc import Collection, Mapping, MutableMapping
from typing import Any, Literal

from ..cache.registry import CacheRegistry
from ..utils.errors import InvalidDocumentError
from .environment import cache_root

CacheAction = Literal["restore", "rebuild"]

CACHE_ACTIONS: tuple[CacheAction, ...] = ("restore", "rebuild")
SHARED_VOLUME_NAME = "cache"


def cache_step_name(step_name: Any, action: CacheAction) -> str:
    prefix = "" if step_name is None else step_name
    return f"{prefix}-cache-{action}"


def build_cache_step(
    step: Mapping[str, Any],
    action: CacheAction,
    caches: Collection[str],
    *,
    image: str,
    environment: Mapping[str, str],
    registry: CacheRegistry,
) -> dict[str, Any]:
    """Create the restore or rebuild step wrapping ``step``.

    ``settings.mount`` follows registry order so the generated configuration
    is stable regardless of how the caches were listed on the step.
    """
    step_environment = dict(environment)
    cache_step: dict[str, Any] = {
        "name": cache_step_name(step.get("name"), action),
        "image": image,
        "environment": step_environment,
        "settings": {
            "mount": registry.paths_for(caches),
            action: True,
        },
        "volumes": [{"name": SHARED_VOLUME_NAME, "path": cache_root(step_environment)}],
    }
    if "when" in step:
        cache_step["when"] = copy.deepcopy(step["when"])
    return cache_step


def cache_mounts(caches: Collection[str], registry: CacheRegistry) -> list[dict[str, str]]:
    """Return one mount per rooted cache kind; relative kinds get none."""
    return [{"name": kind, "path": path} for kind, path in registry.rooted_entries(caches)]


def document_volumes(
    cache_path: str, caches: Collection[str], registry: CacheRegistry
) -> list[dict[str, Any]]:
    """Return the shared host volume followed by one temp volume per rooted kind."""
    volumes: list[dict[str, Any]] = [{"name": SHARED_VOLUME_NAME, "host": {"path": cache_path}}]
    volumes.extend({"name": kind, "temp": {}} for kind, _ in registry.rooted_entries(caches))
    return volumes


def extend_volumes(
    target: MutableMapping[str, Any], additions: list[dict[str, Any]], *, owner: str
) -> None:
    """Append ``additions`` to ``target['volumes']``, creating the list when missing.

    Raises:
        InvalidDocumentError: When ``volumes`` is present but not a sequence.
    """
    volumes = target.get("volumes")
    if volumes is None:
        volumes = target["volumes"] = []
    elif not isinstance(volumes, list):
        raise InvalidDocumentError(
            "Volumes must be a sequence",
            detail=f"{owner} declares volumes of type {type(volumes).__name__}",
        )
    volumes.extend(additions)


__all__ = [
    "CACHE_ACTIONS",
    "SHARED_VOLUME_NAME",
    "CacheAction",
    "build_cache_step",
    "cache_mounts",
    "cache_step_name",
    "document_volumes",
    "extend_volumes",
]
