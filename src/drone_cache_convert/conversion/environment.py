"""Derivation of the environment handed to generated cache steps."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

CACHE_PREFIX = "CACHE_"
PLUGIN_PREFIX = "PLUGIN_"
CACHE_ROOT_VARIABLE = "PLUGIN_FILESYSTEM_CACHE_ROOT"
DEFAULT_CACHE_ROOT = "/tmp/cache"


def derive_plugin_environment(environment: Mapping[str, str] | None) -> Mapping[str, str]:
    """Return ``CACHE_*`` entries of ``environment`` renamed to ``PLUGIN_*``.

    Only the leading prefix is rewritten; the remainder of the key and the
    value are kept as-is. Every other entry is dropped.
    """
    derived = {
        PLUGIN_PREFIX + key[len(CACHE_PREFIX) :]: value
        for key, value in (environment or {}).items()
        if key.startswith(CACHE_PREFIX)
    }
    return MappingProxyType(derived)


def cache_root(environment: Mapping[str, str]) -> str:
    """Mount path of the shared cache volume inside generated steps."""
    return environment.get(CACHE_ROOT_VARIABLE, DEFAULT_CACHE_ROOT)


__all__ = [
    "CACHE_PREFIX",
    "CACHE_ROOT_VARIABLE",
    "DEFAULT_CACHE_ROOT",
    "PLUGIN_PREFIX",
    "cache_root",
    "derive_plugin_environment",
]
