"""Cache kind registry."""

from .registry import DEFAULT_CACHE_PATHS, CacheRegistry, default_registry

__all__ = ["DEFAULT_CACHE_PATHS", "CacheRegistry", "default_registry"]
