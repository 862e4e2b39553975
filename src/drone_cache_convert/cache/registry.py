"""Static registry of supported cache kinds and their on-disk locations.

Each cache kind names a package manager or build tool convention (``npm``,
``maven`` ...) and maps to the directory that tool uses for its cache inside
a step container. Relative paths are resolved against the step workspace and
therefore never receive a dedicated volume.

Thread Safety:
    - Thread-safe: the table is frozen at construction and only read afterwards
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, Mapping
from types import MappingProxyType

# ==============================================================================
# DEFAULT TABLE
# ==============================================================================

DEFAULT_CACHE_PATHS: Mapping[str, str] = MappingProxyType(
    {
        "composer": "/root/.composer/cache",
        "npm": "/root/.npm",
        "yarn": ".yarn/cache",
        "dotnetcore": "/root/.nuget/packages",
        "gradle": "/root/.gradle/caches",
        "ivy2": "/root/.ivy2/cache",
        "maven": "/root/.m2/repository",
        "pip": "/root/.cache/pip",
        "sbt": "/root/.sbt",
    }
)


# ==============================================================================
# REGISTRY
# ==============================================================================


class CacheRegistry(Mapping[str, str]):
    """Read-only mapping from cache kind to cache path, in declaration order."""

    __slots__ = ("_paths",)

    def __init__(self, paths: Mapping[str, str] | None = None) -> None:
        source = DEFAULT_CACHE_PATHS if paths is None else paths
        self._paths: Mapping[str, str] = MappingProxyType(dict(source))

    def __getitem__(self, kind: str) -> str:
        return self._paths[kind]

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._paths)!r})"

    def lookup(self, kind: object) -> str | None:
        """Return the path registered for ``kind`` or ``None`` when unsupported."""
        if not isinstance(kind, str):
            return None
        return self._paths.get(kind)

    def is_supported(self, kind: object) -> bool:
        return isinstance(kind, str) and kind in self._paths

    def entries(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._paths.items())

    @staticmethod
    def is_rooted(path: str) -> bool:
        """Return ``True`` when ``path`` is absolute (starts at the filesystem root)."""
        return path.startswith("/")

    def paths_for(self, kinds: Collection[str]) -> list[str]:
        """Return the paths of ``kinds`` in registry order, not in ``kinds`` order."""
        return [path for kind, path in self._paths.items() if kind in kinds]

    def rooted_entries(self, kinds: Collection[str]) -> list[tuple[str, str]]:
        """Return ``(kind, path)`` pairs for ``kinds`` whose path is rooted."""
        return [
            (kind, path)
            for kind, path in self._paths.items()
            if kind in kinds and self.is_rooted(path)
        ]


def default_registry() -> CacheRegistry:
    """Return a registry holding :data:`DEFAULT_CACHE_PATHS`."""
    return CacheRegistry()


__all__ = ["DEFAULT_CACHE_PATHS", "CacheRegistry", "default_registry"]
