import pytest

from drone_cache_convert.cache import DEFAULT_CACHE_PATHS, CacheRegistry, default_registry


def test_default_table_is_reproduced_in_order():
    registry = default_registry()
    assert registry.entries() == (
        ("composer", "/root/.composer/cache"),
        ("npm", "/root/.npm"),
        ("yarn", ".yarn/cache"),
        ("dotnetcore", "/root/.nuget/packages"),
        ("gradle", "/root/.gradle/caches"),
        ("ivy2", "/root/.ivy2/cache"),
        ("maven", "/root/.m2/repository"),
        ("pip", "/root/.cache/pip"),
        ("sbt", "/root/.sbt"),
    )
    assert dict(registry) == dict(DEFAULT_CACHE_PATHS)


def test_lookup_returns_none_for_unknown_kinds():
    registry = CacheRegistry()
    assert registry.lookup("npm") == "/root/.npm"
    assert registry.lookup("bower") is None
    assert registry.lookup(["npm"]) is None
    assert registry.is_supported("maven")
    assert not registry.is_supported("bower")
    assert not registry.is_supported(42)


def test_only_yarn_is_relative():
    registry = CacheRegistry()
    relative = [kind for kind, path in registry.entries() if not registry.is_rooted(path)]
    assert relative == ["yarn"]


def test_registry_is_read_only():
    registry = CacheRegistry()
    with pytest.raises(TypeError):
        registry["bower"] = "/root/.bower"  # type: ignore[index]


def test_registry_copies_custom_tables():
    table = {"bower": "/root/.bower", "local": "cache"}
    registry = CacheRegistry(table)
    table["extra"] = "/extra"
    assert list(registry) == ["bower", "local"]
    assert len(registry) == 2


def test_paths_follow_registry_order():
    registry = CacheRegistry()
    assert registry.paths_for({"sbt", "npm", "yarn"}) == ["/root/.npm", ".yarn/cache", "/root/.sbt"]
    assert registry.rooted_entries({"sbt", "yarn", "npm"}) == [
        ("npm", "/root/.npm"),
        ("sbt", "/root/.sbt"),
    ]
