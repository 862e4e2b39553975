import pytest

from drone_cache_convert.conversion.environment import (
    DEFAULT_CACHE_ROOT,
    cache_root,
    derive_plugin_environment,
)


def test_cache_prefix_is_rewritten_to_plugin_prefix():
    environment = derive_plugin_environment(
        {
            "CACHE_FOO": "bar",
            "CACHE_CACHE_NAME": "nested",
            "XCACHE_IGNORED": "x",
            "HOME": "/root",
            "PLUGIN_SECRET": "hidden",
        }
    )
    assert dict(environment) == {"PLUGIN_FOO": "bar", "PLUGIN_CACHE_NAME": "nested"}


def test_missing_environment_yields_empty_mapping():
    assert dict(derive_plugin_environment(None)) == {}


def test_derived_environment_is_read_only():
    environment = derive_plugin_environment({"CACHE_FOO": "bar"})
    with pytest.raises(TypeError):
        environment["PLUGIN_FOO"] = "baz"  # type: ignore[index]


def test_cache_root_defaults_and_override():
    assert cache_root({}) == DEFAULT_CACHE_ROOT == "/tmp/cache"
    assert cache_root({"PLUGIN_FILESYSTEM_CACHE_ROOT": "/bar"}) == "/bar"
