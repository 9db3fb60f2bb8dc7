"""
Tests for settings resolution and the cache helper.
"""

import pytest

from rail_authz.cache import VersionedCache
from rail_authz.config_proxy import get_int_setting, get_setting, settings_proxy
from rail_authz.providers import InMemoryAuthzStore, build_providers
from rail_authz.providers.orm import DjangoRoleProvider
from rail_authz.testing import override_authz_settings

pytestmark = pytest.mark.unit


def test_library_defaults_apply():
    with override_authz_settings({}):
        assert get_setting("role_hierarchy.max_depth") == 10
        assert get_setting("resource_hierarchy.cache_timeout") == 300
        assert get_setting("provider.backend") == "orm"
        assert get_setting("missing.key", "fallback") == "fallback"


def test_project_settings_override_defaults():
    with override_authz_settings({"role_hierarchy": {"max_depth": 4}}):
        assert get_setting("role_hierarchy.max_depth") == 4
        assert get_setting("role_hierarchy.cache_timeout") == 300


def test_runtime_overrides_take_precedence():
    settings_proxy.set("resource_hierarchy.max_depth", 2)

    assert get_setting("resource_hierarchy.max_depth") == 2

    settings_proxy.clear_runtime()
    assert get_setting("resource_hierarchy.max_depth") == 10


def test_int_settings_fall_back_on_invalid_values():
    with override_authz_settings(
        {"role_hierarchy": {"max_depth": "deep", "cache_timeout": -5}}
    ):
        assert get_int_setting("role_hierarchy.max_depth", 10, minimum=1) == 10
        assert get_int_setting("role_hierarchy.cache_timeout", 300, minimum=0) == 300


def test_build_providers_by_backend():
    memory = build_providers("memory")
    orm = build_providers("ORM")

    assert isinstance(memory.roles, InMemoryAuthzStore)
    assert memory.roles is memory.grants
    assert isinstance(orm.roles, DjangoRoleProvider)
    with pytest.raises(ValueError):
        build_providers("ldap")


def test_versioned_cache_bump_orphans_keys():
    cache = VersionedCache("sample", timeout=60)
    cache.set({"a": 1}, "entry", "x")

    assert cache.get("entry", "x") == {"a": 1}
    cache.bump_version()
    assert cache.get("entry", "x") is None


def test_versioned_cache_hashes_long_keys():
    cache = VersionedCache("sample", timeout=60)
    long_part = "x" * 300

    key = cache.make_key("entry", long_part)
    cache.set("value", "entry", long_part)

    assert len(key) < 250
    assert cache.get("entry", long_part) == "value"


def test_runtime_override_of_a_section_refreshes_cached_children():
    assert get_setting("role_hierarchy.max_depth") == 10

    settings_proxy.set("role_hierarchy", {"max_depth": 3})

    assert get_setting("role_hierarchy.max_depth") == 3
    assert get_setting("role_hierarchy.cache_timeout") == 300


def test_runtime_override_of_a_child_refreshes_cached_section():
    assert get_setting("cache")["alias"] == "default"

    settings_proxy.set("cache.alias", "secondary")

    assert get_setting("cache") == {"alias": "secondary"}
    assert get_setting("cache.key_prefix") == "rail:authz"
