"""
Configuration management for Rail Authz.

This module provides a settings proxy that resolves engine settings from the
Django ``RAIL_AUTHZ`` dictionary first and the library defaults second.
"""

from typing import Any, Optional

from django.conf import settings

from .defaults import LIBRARY_DEFAULTS

SETTINGS_NAME = "RAIL_AUTHZ"


class SettingsProxy:
    """
    Proxy for accessing Rail Authz settings with hierarchical resolution.

    Settings are resolved in the following order:
    1. Runtime overrides (via ``set``)
    2. Global Django settings (RAIL_AUTHZ)
    3. Library defaults (LIBRARY_DEFAULTS)
    """

    def __init__(self):
        self._cache: dict[str, Any] = {}
        self._runtime: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value with hierarchical resolution and caching.

        Args:
            key: Setting key to retrieve (dot notation for nested access)
            default: Default value if setting is not found

        Returns:
            The setting value from the highest priority source
        """
        if key in self._cache:
            return self._cache[key]

        for source in (self._runtime, self._get_django_settings(), LIBRARY_DEFAULTS):
            value = self._get_nested_value(source, key)
            if value is not None:
                self._cache[key] = value
                return value

        return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a setting value (runtime only, not persistent).

        Args:
            key: Setting key to set
            value: Value to set
        """
        # drop the key, its children and its parents
        for cached_key in list(self._cache):
            if (
                cached_key == key
                or cached_key.startswith(f"{key}.")
                or key.startswith(f"{cached_key}.")
            ):
                del self._cache[cached_key]
        keys = key.split(".")
        current = self._runtime
        for k in keys[:-1]:
            current = current.setdefault(k, {})
        current[keys[-1]] = value

    def clear_cache(self) -> None:
        """Clear resolved values so the next lookups read settings again."""
        self._cache.clear()

    def clear_runtime(self) -> None:
        """Drop runtime overrides."""
        self._runtime.clear()
        self._cache.clear()

    def _get_django_settings(self) -> dict[str, Any]:
        value = getattr(settings, SETTINGS_NAME, None)
        return value if isinstance(value, dict) else {}

    def _get_nested_value(self, data: dict[str, Any], key: str) -> Any:
        """
        Get nested value from dictionary using dot notation.

        Args:
            data: Dictionary to search in
            key: Key to retrieve

        Returns:
            The value or None if not found
        """
        if not isinstance(data, dict):
            return None

        current = data
        for k in key.split("."):
            if not isinstance(current, dict) or k not in current:
                return None
            current = current[k]
        return current


# Global settings proxy instance
settings_proxy = SettingsProxy()


def get_settings_proxy() -> SettingsProxy:
    """Return the global settings proxy."""
    return settings_proxy


def get_setting(key: str, default: Any = None) -> Any:
    """
    Get a setting value using the hierarchical settings system.

    Args:
        key: Setting key to retrieve
        default: Default value if setting is not found

    Returns:
        The setting value from the highest priority source
    """
    return settings_proxy.get(key, default)


def get_int_setting(key: str, default: int, minimum: Optional[int] = None) -> int:
    """Read a setting coerced to ``int``; invalid values fall back to ``default``."""
    value = get_setting(key, default)
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value
