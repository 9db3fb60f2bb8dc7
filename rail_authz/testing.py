"""
Public test utilities for rail-authz.
"""

from contextlib import contextmanager
from typing import Any, Optional

from django.test import override_settings


@contextmanager
def override_authz_settings(overrides: Optional[dict[str, Any]] = None):
    """
    Temporarily replace ``RAIL_AUTHZ`` and rebuild anything derived from it.

    The settings proxy cache and the process-wide coordinator are reset on
    entry and on exit.
    """
    from rail_authz.config_proxy import settings_proxy
    from rail_authz.coordinator import reset_coordinator

    with override_settings(RAIL_AUTHZ=overrides or {}):
        settings_proxy.clear_cache()
        reset_coordinator()
        try:
            yield
        finally:
            settings_proxy.clear_cache()
            reset_coordinator()


__all__ = ["override_authz_settings"]
