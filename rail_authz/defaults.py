"""
Default configuration for the rail-authz library.

Every setting consumed by the engine is declared here. Projects override
values through the ``RAIL_AUTHZ`` dictionary in their Django settings; keys
are resolved with dot notation (``"role_hierarchy.max_depth"``).
"""

from __future__ import annotations

from typing import Any

LIBRARY_DEFAULTS: dict[str, Any] = {
    "role_hierarchy": {
        # Bound applied to every ancestor/descendant walk.
        "max_depth": 10,
        "cache_timeout": 300,
    },
    "resource_hierarchy": {
        "max_depth": 10,
        # Ancestor chains are also invalidated on relationship writes;
        # the timeout bounds staleness across processes.
        "cache_timeout": 300,
    },
    "cache": {
        "alias": "default",
        "key_prefix": "rail:authz",
    },
    "rules": {
        "access_rules": [],
        "load_app_rule_files": True,
    },
    "provider": {
        # "orm" uses rail_authz.models, "memory" an empty in-process store.
        "backend": "orm",
    },
    "signals": {
        "enable_model_signals": True,
    },
}
