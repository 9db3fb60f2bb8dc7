"""
Versioned namespaces over the Django cache framework.

Each namespace carries a version counter stored in the cache itself.
Bumping the counter orphans every key of the namespace at once (whole-cache
invalidation); orphaned entries simply expire with their timeout.
"""

import hashlib
import logging
from typing import Any, Optional
from urllib.parse import quote

from django.core.cache import caches

from .config_proxy import get_setting

logger = logging.getLogger(__name__)

_MAX_KEY_LENGTH = 200


class VersionedCache:
    """Cache namespace with per-key access and O(1) whole-namespace invalidation."""

    def __init__(
        self,
        namespace: str,
        timeout: Optional[int] = None,
        alias: Optional[str] = None,
        key_prefix: Optional[str] = None,
    ):
        self.namespace = namespace
        self.timeout = timeout
        self._alias = alias
        self._key_prefix = key_prefix

    @property
    def backend(self):
        return caches[self._alias or get_setting("cache.alias", "default")]

    @property
    def prefix(self) -> str:
        return f"{self._key_prefix or get_setting('cache.key_prefix', 'rail:authz')}:{self.namespace}"

    # --- Versioning ---

    def get_version(self) -> int:
        version_key = f"{self.prefix}:ver"
        version = self.backend.get(version_key)
        if version is None:
            self.backend.set(version_key, 1, timeout=None)
            return 1
        try:
            return int(version)
        except (TypeError, ValueError):
            return 1

    def bump_version(self) -> None:
        """Invalidate every key of the namespace."""
        version_key = f"{self.prefix}:ver"
        try:
            self.backend.incr(version_key)
        except ValueError:
            current = self.backend.get(version_key) or 1
            self.backend.set(version_key, int(current) + 1, timeout=None)
        logger.debug("Cache namespace '%s' invalidated", self.namespace)

    # --- Keys ---

    def make_key(self, *parts: Any) -> str:
        body = ":".join(quote(str(part), safe="") for part in parts)
        key = f"{self.prefix}:v{self.get_version()}:{body}"
        if len(key) > _MAX_KEY_LENGTH:
            digest = hashlib.sha256(body.encode("utf-8")).hexdigest()
            key = f"{self.prefix}:v{self.get_version()}:h:{digest}"
        return key

    def get(self, *parts: Any) -> Any:
        return self.backend.get(self.make_key(*parts))

    def set(self, value: Any, *parts: Any) -> None:
        if self.timeout == 0:
            return
        if self.timeout is None:
            self.backend.set(self.make_key(*parts), value)
        else:
            self.backend.set(self.make_key(*parts), value, timeout=self.timeout)

    def delete(self, *parts: Any) -> None:
        self.backend.delete(self.make_key(*parts))


__all__ = ["VersionedCache"]
