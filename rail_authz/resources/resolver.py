"""
Resource-scoped permission inheritance.

A grant on a resource applies to every resource below it: a permission held
on a team is effective on the team's projects and on their tasks. Ancestor
chains are discovered one parent at a time through the relationship provider
and cached per resource.
"""

import logging
from typing import TYPE_CHECKING, Optional

from ..cache import VersionedCache
from ..config_proxy import get_int_setting
from .types import ResourceAncestor

if TYPE_CHECKING:
    from ..providers.base import ResourcePermissionProvider, ResourceRelationshipProvider

logger = logging.getLogger(__name__)


class ResourceHierarchyResolver:
    """
    Merges direct and inherited resource grants for a user.

    Ancestor chains are cached per ``(type, id)`` with a bounded timeout.
    Invalidating a resource also drops the cached chains of every resource
    whose chain passed through it.
    """

    def __init__(
        self,
        relationships: "ResourceRelationshipProvider",
        grants: "ResourcePermissionProvider",
        max_depth: Optional[int] = None,
        cache: Optional[VersionedCache] = None,
        key_prefix: Optional[str] = None,
    ):
        self.relationships = relationships
        self.grants = grants
        self._max_depth = max_depth
        self._cache = cache or VersionedCache(
            "resources",
            timeout=get_int_setting("resource_hierarchy.cache_timeout", 300, minimum=0),
            key_prefix=key_prefix,
        )

    @property
    def max_depth(self) -> int:
        if self._max_depth is not None:
            return self._max_depth
        return get_int_setting("resource_hierarchy.max_depth", 10, minimum=1)

    # --- Ancestors ---

    def get_resource_ancestors(
        self, resource_type: str, resource_id: str, max_depth: Optional[int] = None
    ) -> list[ResourceAncestor]:
        """Ancestor chain nearest first, bounded by ``max_depth``."""
        resource_id = str(resource_id)
        depth = self.max_depth if max_depth is None else max_depth

        cached = self._cache.get("ancestors", resource_type, resource_id)
        if cached is not None and cached.get("max_depth") == depth:
            return list(cached["ancestors"])

        ancestors, complete = self._walk_ancestors(resource_type, resource_id, depth)
        if complete:
            self._cache.set(
                {"max_depth": depth, "ancestors": ancestors},
                "ancestors",
                resource_type,
                resource_id,
            )
            self._register_dependents(resource_type, resource_id, ancestors)
        return ancestors

    def _walk_ancestors(
        self, resource_type: str, resource_id: str, max_depth: int
    ) -> tuple[list[ResourceAncestor], bool]:
        ancestors: list[ResourceAncestor] = []
        current = (resource_type, resource_id)
        visited = {current}

        while len(ancestors) < max_depth:
            try:
                parents = self.relationships.get_parent_resources(*current)
            except Exception as exc:
                # this branch ends here; grants found so far still apply
                logger.warning(
                    "Parent lookup failed for %s:%s, treating as no ancestors: %s",
                    current[0],
                    current[1],
                    exc,
                )
                return ancestors, False
            if not parents:
                break
            if len(parents) > 1:
                logger.debug(
                    "Resource %s:%s has %s parents; following the first",
                    current[0],
                    current[1],
                    len(parents),
                )
            parent = parents[0]
            key = (parent.parent_type, str(parent.parent_id))
            if key in visited:
                logger.warning(
                    "Cycle detected in resource relationships at %s:%s", key[0], key[1]
                )
                break
            ancestors.append(
                ResourceAncestor(key[0], key[1], parent.relationship_type)
            )
            visited.add(key)
            current = key
        return ancestors, True

    def _register_dependents(
        self, resource_type: str, resource_id: str, ancestors: list[ResourceAncestor]
    ) -> None:
        entry = [resource_type, resource_id]
        for ancestor in ancestors:
            dependents = self._cache.get("dependents", ancestor.type, ancestor.id) or []
            if entry not in dependents:
                dependents.append(entry)
                self._cache.set(dependents, "dependents", ancestor.type, ancestor.id)

    def invalidate_resource(self, resource_type: str, resource_id: str, **kwargs) -> None:
        """Drop the cached chain of a resource and of everything below it."""
        resource_id = str(resource_id)
        self._cache.delete("ancestors", resource_type, resource_id)
        dependents = self._cache.get("dependents", resource_type, resource_id) or []
        for dep_type, dep_id in dependents:
            self._cache.delete("ancestors", dep_type, dep_id)
        self._cache.delete("dependents", resource_type, resource_id)
        logger.debug(
            "Invalidated ancestor cache for %s:%s (%s dependents)",
            resource_type,
            resource_id,
            len(dependents),
        )

    def clear_cache(self) -> None:
        self._cache.bump_version()

    # --- Permissions ---

    def get_effective_permissions(
        self, user_id: str, resource_type: str, resource_id: str
    ) -> frozenset[str]:
        """Direct grants on the resource united with grants on any ancestor."""
        resource_id = str(resource_id)
        direct = self.grants.get_user_permissions_for_resource(
            user_id, resource_type, resource_id
        )
        ancestors = self.get_resource_ancestors(resource_type, resource_id)
        if not ancestors:
            return frozenset(direct)
        inherited = self.grants.get_user_permissions_for_resources(
            user_id, [ancestor.ref for ancestor in ancestors]
        )
        return frozenset(direct) | frozenset(inherited)

    def has_permission(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        """Direct grant fast path first, then the full inherited set."""
        resource_id = str(resource_id)
        if self.grants.has_direct_permission(user_id, permission, resource_type, resource_id):
            return True
        return permission in self.get_effective_permissions(
            user_id, resource_type, resource_id
        )


__all__ = ["ResourceHierarchyResolver"]
