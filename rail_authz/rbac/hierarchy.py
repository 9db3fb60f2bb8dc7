"""
Role hierarchy resolution.

Roles form a forest: each role has at most one parent and inherits every
permission of its ancestors. Parent links are checked for cycles before they
are written, and every traversal also carries its own visited-set guard so
corrupted data cannot make a read loop.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from ..cache import VersionedCache
from ..config_proxy import get_int_setting
from ..exceptions import (
    CircularHierarchyError,
    HierarchyDepthExceededError,
    RoleNotFoundError,
)
from .types import Role, RoleHierarchyNode, UserRoleAssignment

if TYPE_CHECKING:
    from ..providers.base import RoleProvider

logger = logging.getLogger(__name__)


class RoleHierarchyResolver:
    """
    Ancestor, descendant and effective-permission queries over the role forest.

    Effective permissions and ancestor chains are cached per role in a
    versioned cache namespace; any hierarchy mutation bumps the version,
    invalidating every cached result at once.
    """

    def __init__(
        self,
        provider: "RoleProvider",
        max_depth: Optional[int] = None,
        cache: Optional[VersionedCache] = None,
        key_prefix: Optional[str] = None,
    ):
        self.provider = provider
        self._max_depth = max_depth
        self._cache = cache or VersionedCache(
            "roles",
            timeout=get_int_setting("role_hierarchy.cache_timeout", 300, minimum=0),
            key_prefix=key_prefix,
        )

    @property
    def max_depth(self) -> int:
        if self._max_depth is not None:
            return self._max_depth
        return get_int_setting("role_hierarchy.max_depth", 10, minimum=1)

    def invalidate(self, **kwargs) -> None:
        """Drop every cached ancestor chain and permission set."""
        self._cache.bump_version()

    # --- Mutations ---

    def would_create_cycle(self, child_id: str, parent_id: Optional[str]) -> bool:
        """True if making ``parent_id`` the parent of ``child_id`` closes a loop."""
        if parent_id is None:
            return False
        if child_id == parent_id:
            return True
        descendant_ids = {role.id for role in self._collect_descendants(child_id, None)}
        return parent_id in descendant_ids

    def set_parent_role(
        self,
        child_id: str,
        parent_id: Optional[str],
        assigned_by: Optional[str] = None,
    ) -> None:
        """
        Set or clear (``parent_id=None``) the parent of a role.

        Raises:
            RoleNotFoundError: If either role does not exist.
            CircularHierarchyError: If the link would create a cycle. The
                hierarchy is left unchanged.
        """
        if self.provider.get_role(child_id) is None:
            raise RoleNotFoundError(f"Role '{child_id}' not found", role_id=child_id)
        if parent_id is not None and self.provider.get_role(parent_id) is None:
            raise RoleNotFoundError(f"Role '{parent_id}' not found", role_id=parent_id)

        if self.would_create_cycle(child_id, parent_id):
            chain = [child_id] + self._path_between(parent_id, child_id)
            logger.warning(
                "Rejected parent link %s -> %s: circular hierarchy", child_id, parent_id
            )
            raise CircularHierarchyError(
                f"Setting '{parent_id}' as parent of '{child_id}' would create "
                f"a circular role hierarchy",
                role_id=child_id,
                parent_id=parent_id,
                chain=chain,
            )

        self.provider.set_parent_role(child_id, parent_id, assigned_by)
        self.invalidate()
        logger.info("Role '%s' parent set to %r", child_id, parent_id)

    def _path_between(self, start_id: str, target_id: str) -> list[str]:
        """Ids from ``start_id`` up the ancestor chain to ``target_id``."""
        path = [start_id]
        for role in self._walk_ancestors(start_id, None):
            path.append(role.id)
            if role.id == target_id:
                break
        return path

    # --- Traversals ---

    def get_ancestor_roles(self, role_id: str, max_depth: Optional[int] = None) -> list[Role]:
        """Ancestors nearest first; stops at the first missing link."""
        depth = self.max_depth if max_depth is None else max_depth
        cached = self._cache.get("ancestors", role_id, depth)
        if cached is not None:
            return list(cached)
        ancestors = self._walk_ancestors(role_id, depth)
        self._cache.set(ancestors, "ancestors", role_id, depth)
        return ancestors

    def _walk_ancestors(self, role_id: str, max_depth: Optional[int]) -> list[Role]:
        ancestors: list[Role] = []
        current = self.provider.get_role(role_id)
        if current is None:
            return ancestors

        visited = {role_id}
        while max_depth is None or len(ancestors) < max_depth:
            parent_id = current.parent_role_id
            if not parent_id:
                break
            if parent_id in visited:
                logger.warning("Cycle detected in role hierarchy at '%s'", parent_id)
                break
            parent = self.provider.get_role(parent_id)
            if parent is None:
                break
            ancestors.append(parent)
            visited.add(parent_id)
            current = parent
        return ancestors

    def get_descendant_roles(
        self, role_id: str, max_depth: Optional[int] = None
    ) -> list[Role]:
        """Descendants in depth-first order, bounded by ``max_depth`` levels."""
        return self._collect_descendants(
            role_id, self.max_depth if max_depth is None else max_depth
        )

    def _collect_descendants(self, role_id: str, max_depth: Optional[int]) -> list[Role]:
        descendants: list[Role] = []
        if max_depth is not None and max_depth < 1:
            return descendants

        processed = {role_id}
        stack = [(child, 1) for child in reversed(self.provider.get_child_roles(role_id))]
        while stack:
            role, depth = stack.pop()
            if role.id in processed:
                continue
            processed.add(role.id)
            descendants.append(role)
            if max_depth is None or depth < max_depth:
                children = self.provider.get_child_roles(role.id)
                stack.extend((child, depth + 1) for child in reversed(children))
        return descendants

    # --- Permissions ---

    def get_effective_permissions(self, role_id: str) -> frozenset[str]:
        """Own permissions united with every ancestor's; unknown roles have none."""
        cached = self._cache.get("perms", role_id)
        if cached is not None:
            return frozenset(cached)
        return self._resolve_permissions(role_id)

    def _resolve_permissions(self, role_id: str) -> frozenset[str]:
        resolving: list[Role] = []
        resolving_ids: set[str] = set()
        inherited: frozenset[str] = frozenset()
        cycle = False

        current_id: Optional[str] = role_id
        while current_id:
            if current_id in resolving_ids:
                logger.warning(
                    "Cycle detected in role hierarchy while resolving '%s'", role_id
                )
                cycle = True
                break
            if resolving:
                cached = self._cache.get("perms", current_id)
                if cached is not None:
                    inherited = frozenset(cached)
                    break
            role = self.provider.get_role(current_id)
            if role is None:
                break
            resolving.append(role)
            resolving_ids.add(current_id)
            current_id = role.parent_role_id

        permissions = inherited
        for role in reversed(resolving):
            permissions = permissions | role.permission_ids
            if not cycle:
                self._cache.set(sorted(permissions), "perms", role.id)
        return permissions

    def role_has_permission(self, role_id: str, permission: str) -> bool:
        return permission in self.get_effective_permissions(role_id)

    # --- User assignments ---

    def get_user_roles(
        self, user_id: str, at: Optional[datetime] = None
    ) -> list[UserRoleAssignment]:
        """Active (non-expired) assignments of the user."""
        return [
            assignment
            for assignment in self.provider.get_user_role_assignments(user_id)
            if assignment.is_active(at)
        ]

    def has_role(self, user_id: str, role_id: str, at: Optional[datetime] = None) -> bool:
        return any(a.role_id == role_id for a in self.get_user_roles(user_id, at))

    def get_user_permissions(
        self, user_id: str, at: Optional[datetime] = None
    ) -> frozenset[str]:
        permissions: set[str] = set()
        for assignment in self.get_user_roles(user_id, at):
            permissions |= self.get_effective_permissions(assignment.role_id)
        return frozenset(permissions)

    def has_permission(
        self, user_id: str, permission: str, at: Optional[datetime] = None
    ) -> bool:
        """True if any active role of the user grants ``permission``."""
        return any(
            permission in self.get_effective_permissions(assignment.role_id)
            for assignment in self.get_user_roles(user_id, at)
        )

    # --- Administration ---

    def validate_hierarchy(self, max_depth: Optional[int] = None) -> int:
        """
        Audit every role's ancestor chain.

        Returns:
            Number of roles checked.

        Raises:
            CircularHierarchyError: If any chain loops back on itself.
            HierarchyDepthExceededError: If any chain is deeper than ``max_depth``.
        """
        depth = self.max_depth if max_depth is None else max_depth
        roles = {role.id: role for role in self.provider.list_roles()}

        for role in roles.values():
            chain = [role.id]
            current = role
            while current.parent_role_id:
                parent_id = current.parent_role_id
                if parent_id in chain:
                    cycle = chain + [parent_id]
                    raise CircularHierarchyError(
                        f"Circular role hierarchy: {' -> '.join(cycle)}",
                        role_id=role.id,
                        parent_id=parent_id,
                        chain=cycle,
                    )
                parent = roles.get(parent_id)
                if parent is None:
                    break
                chain.append(parent_id)
                if len(chain) - 1 > depth:
                    raise HierarchyDepthExceededError(
                        f"Role '{role.id}' has more than {depth} ancestors",
                        role_id=role.id,
                        max_depth=depth,
                    )
                current = parent

        logger.debug("Validated role hierarchy (%s roles)", len(roles))
        return len(roles)

    def get_role_hierarchy(self) -> list[RoleHierarchyNode]:
        """Forest of roles; roles with a missing parent are treated as roots."""
        roles = sorted(self.provider.list_roles(), key=lambda role: role.id)
        known = {role.id for role in roles}
        children: dict[str, list[Role]] = {}
        for role in roles:
            if role.parent_role_id in known:
                children.setdefault(role.parent_role_id, []).append(role)

        visited: set[str] = set()

        def build(role: Role) -> RoleHierarchyNode:
            visited.add(role.id)
            node = RoleHierarchyNode(role=role)
            for child in children.get(role.id, []):
                if child.id not in visited:
                    node.children.append(build(child))
            return node

        return [
            build(role)
            for role in roles
            if not role.parent_role_id or role.parent_role_id not in known
        ]


__all__ = ["RoleHierarchyResolver"]
