"""
PermissionCoordinator - consumer-facing entry point of the engine.

The coordinator exposes three independent question shapes and never merges
their answers:

- ``has_role_permission``: does any active role of the user grant P?
- ``has_resource_permission``: is P granted to the user on the resource or
  on one of its ancestors?
- ``check_rule``: does any attribute rule for the action match the context?

It also connects the provider change signals to the resolvers' cache
invalidation hooks.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union

from .config_proxy import get_setting
from .providers import ProviderSet, build_providers
from .providers.base import ResourcePermissionProvider, ResourceRelationshipProvider, RoleProvider
from .rbac.hierarchy import RoleHierarchyResolver
from .rbac.types import Role, RoleHierarchyNode, UserRoleAssignment
from .resources.resolver import ResourceHierarchyResolver
from .resources.types import ResourceAncestor, ResourcePermission
from .rules.evaluator import RuleEvaluator
from .rules.loader import load_configured_rules
from .rules.types import AccessContext, AccessRule, RuleDecision
from .signals import (
    resource_relationship_changed,
    role_hierarchy_changed,
    role_permissions_changed,
)

logger = logging.getLogger(__name__)


class PermissionCoordinator:
    """Composes the role, resource and rule resolvers behind one API."""

    def __init__(
        self,
        roles: RoleProvider,
        relationships: ResourceRelationshipProvider,
        grants: ResourcePermissionProvider,
        rules: Optional[Iterable[AccessRule]] = None,
        role_max_depth: Optional[int] = None,
        resource_max_depth: Optional[int] = None,
        cache_prefix: Optional[str] = None,
    ):
        # coordinators over different providers need distinct cache prefixes
        self.role_resolver = RoleHierarchyResolver(
            roles, max_depth=role_max_depth, key_prefix=cache_prefix
        )
        self.resource_resolver = ResourceHierarchyResolver(
            relationships, grants, max_depth=resource_max_depth, key_prefix=cache_prefix
        )
        self.rule_evaluator = RuleEvaluator(rules or ())
        self._roles = roles
        self._grants = grants
        self._connect_signals()

    @classmethod
    def from_settings(cls) -> "PermissionCoordinator":
        providers: ProviderSet = build_providers()
        return cls(
            providers.roles,
            providers.relationships,
            providers.grants,
            rules=load_configured_rules(),
        )

    def _connect_signals(self) -> None:
        # bound methods are held weakly; receivers vanish with the coordinator
        role_hierarchy_changed.connect(self._on_role_changed)
        role_permissions_changed.connect(self._on_role_changed)
        resource_relationship_changed.connect(self._on_relationship_changed)

    def _on_role_changed(self, sender, role_id: Optional[str] = None, **kwargs) -> None:
        logger.debug("Role '%s' changed; invalidating role cache", role_id)
        self.role_resolver.invalidate()

    def _on_relationship_changed(
        self, sender, resource_type: str = "", resource_id: str = "", **kwargs
    ) -> None:
        self.resource_resolver.invalidate_resource(resource_type, resource_id)

    # --- Checks ---

    def has_role_permission(
        self, user_id: str, permission: str, at: Optional[datetime] = None
    ) -> bool:
        return self.role_resolver.has_permission(user_id, permission, at)

    def has_resource_permission(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        return self.resource_resolver.has_permission(
            user_id, permission, resource_type, resource_id
        )

    def check_rule(
        self, action: str, context: Union[AccessContext, Mapping[str, Any], None]
    ) -> bool:
        return self.rule_evaluator.check(action, context)

    def explain_rule(
        self, action: str, context: Union[AccessContext, Mapping[str, Any], None]
    ) -> RuleDecision:
        return self.rule_evaluator.explain(action, context)

    # --- Role administration ---

    def set_parent_role(
        self, child_id: str, parent_id: Optional[str], assigned_by: Optional[str] = None
    ) -> None:
        self.role_resolver.set_parent_role(child_id, parent_id, assigned_by)

    def validate_hierarchy(self, max_depth: Optional[int] = None) -> int:
        return self.role_resolver.validate_hierarchy(max_depth)

    def get_role_hierarchy(self) -> list[RoleHierarchyNode]:
        return self.role_resolver.get_role_hierarchy()

    def get_ancestor_roles(self, role_id: str, max_depth: Optional[int] = None) -> list[Role]:
        return self.role_resolver.get_ancestor_roles(role_id, max_depth)

    def get_descendant_roles(
        self, role_id: str, max_depth: Optional[int] = None
    ) -> list[Role]:
        return self.role_resolver.get_descendant_roles(role_id, max_depth)

    def get_effective_permissions(self, role_id: str) -> frozenset[str]:
        return self.role_resolver.get_effective_permissions(role_id)

    def get_user_permissions(self, user_id: str) -> frozenset[str]:
        return self.role_resolver.get_user_permissions(user_id)

    def assign_role(
        self,
        user_id: str,
        role_id: str,
        assigned_by: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> UserRoleAssignment:
        assignment = self._roles.assign_role(
            UserRoleAssignment(
                user_id=user_id,
                role_id=role_id,
                assigned_by=assigned_by,
                expires_at=expires_at,
            )
        )
        logger.info("Role '%s' assigned to user %s", role_id, user_id)
        return assignment

    def revoke_role(self, user_id: str, role_id: str) -> bool:
        removed = self._roles.revoke_role(user_id, role_id)
        if removed:
            logger.info("Role '%s' removed from user %s", role_id, user_id)
        return removed

    # --- Resource administration ---

    def get_resource_ancestors(
        self, resource_type: str, resource_id: str, max_depth: Optional[int] = None
    ) -> list[ResourceAncestor]:
        return self.resource_resolver.get_resource_ancestors(
            resource_type, resource_id, max_depth
        )

    def get_resource_permissions(
        self, user_id: str, resource_type: str, resource_id: str
    ) -> frozenset[str]:
        return self.resource_resolver.get_effective_permissions(
            user_id, resource_type, resource_id
        )

    def grant_resource_permission(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> ResourcePermission:
        grant = self._grants.grant(user_id, permission, resource_type, str(resource_id))
        logger.info(
            "Granted %s on %s:%s to user %s", permission, resource_type, resource_id, user_id
        )
        return grant

    def revoke_resource_permission(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        removed = self._grants.revoke(user_id, permission, resource_type, str(resource_id))
        if removed:
            logger.info(
                "Revoked %s on %s:%s from user %s",
                permission,
                resource_type,
                resource_id,
                user_id,
            )
        return removed

    # --- Rules ---

    def set_rules(self, rules: Iterable[AccessRule]) -> None:
        self.rule_evaluator.set_rules(rules)
        logger.info("Access rules replaced (%s rules)", len(self.rule_evaluator.rules))


_coordinator: Optional[PermissionCoordinator] = None
_coordinator_lock = threading.Lock()


def get_coordinator() -> PermissionCoordinator:
    """Return the process-wide coordinator, building it from settings once."""
    global _coordinator
    if _coordinator is None:
        with _coordinator_lock:
            if _coordinator is None:
                _coordinator = PermissionCoordinator.from_settings()
                logger.debug(
                    "Permission coordinator built with '%s' provider backend",
                    get_setting("provider.backend", "orm"),
                )
    return _coordinator


def reset_coordinator() -> None:
    """Forget the process-wide coordinator (next call rebuilds it)."""
    global _coordinator
    with _coordinator_lock:
        _coordinator = None


__all__ = ["PermissionCoordinator", "get_coordinator", "reset_coordinator"]
