"""
In-process provider backed by dictionaries.

Useful for tests and for deployments whose roles and grants are static
configuration. Every write sends the matching change signal.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from ..rbac.types import Role, UserRoleAssignment
from ..resources.types import (
    ParentResource,
    ResourcePermission,
    ResourceRef,
    ResourceRelationship,
)
from ..signals import (
    resource_relationship_changed,
    role_hierarchy_changed,
    role_permissions_changed,
)
from .base import ResourcePermissionProvider, ResourceRelationshipProvider, RoleProvider

logger = logging.getLogger(__name__)


class InMemoryAuthzStore(RoleProvider, ResourceRelationshipProvider, ResourcePermissionProvider):
    """Single object implementing every provider interface."""

    def __init__(
        self,
        roles: Optional[Iterable[Role]] = None,
        assignments: Optional[Iterable[UserRoleAssignment]] = None,
        relationships: Optional[Iterable[ResourceRelationship]] = None,
        grants: Optional[Iterable[ResourcePermission]] = None,
    ):
        self._roles: dict[str, Role] = {role.id: role for role in roles or ()}
        self._assignments: dict[tuple[str, str], UserRoleAssignment] = {
            (a.user_id, a.role_id): a for a in assignments or ()
        }
        self._parents: dict[tuple[str, str], ResourceRelationship] = {
            (r.child_type, r.child_id): r for r in relationships or ()
        }
        self._grants: set[ResourcePermission] = set(grants or ())

    # --- Roles ---

    def get_role(self, role_id: str) -> Optional[Role]:
        return self._roles.get(role_id)

    def list_roles(self) -> list[Role]:
        return sorted(self._roles.values(), key=lambda role: role.id)

    def save_role(self, role: Role) -> Role:
        self._roles[role.id] = role
        role_permissions_changed.send(sender=self.__class__, role_id=role.id)
        role_hierarchy_changed.send(sender=self.__class__, role_id=role.id)
        return role

    def delete_role(self, role_id: str) -> bool:
        if self._roles.pop(role_id, None) is None:
            return False
        for child in self.get_child_roles(role_id):
            self._roles[child.id] = replace(child, parent_role_id=None)
        self._assignments = {
            key: value for key, value in self._assignments.items() if key[1] != role_id
        }
        role_hierarchy_changed.send(sender=self.__class__, role_id=role_id)
        return True

    def set_parent_role(
        self, child_id: str, parent_id: Optional[str], assigned_by: Optional[str] = None
    ) -> None:
        child = self._roles[child_id]
        self._roles[child_id] = replace(child, parent_role_id=parent_id)
        role_hierarchy_changed.send(sender=self.__class__, role_id=child_id)

    def add_role_permission(self, role_id: str, permission: str) -> None:
        role = self._roles[role_id]
        self.save_role(replace(role, permission_ids=role.permission_ids | {permission}))

    def remove_role_permission(self, role_id: str, permission: str) -> None:
        role = self._roles[role_id]
        self.save_role(replace(role, permission_ids=role.permission_ids - {permission}))

    # --- Assignments ---

    def get_user_role_assignments(self, user_id: str) -> list[UserRoleAssignment]:
        return [a for (uid, _), a in sorted(self._assignments.items()) if uid == user_id]

    def assign_role(self, assignment: UserRoleAssignment) -> UserRoleAssignment:
        self._assignments[(assignment.user_id, assignment.role_id)] = assignment
        return assignment

    def revoke_role(self, user_id: str, role_id: str) -> bool:
        return self._assignments.pop((user_id, role_id), None) is not None

    # --- Resource relationships ---

    def get_parent_resources(
        self, resource_type: str, resource_id: str
    ) -> list[ParentResource]:
        edge = self._parents.get((resource_type, resource_id))
        if edge is None:
            return []
        return [ParentResource(edge.parent_type, edge.parent_id, edge.relationship_type)]

    def add_relationship(self, relationship: ResourceRelationship) -> None:
        self._parents[(relationship.child_type, relationship.child_id)] = relationship
        resource_relationship_changed.send(
            sender=self.__class__,
            resource_type=relationship.child_type,
            resource_id=relationship.child_id,
        )

    def remove_relationship(self, child_type: str, child_id: str) -> bool:
        if self._parents.pop((child_type, child_id), None) is None:
            return False
        resource_relationship_changed.send(
            sender=self.__class__, resource_type=child_type, resource_id=child_id
        )
        return True

    # --- Resource grants ---

    def has_direct_permission(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        return (
            ResourcePermission(user_id, permission, resource_type, resource_id)
            in self._grants
        )

    def get_user_permissions_for_resource(
        self, user_id: str, resource_type: str, resource_id: str
    ) -> set[str]:
        return {
            grant.permission
            for grant in self._grants
            if grant.user_id == user_id
            and grant.resource_type == resource_type
            and grant.resource_id == resource_id
        }

    def get_user_permissions_for_resources(
        self, user_id: str, resources: Iterable[ResourceRef]
    ) -> set[str]:
        wanted = set(resources)
        return {
            grant.permission
            for grant in self._grants
            if grant.user_id == user_id and grant.resource in wanted
        }

    def grant(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> ResourcePermission:
        grant = ResourcePermission(user_id, permission, resource_type, resource_id)
        self._grants.add(grant)
        return grant

    def revoke(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        grant = ResourcePermission(user_id, permission, resource_type, resource_id)
        if grant not in self._grants:
            return False
        self._grants.discard(grant)
        return True

    def get_permissions_for_resource(
        self, resource_type: str, resource_id: str
    ) -> list[ResourcePermission]:
        return sorted(
            (
                grant
                for grant in self._grants
                if grant.resource_type == resource_type and grant.resource_id == resource_id
            ),
            key=lambda grant: (grant.user_id, grant.permission),
        )

    def get_user_resource_permissions(self, user_id: str) -> list[ResourcePermission]:
        return sorted(
            (grant for grant in self._grants if grant.user_id == user_id),
            key=lambda grant: (grant.resource_type, grant.resource_id, grant.permission),
        )


__all__ = ["InMemoryAuthzStore"]
