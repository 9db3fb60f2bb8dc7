"""
Data provider interfaces consumed by the authorization engine.

The engine never persists anything itself. Roles, assignments, resource
relationships and resource grants are read through these providers, which
are free to use any backend (in-memory, Django ORM, remote service).
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ..rbac.types import Role, UserRoleAssignment
from ..resources.types import ParentResource, ResourcePermission, ResourceRef


class RoleProvider(ABC):
    """Roles, parent links and user-role assignments keyed by opaque ids."""

    @abstractmethod
    def get_role(self, role_id: str) -> Optional[Role]:
        """Return the role or None when it does not exist."""

    @abstractmethod
    def list_roles(self) -> list[Role]:
        """Return every role."""

    def get_child_roles(self, role_id: str) -> list[Role]:
        """Return roles whose parent is ``role_id``.

        Default implementation scans ``list_roles()``; backends with an index
        should override it.
        """
        return [role for role in self.list_roles() if role.parent_role_id == role_id]

    @abstractmethod
    def save_role(self, role: Role) -> Role:
        """Create or replace a role."""

    @abstractmethod
    def delete_role(self, role_id: str) -> bool:
        """Delete a role and clear it from children's parent references."""

    @abstractmethod
    def set_parent_role(
        self, child_id: str, parent_id: Optional[str], assigned_by: Optional[str] = None
    ) -> None:
        """Persist a parent link. Cycle checks are the engine's responsibility."""

    @abstractmethod
    def get_user_role_assignments(self, user_id: str) -> list[UserRoleAssignment]:
        """Return every assignment of the user, expired ones included."""

    @abstractmethod
    def assign_role(self, assignment: UserRoleAssignment) -> UserRoleAssignment:
        """Create or replace the assignment for (user_id, role_id)."""

    @abstractmethod
    def revoke_role(self, user_id: str, role_id: str) -> bool:
        """Remove an assignment; return False if none existed."""


class ResourceRelationshipProvider(ABC):
    """Parent/child edges between resources."""

    @abstractmethod
    def get_parent_resources(
        self, resource_type: str, resource_id: str
    ) -> list[ParentResource]:
        """Return the immediate parents of a resource (at most one expected)."""


class ResourcePermissionProvider(ABC):
    """Permissions granted to users on specific resources."""

    @abstractmethod
    def has_direct_permission(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        """Targeted lookup for one exact grant."""

    @abstractmethod
    def get_user_permissions_for_resource(
        self, user_id: str, resource_type: str, resource_id: str
    ) -> set[str]:
        """Permissions granted to the user directly on one resource."""

    def get_user_permissions_for_resources(
        self, user_id: str, resources: Iterable[ResourceRef]
    ) -> set[str]:
        """Union of grants over several resources; order does not matter.

        Backends able to answer in a single query should override this.
        """
        permissions: set[str] = set()
        for resource in resources:
            permissions |= self.get_user_permissions_for_resource(
                user_id, resource.type, resource.id
            )
        return permissions

    @abstractmethod
    def grant(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> ResourcePermission:
        """Create a grant (idempotent)."""

    @abstractmethod
    def revoke(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        """Delete a grant; return False if none existed."""

    @abstractmethod
    def get_permissions_for_resource(
        self, resource_type: str, resource_id: str
    ) -> list[ResourcePermission]:
        """Every grant on one resource, all users."""

    @abstractmethod
    def get_user_resource_permissions(self, user_id: str) -> list[ResourcePermission]:
        """Every resource grant held by one user."""

    def get_users_with_permission(
        self, resource_type: str, resource_id: str, permission: str
    ) -> list[str]:
        """User ids holding ``permission`` directly on the resource."""
        return sorted(
            {
                grant.user_id
                for grant in self.get_permissions_for_resource(resource_type, resource_id)
                if grant.permission == permission
            }
        )


__all__ = [
    "RoleProvider",
    "ResourceRelationshipProvider",
    "ResourcePermissionProvider",
]
