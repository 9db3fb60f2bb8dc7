"""
Type definitions for the role hierarchy.

- Role: a named bundle of permissions with at most one parent role
- UserRoleAssignment: a (possibly expiring) link between a user and a role
- RoleHierarchyNode: nested view of the role forest for administrative display
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from django.conf import settings
from django.utils import timezone


def _comparable(value: datetime) -> datetime:
    """Align awareness with USE_TZ; naive values are read in the current time zone."""
    if settings.USE_TZ and timezone.is_naive(value):
        return timezone.make_aware(value)
    if not settings.USE_TZ and timezone.is_aware(value):
        return timezone.make_naive(value)
    return value


@dataclass
class Role:
    """Definition of a role in the hierarchy."""

    id: str
    permission_ids: frozenset[str] = field(default_factory=frozenset)
    parent_role_id: Optional[str] = None
    name: str = ""
    description: str = ""
    is_system_role: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.permission_ids, frozenset):
            self.permission_ids = frozenset(self.permission_ids or ())
        if not self.name:
            self.name = self.id


@dataclass
class UserRoleAssignment:
    """Assignment of a role to a user. Expiry is a read-time filter only."""

    user_id: str
    role_id: str
    assigned_by: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_active(self, at: Optional[datetime] = None) -> bool:
        """Return False once ``expires_at`` has been reached."""
        if self.expires_at is None:
            return True
        return _comparable(self.expires_at) > _comparable(at or timezone.now())


@dataclass
class RoleHierarchyNode:
    """A role with its nested children."""

    role: Role
    children: list["RoleHierarchyNode"] = field(default_factory=list)

    def walk(self) -> Iterable["RoleHierarchyNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        return {
            "id": self.role.id,
            "name": self.role.name,
            "permissions": sorted(self.role.permission_ids),
            "children": [child.to_dict() for child in self.children],
        }


__all__ = ["Role", "UserRoleAssignment", "RoleHierarchyNode"]
