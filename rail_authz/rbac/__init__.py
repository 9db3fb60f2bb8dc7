"""
Role hierarchy package.

Exports:
    - Role: Role definition with permissions and optional parent
    - UserRoleAssignment: Possibly expiring user -> role link
    - RoleHierarchyNode: Nested forest node for administrative display
    - RoleHierarchyResolver: Cycle-safe ancestor/descendant/permission queries
"""

from .hierarchy import RoleHierarchyResolver
from .types import Role, RoleHierarchyNode, UserRoleAssignment

__all__ = [
    "Role",
    "UserRoleAssignment",
    "RoleHierarchyNode",
    "RoleHierarchyResolver",
]
