"""
Type definitions for resource-scoped permissions.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ResourceRef:
    """A (type, id) pair identifying a resource."""

    type: str
    id: str

    @property
    def key(self) -> str:
        return f"{self.type}:{self.id}"


@dataclass(frozen=True)
class ResourcePermission:
    """A permission granted directly to a user on one resource."""

    user_id: str
    permission: str
    resource_type: str
    resource_id: str

    @property
    def resource(self) -> ResourceRef:
        return ResourceRef(self.resource_type, self.resource_id)


@dataclass(frozen=True)
class ResourceRelationship:
    """Directed child -> parent edge between two resources."""

    child_type: str
    child_id: str
    parent_type: str
    parent_id: str
    relationship_type: str = "belongs_to"


@dataclass(frozen=True)
class ParentResource:
    """Immediate parent returned by a relationship provider."""

    parent_type: str
    parent_id: str
    relationship_type: str = "belongs_to"


@dataclass(frozen=True)
class ResourceAncestor:
    """One entry of an ancestor chain, nearest ancestor first."""

    type: str
    id: str
    relationship_type: str = "belongs_to"

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(self.type, self.id)


__all__ = [
    "ResourceRef",
    "ResourcePermission",
    "ResourceRelationship",
    "ParentResource",
    "ResourceAncestor",
]
