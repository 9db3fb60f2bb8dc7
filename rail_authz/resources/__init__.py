"""
Resource hierarchy package.

Exports:
    - ResourceRef / ResourceAncestor: resource identifiers
    - ResourcePermission / ResourceRelationship / ParentResource: provider records
    - ResourceHierarchyResolver: direct + inherited resource permission resolution
"""

from .resolver import ResourceHierarchyResolver
from .types import (
    ParentResource,
    ResourceAncestor,
    ResourcePermission,
    ResourceRef,
    ResourceRelationship,
)

__all__ = [
    "ResourceRef",
    "ResourceAncestor",
    "ResourcePermission",
    "ResourceRelationship",
    "ParentResource",
    "ResourceHierarchyResolver",
]
