"""
Data providers for the authorization engine.

Exports:
    - RoleProvider / ResourceRelationshipProvider / ResourcePermissionProvider:
      interfaces consumed by the resolvers
    - InMemoryAuthzStore: dictionary-backed implementation of all three
    - Django*Provider: ORM implementations over rail_authz.models
    - build_providers: factory driven by the ``provider.backend`` setting
"""

from typing import NamedTuple

from ..config_proxy import get_setting
from .base import ResourcePermissionProvider, ResourceRelationshipProvider, RoleProvider
from .memory import InMemoryAuthzStore
from .orm import (
    DjangoResourcePermissionProvider,
    DjangoResourceRelationshipProvider,
    DjangoRoleProvider,
)


class ProviderSet(NamedTuple):
    roles: RoleProvider
    relationships: ResourceRelationshipProvider
    grants: ResourcePermissionProvider


def build_providers(backend: str = None) -> ProviderSet:
    """Instantiate the providers for ``backend`` (defaults to the setting)."""
    backend = (backend or get_setting("provider.backend", "orm")).lower()
    if backend == "memory":
        store = InMemoryAuthzStore()
        return ProviderSet(store, store, store)
    if backend == "orm":
        return ProviderSet(
            DjangoRoleProvider(),
            DjangoResourceRelationshipProvider(),
            DjangoResourcePermissionProvider(),
        )
    raise ValueError(f"Unknown authorization provider backend: {backend!r}")


__all__ = [
    "RoleProvider",
    "ResourceRelationshipProvider",
    "ResourcePermissionProvider",
    "InMemoryAuthzStore",
    "DjangoRoleProvider",
    "DjangoResourceRelationshipProvider",
    "DjangoResourcePermissionProvider",
    "ProviderSet",
    "build_providers",
]
