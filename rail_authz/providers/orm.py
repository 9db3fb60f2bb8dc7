"""
Django ORM provider backed by ``rail_authz.models``.

Database failures are re-raised as ``ProviderError``; the engine passes them
to its caller untouched. Change notifications come from the model signal
hooks in ``rail_authz.signals``.
"""

from __future__ import annotations

import logging
from functools import reduce, wraps
from operator import or_
from typing import Callable, Iterable, Optional, TypeVar

from django.db import DatabaseError, transaction
from django.db.models import Q

from ..exceptions import ProviderError, RoleNotFoundError
from ..rbac.types import Role, UserRoleAssignment
from ..resources.types import ParentResource, ResourcePermission, ResourceRef
from .base import ResourcePermissionProvider, ResourceRelationshipProvider, RoleProvider

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable)


def _db_operation(operation: str) -> Callable[[F], F]:
    """Translate database errors raised by ``operation`` into ProviderError."""

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except DatabaseError as exc:
                logger.error("Authorization provider failure during %s: %s", operation, exc)
                raise ProviderError(str(exc), operation=operation) from exc

        return wrapper  # type: ignore[return-value]

    return decorator


def _to_role(obj) -> Role:
    return Role(
        id=obj.role_id,
        permission_ids=frozenset(obj.permissions or ()),
        parent_role_id=obj.parent.role_id if obj.parent_id else None,
        name=obj.name,
        description=obj.description,
        is_system_role=obj.is_system_role,
    )


def _to_assignment(obj) -> UserRoleAssignment:
    return UserRoleAssignment(
        user_id=obj.user_id,
        role_id=obj.role.role_id,
        assigned_by=obj.assigned_by or None,
        expires_at=obj.expires_at,
    )


def _to_grant(obj) -> ResourcePermission:
    return ResourcePermission(obj.user_id, obj.permission, obj.resource_type, obj.resource_id)


class DjangoRoleProvider(RoleProvider):
    """Roles and assignments stored in the rail_authz tables."""

    def _roles(self):
        from ..models import Role as RoleModel

        return RoleModel.objects.select_related("parent")

    def _get_model(self, role_id: str):
        from ..models import Role as RoleModel

        try:
            return RoleModel.objects.get(role_id=role_id)
        except RoleModel.DoesNotExist:
            raise RoleNotFoundError(f"Role '{role_id}' not found", role_id=role_id)

    @_db_operation("get_role")
    def get_role(self, role_id: str) -> Optional[Role]:
        obj = self._roles().filter(role_id=role_id).first()
        return _to_role(obj) if obj is not None else None

    @_db_operation("list_roles")
    def list_roles(self) -> list[Role]:
        return [_to_role(obj) for obj in self._roles()]

    @_db_operation("get_child_roles")
    def get_child_roles(self, role_id: str) -> list[Role]:
        return [_to_role(obj) for obj in self._roles().filter(parent__role_id=role_id)]

    @_db_operation("save_role")
    def save_role(self, role: Role) -> Role:
        from ..models import Role as RoleModel

        with transaction.atomic():
            parent = None
            if role.parent_role_id:
                parent = self._get_model(role.parent_role_id)
            RoleModel.objects.update_or_create(
                role_id=role.id,
                defaults={
                    "name": role.name,
                    "description": role.description,
                    "is_system_role": role.is_system_role,
                    "permissions": sorted(role.permission_ids),
                    "parent": parent,
                },
            )
        return role

    @_db_operation("delete_role")
    def delete_role(self, role_id: str) -> bool:
        from ..models import Role as RoleModel

        obj = RoleModel.objects.filter(role_id=role_id).first()
        if obj is None:
            return False
        # parent links of children are cleared by on_delete=SET_NULL
        obj.delete()
        return True

    @_db_operation("set_parent_role")
    def set_parent_role(
        self, child_id: str, parent_id: Optional[str], assigned_by: Optional[str] = None
    ) -> None:
        with transaction.atomic():
            child = self._get_model(child_id)
            child.parent = self._get_model(parent_id) if parent_id else None
            child.save(update_fields=["parent", "updated_at"])
        logger.info(
            "Role '%s' parent set to %r by %s", child_id, parent_id, assigned_by or "system"
        )

    @_db_operation("get_user_role_assignments")
    def get_user_role_assignments(self, user_id: str) -> list[UserRoleAssignment]:
        from ..models import UserRoleAssignment as AssignmentModel

        queryset = AssignmentModel.objects.select_related("role").filter(user_id=user_id)
        return [_to_assignment(obj) for obj in queryset]

    @_db_operation("assign_role")
    def assign_role(self, assignment: UserRoleAssignment) -> UserRoleAssignment:
        from ..models import UserRoleAssignment as AssignmentModel

        with transaction.atomic():
            role = self._get_model(assignment.role_id)
            AssignmentModel.objects.update_or_create(
                user_id=assignment.user_id,
                role=role,
                defaults={
                    "assigned_by": assignment.assigned_by or "",
                    "expires_at": assignment.expires_at,
                },
            )
        return assignment

    @_db_operation("revoke_role")
    def revoke_role(self, user_id: str, role_id: str) -> bool:
        from ..models import UserRoleAssignment as AssignmentModel

        deleted, _ = AssignmentModel.objects.filter(
            user_id=user_id, role__role_id=role_id
        ).delete()
        return deleted > 0


class DjangoResourceRelationshipProvider(ResourceRelationshipProvider):
    @_db_operation("get_parent_resources")
    def get_parent_resources(
        self, resource_type: str, resource_id: str
    ) -> list[ParentResource]:
        from ..models import ResourceRelationship

        queryset = ResourceRelationship.objects.filter(
            child_type=resource_type, child_id=str(resource_id)
        )
        return [
            ParentResource(obj.parent_type, obj.parent_id, obj.relationship_type)
            for obj in queryset
        ]


class DjangoResourcePermissionProvider(ResourcePermissionProvider):
    def _grants(self):
        from ..models import ResourcePermission as GrantModel

        return GrantModel.objects.all()

    @_db_operation("has_direct_permission")
    def has_direct_permission(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        return (
            self._grants()
            .filter(
                user_id=user_id,
                permission=permission,
                resource_type=resource_type,
                resource_id=str(resource_id),
            )
            .exists()
        )

    @_db_operation("get_user_permissions_for_resource")
    def get_user_permissions_for_resource(
        self, user_id: str, resource_type: str, resource_id: str
    ) -> set[str]:
        return set(
            self._grants()
            .filter(user_id=user_id, resource_type=resource_type, resource_id=str(resource_id))
            .values_list("permission", flat=True)
        )

    @_db_operation("get_user_permissions_for_resources")
    def get_user_permissions_for_resources(
        self, user_id: str, resources: Iterable[ResourceRef]
    ) -> set[str]:
        filters = [
            Q(resource_type=resource.type, resource_id=str(resource.id))
            for resource in resources
        ]
        if not filters:
            return set()
        return set(
            self._grants()
            .filter(reduce(or_, filters), user_id=user_id)
            .values_list("permission", flat=True)
        )

    @_db_operation("grant")
    def grant(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> ResourcePermission:
        obj, _ = self._grants().get_or_create(
            user_id=user_id,
            permission=permission,
            resource_type=resource_type,
            resource_id=str(resource_id),
        )
        return _to_grant(obj)

    @_db_operation("revoke")
    def revoke(
        self, user_id: str, permission: str, resource_type: str, resource_id: str
    ) -> bool:
        deleted, _ = (
            self._grants()
            .filter(
                user_id=user_id,
                permission=permission,
                resource_type=resource_type,
                resource_id=str(resource_id),
            )
            .delete()
        )
        return deleted > 0

    @_db_operation("get_permissions_for_resource")
    def get_permissions_for_resource(
        self, resource_type: str, resource_id: str
    ) -> list[ResourcePermission]:
        queryset = self._grants().filter(
            resource_type=resource_type, resource_id=str(resource_id)
        )
        return [_to_grant(obj) for obj in queryset]

    @_db_operation("get_user_resource_permissions")
    def get_user_resource_permissions(self, user_id: str) -> list[ResourcePermission]:
        return [_to_grant(obj) for obj in self._grants().filter(user_id=user_id)]


__all__ = [
    "DjangoRoleProvider",
    "DjangoResourceRelationshipProvider",
    "DjangoResourcePermissionProvider",
]
