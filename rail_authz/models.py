"""
Database models backing the ORM provider.

Identifiers exposed to the engine are opaque strings (``role_id``,
``user_id``, resource ids); database primary keys stay internal.
"""

from __future__ import annotations

from django.db import models


class Role(models.Model):
    role_id = models.CharField(max_length=150, unique=True)
    name = models.CharField(max_length=150, blank=True, default="")
    description = models.TextField(blank=True, default="")
    is_system_role = models.BooleanField(default=False)
    permissions = models.JSONField(default=list, blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="children",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "rail_authz"
        db_table = "rail_authz_role"
        ordering = ["role_id"]

    def __str__(self) -> str:
        return self.name or self.role_id


class UserRoleAssignment(models.Model):
    user_id = models.CharField(max_length=150, db_index=True)
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name="assignments")
    assigned_by = models.CharField(max_length=150, blank=True, default="")
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "rail_authz"
        db_table = "rail_authz_user_role"
        ordering = ["user_id", "role__role_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "role"], name="rail_authz_unique_user_role"
            )
        ]

    def __str__(self) -> str:
        return f"{self.user_id} -> {self.role.role_id}"


class ResourcePermission(models.Model):
    user_id = models.CharField(max_length=150)
    permission = models.CharField(max_length=150)
    resource_type = models.CharField(max_length=100)
    resource_id = models.CharField(max_length=150)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "rail_authz"
        db_table = "rail_authz_resource_permission"
        ordering = ["resource_type", "resource_id", "user_id", "permission"]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "permission", "resource_type", "resource_id"],
                name="rail_authz_unique_resource_permission",
            )
        ]
        indexes = [
            models.Index(
                fields=["user_id", "resource_type", "resource_id"],
                name="rail_authz_rp_lookup_idx",
            )
        ]

    def __str__(self) -> str:
        return f"{self.user_id}:{self.permission}@{self.resource_type}:{self.resource_id}"


class ResourceRelationship(models.Model):
    child_type = models.CharField(max_length=100)
    child_id = models.CharField(max_length=150)
    parent_type = models.CharField(max_length=100)
    parent_id = models.CharField(max_length=150)
    relationship_type = models.CharField(max_length=50, default="belongs_to")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "rail_authz"
        db_table = "rail_authz_resource_relationship"
        ordering = ["child_type", "child_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["child_type", "child_id"], name="rail_authz_single_parent"
            )
        ]

    def __str__(self) -> str:
        return f"{self.child_type}:{self.child_id} -> {self.parent_type}:{self.parent_id}"
