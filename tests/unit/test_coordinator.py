"""
Unit tests for the permission coordinator.
"""

import logging
from datetime import timedelta

import pytest
from django.utils import timezone

from rail_authz.coordinator import PermissionCoordinator, get_coordinator
from rail_authz.providers import InMemoryAuthzStore
from rail_authz.rbac import Role
from rail_authz.resources import ResourceRelationship
from rail_authz.rules import AccessRule, Condition, ConditionOperator
from rail_authz.testing import override_authz_settings

pytestmark = pytest.mark.unit


def test_question_shapes_are_answered_independently(coordinator):
    coordinator.assign_role("u1", "C")
    coordinator.grant_resource_permission("u2", "p4", "task", "t1")

    assert coordinator.has_role_permission("u1", "p4") is True
    assert coordinator.has_resource_permission("u1", "p4", "task", "t1") is False
    assert coordinator.has_resource_permission("u2", "p4", "task", "t1") is True
    assert coordinator.has_role_permission("u2", "p4") is False
    assert coordinator.check_rule("p4", {"user": {}, "resource": {}}) is False


def test_role_assignment_lifecycle(coordinator):
    assert coordinator.has_role_permission("u1", "p1") is False

    coordinator.assign_role("u1", "B", assigned_by="admin")
    assert coordinator.get_user_permissions("u1") == {"p1", "p2", "p3"}

    assert coordinator.revoke_role("u1", "B") is True
    assert coordinator.revoke_role("u1", "B") is False
    assert coordinator.has_role_permission("u1", "p1") is False


def test_role_permission_checks_honor_expiry(coordinator):
    expires = timezone.now() + timedelta(hours=1)
    coordinator.assign_role("u1", "A", expires_at=expires)

    assert coordinator.has_role_permission("u1", "p1") is True
    assert coordinator.has_role_permission("u1", "p1", at=expires + timedelta(seconds=1)) is False


def test_role_writes_invalidate_cached_permissions(coordinator, store):
    assert coordinator.get_effective_permissions("C") == {"p1", "p2", "p3", "p4"}

    store.add_role_permission("A", "p9")
    assert "p9" in coordinator.get_effective_permissions("C")

    store.remove_role_permission("A", "p9")
    store.delete_role("B")
    assert coordinator.get_effective_permissions("C") == {"p4"}
    assert coordinator.get_ancestor_roles("C") == []


def test_relationship_writes_invalidate_cached_chains(coordinator, store):
    coordinator.grant_resource_permission("u1", "edit", "team", "team1")
    assert coordinator.has_resource_permission("u1", "edit", "task", "t1") is True

    store.add_relationship(ResourceRelationship("project", "p1", "team", "team2"))

    assert coordinator.has_resource_permission("u1", "edit", "task", "t1") is False
    assert [a.id for a in coordinator.get_resource_ancestors("task", "t1")] == [
        "p1",
        "team2",
    ]


def test_resource_grant_administration(coordinator):
    coordinator.grant_resource_permission("u1", "read", "project", "p1")
    coordinator.grant_resource_permission("u1", "write", "task", "t1")

    assert coordinator.get_resource_permissions("u1", "task", "t1") == {"read", "write"}
    assert coordinator.revoke_resource_permission("u1", "read", "project", "p1") is True
    assert coordinator.get_resource_permissions("u1", "task", "t1") == {"write"}


def test_set_parent_role_through_coordinator(coordinator):
    coordinator.assign_role("u1", "A")
    coordinator.set_parent_role("A", None)
    coordinator.set_parent_role("B", None)

    assert coordinator.has_role_permission("u1", "p3") is False
    assert coordinator.validate_hierarchy() == 3
    assert [node.role.id for node in coordinator.get_role_hierarchy()] == ["A", "B"]
    assert [role.id for role in coordinator.get_descendant_roles("B")] == ["C"]


def test_set_rules_replaces_rules(coordinator):
    context = {"user": {"plan": "pro"}, "resource": {}}
    assert coordinator.check_rule("export.csv", context) is False

    coordinator.set_rules(
        [
            AccessRule(
                id="pro-export",
                action="export.csv",
                user_conditions=[Condition("plan", ConditionOperator.IN, ["pro", "team"])],
            )
        ]
    )

    assert coordinator.check_rule("export.csv", context) is True
    assert coordinator.explain_rule("export.csv", context).rule.id == "pro-export"


def test_get_coordinator_builds_once_from_settings():
    with override_authz_settings({"provider": {"backend": "memory"}}):
        first = get_coordinator()
        assert get_coordinator() is first
        assert isinstance(first.role_resolver.provider, InMemoryAuthzStore)


def test_max_depth_overrides_apply_per_resolver():
    store = InMemoryAuthzStore(
        roles=[
            Role(id="a", permission_ids={"pa"}),
            Role(id="b", parent_role_id="a"),
            Role(id="c", parent_role_id="b"),
        ],
        relationships=[
            ResourceRelationship("c", "1", "b", "1"),
            ResourceRelationship("b", "1", "a", "1"),
        ],
    )
    coordinator = PermissionCoordinator(
        store, store, store, role_max_depth=1, resource_max_depth=1
    )

    assert [role.id for role in coordinator.get_ancestor_roles("c")] == ["b"]
    assert [a.type for a in coordinator.get_resource_ancestors("c", "1")] == ["b"]


def test_cache_prefix_separates_coordinators_over_different_stores():
    first = InMemoryAuthzStore(roles=[Role(id="r", permission_ids={"read"})])
    second = InMemoryAuthzStore(roles=[Role(id="r", permission_ids={"write"})])
    one = PermissionCoordinator(first, first, first, cache_prefix="authz:one")
    two = PermissionCoordinator(second, second, second, cache_prefix="authz:two")

    assert one.get_effective_permissions("r") == {"read"}
    assert two.get_effective_permissions("r") == {"write"}


def test_resource_revocation_is_logged(coordinator, caplog):
    coordinator.grant_resource_permission("u1", "read", "task", "t1")

    with caplog.at_level(logging.INFO, logger="rail_authz.coordinator"):
        assert coordinator.revoke_resource_permission("u1", "read", "task", "t1") is True
        assert coordinator.revoke_resource_permission("u1", "read", "task", "t1") is False

    revoked = [r for r in caplog.records if r.getMessage().startswith("Revoked read")]
    assert len(revoked) == 1
    assert revoked[0].levelno == logging.INFO
