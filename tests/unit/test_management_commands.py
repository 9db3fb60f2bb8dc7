"""
Tests for the role hierarchy management commands.
"""

import json
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from rail_authz.models import Role as RoleModel
from rail_authz.testing import override_authz_settings

pytestmark = [pytest.mark.unit, pytest.mark.django_db]

ORM_SETTINGS = {
    "provider": {"backend": "orm"},
    "rules": {"load_app_rule_files": False},
}


@pytest.fixture
def roles():
    admin = RoleModel.objects.create(role_id="admin", permissions=["users.manage"])
    staff = RoleModel.objects.create(
        role_id="staff", permissions=["reports.view", "reports.export"], parent=admin
    )
    RoleModel.objects.create(role_id="guest")
    return admin, staff


def test_validate_role_hierarchy_reports_success(roles):
    out = StringIO()
    with override_authz_settings(ORM_SETTINGS):
        call_command("validate_role_hierarchy", stdout=out)

    assert "Role hierarchy is valid (3 roles)" in out.getvalue()


def test_validate_role_hierarchy_fails_on_cycle(roles):
    admin, staff = roles
    admin.parent = staff
    admin.save()

    with override_authz_settings(ORM_SETTINGS):
        with pytest.raises(CommandError, match="Circular role hierarchy"):
            call_command("validate_role_hierarchy", stdout=StringIO())


def test_validate_role_hierarchy_max_depth(roles):
    with override_authz_settings(ORM_SETTINGS):
        with pytest.raises(CommandError, match="exceeds the maximum depth of 0"):
            call_command("validate_role_hierarchy", "--max-depth", "0", stdout=StringIO())


def test_show_role_hierarchy_prints_tree(roles):
    out = StringIO()
    with override_authz_settings(ORM_SETTINGS):
        call_command("show_role_hierarchy", stdout=out)

    assert out.getvalue().splitlines() == [
        "admin [users.manage]",
        "  staff [reports.export, reports.view]",
        "guest [-]",
    ]


def test_show_role_hierarchy_json(roles):
    out = StringIO()
    with override_authz_settings(ORM_SETTINGS):
        call_command("show_role_hierarchy", "--json", stdout=out)

    payload = json.loads(out.getvalue())
    assert [node["id"] for node in payload] == ["admin", "guest"]
    assert payload[0]["children"][0]["id"] == "staff"


def test_show_role_hierarchy_without_roles():
    out = StringIO()
    with override_authz_settings(ORM_SETTINGS):
        call_command("show_role_hierarchy", stdout=out)

    assert "No roles defined" in out.getvalue()
