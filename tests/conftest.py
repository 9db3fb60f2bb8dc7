import pytest
from django.core.cache import caches

from rail_authz.config_proxy import settings_proxy
from rail_authz.coordinator import PermissionCoordinator, reset_coordinator
from rail_authz.providers import InMemoryAuthzStore
from rail_authz.rbac import Role
from rail_authz.resources import ResourceRelationship


@pytest.fixture(autouse=True)
def _isolated_state():
    caches["default"].clear()
    settings_proxy.clear_runtime()
    reset_coordinator()
    yield
    caches["default"].clear()
    settings_proxy.clear_runtime()
    reset_coordinator()


@pytest.fixture
def store():
    """Roles A <- B <- C plus a team/project/task resource chain."""
    return InMemoryAuthzStore(
        roles=[
            Role(id="A", permission_ids={"p1", "p2"}),
            Role(id="B", permission_ids={"p3"}, parent_role_id="A"),
            Role(id="C", permission_ids={"p4"}, parent_role_id="B"),
        ],
        relationships=[
            ResourceRelationship("task", "t1", "project", "p1", "belongs_to"),
            ResourceRelationship("project", "p1", "team", "team1", "owned_by"),
        ],
    )


@pytest.fixture
def coordinator(store):
    return PermissionCoordinator(store, store, store)
