"""
Company role to permission resolution.
"""

import pytest

from cando.config.permissions_config import (
    PERMISSIONS, get_permission_matrix, get_role_permissions, resolve_role_type
)


@pytest.mark.parametrize("role,expected", [
    ("owner", "OWNER"),
    ("admin", "ADMIN"),
    ("viewer", "MEMBER"),
    ("rfq_manager", "RFQ_MANAGER"),
    ("SOCIAL_MANAGER", "SOCIAL_MANAGER"),
    ("stranger", None),
    (None, None),
])
def test_resolve_role_type(role, expected):
    assert resolve_role_type(role) == expected


def test_owner_has_everything():
    assert all(get_role_permissions("owner").values())


def test_admin_cannot_edit_legal_info():
    permissions = get_role_permissions("admin")
    assert permissions["manage_team"] is True
    assert permissions["update_legal_info"] is False


def test_unknown_role_has_nothing():
    permissions = get_role_permissions(None)
    assert set(permissions) == set(PERMISSIONS)
    assert not any(permissions.values())


def test_matrix_lists_every_role():
    matrix = get_permission_matrix()
    assert {role["name"] for role in matrix["roles"]} == {
        "OWNER", "ADMIN", "RFQ_MANAGER", "SOCIAL_MANAGER", "MEMBER"
    }
    assert len(matrix["permissions"]) == len(PERMISSIONS)


@pytest.mark.asyncio
async def test_roles_endpoint(client):
    response = await client.get("/api/v1/companies/roles")
    assert response.status_code == 200
    assert response.json() == get_permission_matrix()
