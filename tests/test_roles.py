# =============================================================================
# tests/test_roles.py - Roles & Permissions Tests
# =============================================================================
# Covers the role/permission grid:
# - Required pairs of the built-in roles can never be removed
# - Adding and removing pairs is idempotent
# - The matrix marks required cells as locked
# - Routes are gated on manage_roles
#
# Run with: pytest tests/test_roles.py -v
# =============================================================================

import itertools

import pytest

from app.exceptions import RequiredPermissionError, RoleNotFoundError
from core.services.role_service import REQUIRED_ROLE_PERMISSIONS, RoleService


def _pair_count(db, role_id):
    return len([p for p in db.rows("role_permissions") if p["role_id"] == role_id])


class TestRequiredPermissions:

    @pytest.mark.parametrize("role_name", sorted(REQUIRED_ROLE_PERMISSIONS))
    def test_required_pair_cannot_be_removed(self, db, seeded_roles, role_name):
        role = seeded_roles["roles"][role_name]
        for permission_name in REQUIRED_ROLE_PERMISSIONS[role_name]:
            permission = seeded_roles["permissions"][permission_name]
            with pytest.raises(RequiredPermissionError):
                RoleService.remove_permission(role["id"], permission["id"])

        assert _pair_count(db, role["id"]) == len(REQUIRED_ROLE_PERMISSIONS[role_name])

    def test_any_toggle_order_keeps_required_pairs(self, db, seeded_roles):
        """Flipping every User cell in every order leaves the required pairs."""
        role = seeded_roles["roles"]["User"]
        names = ["view_directory", "publish_content", "view_events"]

        for order in itertools.permutations(names):
            for name in order:
                permission = seeded_roles["permissions"][name]
                RoleService.add_permission(role["id"], permission["id"])
                if name in REQUIRED_ROLE_PERMISSIONS["User"]:
                    with pytest.raises(RequiredPermissionError):
                        RoleService.remove_permission(role["id"], permission["id"])
                else:
                    RoleService.remove_permission(role["id"], permission["id"])

            pairs = {
                p["permission_id"] for p in db.rows("role_permissions") if p["role_id"] == role["id"]
            }
            assert seeded_roles["permissions"]["view_directory"]["id"] in pairs
            assert seeded_roles["permissions"]["view_events"]["id"] in pairs
            assert seeded_roles["permissions"]["publish_content"]["id"] not in pairs


class TestIdempotence:

    def test_add_twice(self, db, seeded_roles):
        role = seeded_roles["roles"]["User"]
        permission = seeded_roles["permissions"]["manage_media"]

        first = RoleService.add_permission(role["id"], permission["id"])
        second = RoleService.add_permission(role["id"], permission["id"])

        assert first["changed"] is True
        assert second["changed"] is False
        assert _pair_count(db, role["id"]) == 3

    def test_remove_absent_pair(self, db, seeded_roles):
        role = seeded_roles["roles"]["User"]
        permission = seeded_roles["permissions"]["manage_media"]

        result = RoleService.remove_permission(role["id"], permission["id"])

        assert result == {
            "role_id": role["id"],
            "permission_id": permission["id"],
            "enabled": False,
            "changed": False,
        }

    def test_unknown_role(self, db, seeded_roles):
        permission = seeded_roles["permissions"]["manage_media"]
        with pytest.raises(RoleNotFoundError):
            RoleService.add_permission("00000000-0000-0000-0000-00000000abcd", permission["id"])

    def test_assign_role_twice(self, db, seeded_roles, make_user):
        user = make_user()
        role = seeded_roles["roles"]["Moderator"]

        RoleService.assign_role(user["id"], role["id"])
        roles = RoleService.assign_role(user["id"], role["id"])

        assert [r["name"] for r in roles] == ["Moderator"]
        assert len(db.rows("user_roles")) == 1
        assert "publish_content" in RoleService.get_user_permission_names(user["id"])


class TestMatrix:

    def test_locked_cells(self, db, seeded_roles):
        matrix = {row["role_name"]: row for row in RoleService.get_matrix()}

        sponsor = {cell["permission_name"]: cell for cell in matrix["Sponsor"]["permissions"]}
        assert sponsor["manage_company_profile"]["locked"] is True
        assert sponsor["manage_company_profile"]["enabled"] is True
        assert sponsor["manage_posts"]["locked"] is False
        assert sponsor["manage_posts"]["enabled"] is False


class TestRoleRoutes:

    def test_requires_manage_roles(self, client, seeded_roles, make_user, auth_headers):
        user = make_user()
        response = client.get("/api/roles/matrix", headers=auth_headers(user))
        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"

    def test_remove_required_returns_conflict(self, client, seeded_roles, make_user, auth_headers):
        admin = make_user("admin@example.com", is_admin=True)
        role = seeded_roles["roles"]["Moderator"]
        permission = seeded_roles["permissions"]["publish_content"]

        response = client.delete(
            f"/api/roles/{role['id']}/permissions/{permission['id']}",
            headers=auth_headers(admin),
        )

        assert response.status_code == 409
        assert response.json()["error"] == "REQUIRED_PERMISSION"

    def test_permission_through_role(self, client, seeded_roles, make_user, auth_headers):
        user = make_user()
        manage_roles = seeded_roles["permissions"]["manage_roles"]
        custom = RoleService.get_role(seeded_roles["roles"]["User"]["id"])
        RoleService.add_permission(custom["id"], manage_roles["id"])
        RoleService.assign_role(user["id"], custom["id"])

        response = client.get("/api/roles", headers=auth_headers(user))

        assert response.status_code == 200
        assert {r["name"] for r in response.json()} == {"User", "Moderator", "Sponsor"}
