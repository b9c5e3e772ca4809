# =============================================================================
# core/services/role_service.py - Roles & Permissions
# =============================================================================
# Roles and permissions are a many-to-many relation through
# role_permissions; users get roles through user_roles.
#
# The built-in roles carry a fixed set of required permissions. Adding a
# pair is idempotent and removing a required pair is refused, so the grid
# ends up the same whatever order the switches are flipped in.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import utcnow_iso
from app.exceptions import (
    PermissionNotFoundError,
    RequiredPermissionError,
    RoleNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


# Permission catalog seeded by migrations/0001_initial_schema.sql
# (name, resource, action, description)
DEFAULT_PERMISSIONS: list[tuple[str, str, str, str]] = [
    ("view_directory", "directory", "view", "Browse people and companies"),
    ("view_events", "events", "view", "See events and agendas"),
    ("view_members_content", "posts", "view_members", "Read members-only posts"),
    ("publish_content", "posts", "create", "Write and publish bulletin posts"),
    ("manage_posts", "posts", "manage", "Edit or delete any post"),
    ("manage_company_profile", "companies", "manage", "Edit the companies they belong to"),
    ("manage_events", "events", "manage", "Curate speakers, presentations and premium tickets"),
    ("manage_media", "media", "manage", "Upload and delete media"),
    ("manage_users", "users", "manage", "Administer user accounts"),
    ("manage_roles", "roles", "manage", "Edit roles and permissions"),
]

# Permissions the built-in roles can never lose
REQUIRED_ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "User": frozenset({"view_directory", "view_events"}),
    "Moderator": frozenset({"view_directory", "view_events", "publish_content", "manage_posts"}),
    "Sponsor": frozenset({"view_directory", "view_events", "manage_company_profile"}),
}


def is_required_permission(role_name: str, permission_name: str) -> bool:
    return permission_name in REQUIRED_ROLE_PERMISSIONS.get(role_name, frozenset())


class RoleService:
    """Service for the role/permission relation and user role assignments."""

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def get_role(role_id: str) -> dict[str, Any]:
        role = SupabaseClient.fetch_one("roles", "id", str(role_id))
        if not role:
            raise RoleNotFoundError(str(role_id))
        return role

    @staticmethod
    def get_permission(permission_id: str) -> dict[str, Any]:
        permission = SupabaseClient.fetch_one("permissions", "id", str(permission_id))
        if not permission:
            raise PermissionNotFoundError(str(permission_id))
        return permission

    @staticmethod
    def list_permissions() -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = client.table("permissions").select("*").order("name").execute()
        return response.data or []

    @staticmethod
    def _pairs() -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = client.table("role_permissions").select("role_id, permission_id").execute()
        return response.data or []

    @staticmethod
    def list_roles() -> list[dict[str, Any]]:
        """All roles, each with its permissions embedded."""
        client = SupabaseClient.get_client()
        roles = client.table("roles").select("*").order("name").execute().data or []
        permissions = {str(p["id"]): p for p in RoleService.list_permissions()}

        granted: dict[str, list[dict[str, Any]]] = {}
        for pair in RoleService._pairs():
            permission = permissions.get(str(pair["permission_id"]))
            if permission:
                granted.setdefault(str(pair["role_id"]), []).append(permission)

        return [
            {
                **role,
                "permissions": sorted(granted.get(str(role["id"]), []), key=lambda p: p["name"]),
            }
            for role in roles
        ]

    @staticmethod
    def get_matrix() -> list[dict[str, Any]]:
        """
        Roles x permissions grid.

        Every cell says whether the pair is granted and whether it is
        locked (required for a built-in role).
        """
        client = SupabaseClient.get_client()
        roles = client.table("roles").select("*").order("name").execute().data or []
        permissions = RoleService.list_permissions()
        granted = {(str(p["role_id"]), str(p["permission_id"])) for p in RoleService._pairs()}

        return [
            {
                "role_id": role["id"],
                "role_name": role["name"],
                "permissions": [
                    {
                        "permission_id": permission["id"],
                        "permission_name": permission["name"],
                        "enabled": (str(role["id"]), str(permission["id"])) in granted,
                        "locked": is_required_permission(role["name"], permission["name"]),
                    }
                    for permission in permissions
                ],
            }
            for role in roles
        ]

    # -------------------------------------------------------------------------
    # Role <-> Permission
    # -------------------------------------------------------------------------

    @staticmethod
    def _find_pair(role_id: str, permission_id: str) -> dict[str, Any] | None:
        client = SupabaseClient.get_client()
        response = (
            client.table("role_permissions")
            .select("*")
            .eq("role_id", role_id)
            .eq("permission_id", permission_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    @staticmethod
    def add_permission(role_id: str, permission_id: str, granted_by: str | None = None) -> dict[str, Any]:
        """
        Grant a permission to a role. Granting twice is a no-op.

        Returns:
            {"role_id", "permission_id", "enabled": True, "changed": bool}
        """
        role_id, permission_id = str(role_id), str(permission_id)
        role = RoleService.get_role(role_id)
        permission = RoleService.get_permission(permission_id)

        if RoleService._find_pair(role_id, permission_id):
            return {"role_id": role_id, "permission_id": permission_id, "enabled": True, "changed": False}

        client = SupabaseClient.get_client()
        client.table("role_permissions").insert({
            "role_id": role_id,
            "permission_id": permission_id,
            "granted_by": granted_by,
            "granted_at": utcnow_iso(),
        }).execute()

        logger.info(f"Granted {permission['name']} to role {role['name']}")
        return {"role_id": role_id, "permission_id": permission_id, "enabled": True, "changed": True}

    @staticmethod
    def remove_permission(role_id: str, permission_id: str) -> dict[str, Any]:
        """
        Revoke a permission from a role. Revoking an absent pair is a no-op.

        Raises:
            RequiredPermissionError: If the pair is required for the role
        """
        role_id, permission_id = str(role_id), str(permission_id)
        role = RoleService.get_role(role_id)
        permission = RoleService.get_permission(permission_id)

        if is_required_permission(role["name"], permission["name"]):
            logger.warning(f"Refused to remove required {permission['name']} from role {role['name']}")
            raise RequiredPermissionError(role["name"], permission["name"])

        if not RoleService._find_pair(role_id, permission_id):
            return {"role_id": role_id, "permission_id": permission_id, "enabled": False, "changed": False}

        client = SupabaseClient.get_client()
        (
            client.table("role_permissions")
            .delete()
            .eq("role_id", role_id)
            .eq("permission_id", permission_id)
            .execute()
        )

        logger.info(f"Revoked {permission['name']} from role {role['name']}")
        return {"role_id": role_id, "permission_id": permission_id, "enabled": False, "changed": True}

    # -------------------------------------------------------------------------
    # User <-> Role
    # -------------------------------------------------------------------------

    @staticmethod
    def get_user_roles(user_id: str) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        links = client.table("user_roles").select("role_id").eq("user_id", str(user_id)).execute().data or []
        role_ids = [str(link["role_id"]) for link in links]
        if not role_ids:
            return []
        return client.table("roles").select("*").in_("id", role_ids).execute().data or []

    @staticmethod
    def assign_role(user_id: str, role_id: str, assigned_by: str | None = None) -> list[dict[str, Any]]:
        """Give a user a role (idempotent) and return their roles."""
        user_id, role_id = str(user_id), str(role_id)
        if not SupabaseClient.fetch_one("users", "id", user_id):
            raise UserNotFoundError(user_id)
        role = RoleService.get_role(role_id)

        client = SupabaseClient.get_client()
        existing = (
            client.table("user_roles")
            .select("id")
            .eq("user_id", user_id)
            .eq("role_id", role_id)
            .limit(1)
            .execute()
        )
        if not existing.data:
            client.table("user_roles").insert({
                "user_id": user_id,
                "role_id": role_id,
                "assigned_by": assigned_by,
            }).execute()
            logger.info(f"Assigned role {role['name']} to user {user_id}")

        return RoleService.get_user_roles(user_id)

    @staticmethod
    def remove_role(user_id: str, role_id: str) -> list[dict[str, Any]]:
        user_id, role_id = str(user_id), str(role_id)
        RoleService.get_role(role_id)

        client = SupabaseClient.get_client()
        client.table("user_roles").delete().eq("user_id", user_id).eq("role_id", role_id).execute()
        logger.info(f"Removed role {role_id} from user {user_id}")
        return RoleService.get_user_roles(user_id)

    @staticmethod
    def get_user_permission_names(user_id: str) -> set[str]:
        """Union of permission names across a user's roles."""
        client = SupabaseClient.get_client()
        role_ids = [str(r["id"]) for r in RoleService.get_user_roles(user_id)]
        if not role_ids:
            return set()

        pairs = (
            client.table("role_permissions")
            .select("permission_id")
            .in_("role_id", role_ids)
            .execute()
            .data
            or []
        )
        permission_ids = list({str(p["permission_id"]) for p in pairs})
        if not permission_ids:
            return set()

        permissions = client.table("permissions").select("name").in_("id", permission_ids).execute().data or []
        return {p["name"] for p in permissions}
