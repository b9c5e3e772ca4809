# =============================================================================
# app/routers/roles.py - Roles & Permissions Endpoints
# =============================================================================
# Backs the permission grid in the admin area. Every route needs
# manage_roles. Removing a permission that a built-in role requires is
# answered with 409 whatever the client sends.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import require_permission
from core.models.role import PermissionResponse, RoleMatrixRow, RolePermissionChange, RoleResponse
from core.services.role_service import RoleService

router = APIRouter()

manage_roles = require_permission("manage_roles")

RoleId = Annotated[UUID, Path(description="Role UUID")]
PermissionId = Annotated[UUID, Path(description="Permission UUID")]
UserId = Annotated[UUID, Path(description="User UUID")]


@router.get("", response_model=list[RoleResponse])
async def list_roles(_: dict[str, Any] = Depends(manage_roles)):
    """Roles with their permissions."""
    return RoleService.list_roles()


@router.get("/permissions", response_model=list[PermissionResponse])
async def list_permissions(_: dict[str, Any] = Depends(manage_roles)):
    return RoleService.list_permissions()


@router.get("/matrix", response_model=list[RoleMatrixRow])
async def get_matrix(_: dict[str, Any] = Depends(manage_roles)):
    """
    The role x permission grid.

    Cells a built-in role can't lose come back with locked=true.
    """
    return RoleService.get_matrix()


@router.post("/{role_id}/permissions/{permission_id}", response_model=RolePermissionChange)
async def add_role_permission(
    role_id: RoleId,
    permission_id: PermissionId,
    record: dict[str, Any] = Depends(manage_roles),
):
    """Grant a permission to a role. Granting twice is a no-op."""
    return RoleService.add_permission(str(role_id), str(permission_id), granted_by=str(record["id"]))


@router.delete("/{role_id}/permissions/{permission_id}", response_model=RolePermissionChange)
async def remove_role_permission(
    role_id: RoleId,
    permission_id: PermissionId,
    _: dict[str, Any] = Depends(manage_roles),
):
    """
    Take a permission away from a role.

    Raises:
        409: The permission is required for this role
    """
    return RoleService.remove_permission(str(role_id), str(permission_id))


# =============================================================================
# User Assignments
# =============================================================================

@router.get("/users/{user_id}", response_model=list[RoleResponse])
async def get_user_roles(user_id: UserId, _: dict[str, Any] = Depends(manage_roles)):
    return RoleService.get_user_roles(str(user_id))


@router.post("/users/{user_id}/{role_id}", response_model=list[RoleResponse])
async def assign_user_role(
    user_id: UserId,
    role_id: RoleId,
    record: dict[str, Any] = Depends(manage_roles),
):
    return RoleService.assign_role(str(user_id), str(role_id), assigned_by=str(record["id"]))


@router.delete("/users/{user_id}/{role_id}", response_model=list[RoleResponse])
async def remove_user_role(
    user_id: UserId,
    role_id: RoleId,
    _: dict[str, Any] = Depends(manage_roles),
):
    return RoleService.remove_role(str(user_id), str(role_id))
