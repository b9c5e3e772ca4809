# =============================================================================
# core/models/role.py - Role & Permission Schemas
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, Field


class PermissionResponse(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    resource: str
    action: str


class RoleResponse(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    is_system: bool = False
    permissions: list[PermissionResponse] = Field(default_factory=list)


class RolePermissionCell(BaseModel):
    """
    One switch of the roles/permissions grid.

    `locked` pairs are required for the role; the API refuses to remove
    them, so clients should render the switch disabled.
    """
    permission_id: UUID
    permission_name: str
    enabled: bool
    locked: bool = False


class RoleMatrixRow(BaseModel):
    role_id: UUID
    role_name: str
    permissions: list[RolePermissionCell] = Field(default_factory=list)


class RolePermissionChange(BaseModel):
    """Result of an add/remove call, echoing the pair's final state."""
    role_id: UUID
    permission_id: UUID
    enabled: bool
    changed: bool
