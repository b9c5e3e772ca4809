# =============================================================================
# app/routers/admin.py - Admin Endpoints
# =============================================================================
# User administration, dashboard counts and background sync triggers.
# Granting admin or premium needs a system admin; browsing users needs
# manage_users.
# =============================================================================

import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel

from app.auth import require_admin, require_permission
from app.dependencies import PaginationDep
from core.models.user import AdminUserUpdate, UserList, UserResponse
from core.services.premium_service import PremiumService
from core.services.sync_service import SyncService
from core.services.user_service import UserService, public_user
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class StatsResponse(BaseModel):
    people: int
    users: int
    verified_users: int
    premium_users: int
    companies: int
    events: int
    posts: int
    last_sync: str | None = None


class TaskSubmitResponse(BaseModel):
    task_id: str
    status: str
    message: str


# =============================================================================
# Users
# =============================================================================

@router.get("/users", response_model=UserList)
async def list_users(
    pagination: PaginationDep,
    search: Annotated[str | None, Query(max_length=100, description="Match email or display name")] = None,
    _: dict[str, Any] = Depends(require_permission("manage_users")),
):
    return UserService.list_users(page=pagination.page, limit=pagination.limit, search=search)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: Annotated[UUID, Path(description="User UUID")],
    _: dict[str, Any] = Depends(require_permission("manage_users")),
):
    return UserResponse(**public_user(UserService.get_user(str(user_id))))


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: Annotated[UUID, Path(description="User UUID")],
    request: AdminUserUpdate,
    admin: dict[str, Any] = Depends(require_admin),
):
    """
    Change a user's admin/verified flags or their manual premium grant.

    Set premium_expires_at to grant premium until that time, or
    revoke_premium=true to take a luma or manual grant away.
    """
    user = UserService.admin_update(str(user_id), request, admin_id=str(admin["id"]))
    return UserResponse(**public_user(user))


# =============================================================================
# Stats
# =============================================================================

@router.get("/stats", response_model=StatsResponse)
async def get_stats(_: dict[str, Any] = Depends(require_admin)):
    """Dashboard counts and the last directory sync time."""
    return StatsResponse(
        people=SupabaseClient.count_rows("people"),
        users=SupabaseClient.count_rows("users"),
        verified_users=SupabaseClient.count_rows("users", "is_verified", True),
        premium_users=PremiumService.count_active(),
        companies=SupabaseClient.count_rows("companies"),
        events=SupabaseClient.count_rows("events"),
        posts=SupabaseClient.count_rows("posts"),
        last_sync=SyncService.last_sync_time(),
    )


# =============================================================================
# Background Sync
# =============================================================================

@router.post("/refresh", response_model=TaskSubmitResponse)
async def queue_directory_refresh(admin: dict[str, Any] = Depends(require_admin)):
    """
    Queue an incremental directory refresh on the worker.

    Poll GET /api/admin/tasks/{task_id} for the outcome.
    """
    from workers.tasks import refresh_directory_task

    result = refresh_directory_task.delay()
    logger.info(f"Admin {admin['id']} queued directory refresh {result.id}")
    return TaskSubmitResponse(task_id=result.id, status="queued", message="Directory refresh queued")


@router.post("/sync-attendance", response_model=TaskSubmitResponse)
async def queue_attendance_sync(
    upcoming: Annotated[bool, Query(description="true: upcoming events, false: recently ended")] = False,
    admin: dict[str, Any] = Depends(require_admin),
):
    from workers.tasks import sync_attendance_task

    result = sync_attendance_task.delay(upcoming=upcoming)
    logger.info(f"Admin {admin['id']} queued attendance sync {result.id} (upcoming={upcoming})")
    return TaskSubmitResponse(task_id=result.id, status="queued", message="Attendance sync queued")
