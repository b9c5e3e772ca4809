# =============================================================================
# app/routers/tasks.py - Background Task Status Endpoints
# =============================================================================
# Status of the sync tasks queued from the admin area. Admin only.
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from app.auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    message: str | None = None
    result: Any = None
    error: str | None = None


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")],
    _: dict[str, Any] = Depends(require_admin),
):
    """
    Get the status of a background task.

    - PENDING: waiting in queue (or unknown id)
    - STARTED: picked up by a worker
    - SUCCESS: finished; result holds the sync summary
    - FAILURE: failed; error holds the reason
    """
    from workers.celery_app import celery_app

    result = celery_app.AsyncResult(task_id)
    response = TaskStatusResponse(task_id=task_id, status=result.status)

    if result.status == "SUCCESS":
        response.result = result.result
        response.message = "Complete"
    elif result.status == "FAILURE":
        response.error = str(result.result) if result.result else "Unknown error"
        response.message = "Failed"
    elif result.status == "PENDING":
        response.message = "Waiting in queue..."
    elif result.status == "STARTED":
        response.message = "Running..."

    return response


@router.delete("/{task_id}")
async def cancel_task(
    task_id: Annotated[str, Path(description="Celery task ID")],
    admin: dict[str, Any] = Depends(require_admin),
):
    """
    Cancel a pending or running task.

    Only works for tasks that haven't completed yet.
    """
    from workers.celery_app import celery_app

    result = celery_app.AsyncResult(task_id)
    if result.status in ("SUCCESS", "FAILURE"):
        return {
            "task_id": task_id,
            "message": f"Task already {result.status.lower()}, cannot cancel",
            "cancelled": False,
        }

    result.revoke(terminate=True)
    logger.info(f"Admin {admin['id']} cancelled task {task_id}")
    return {"task_id": task_id, "message": "Task cancelled", "cancelled": True}
