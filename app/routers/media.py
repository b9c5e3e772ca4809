# =============================================================================
# app/routers/media.py - Image Upload & Serving Endpoints
# =============================================================================
# Any logged-in user can upload an image (profile and company pictures).
# Files are served back from storage through this API with a long cache
# lifetime; stored names are random so they never change content.
# =============================================================================

import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, File, Path, Response, UploadFile, status

from app.auth import get_current_user_record, require_permission
from app.config import settings
from app.dependencies import PaginationDep
from core.services.storage_service import StorageService, content_type_for

logger = logging.getLogger(__name__)

router = APIRouter()

CACHE_CONTROL = "public, max-age=31536000"


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_media(
    file: Annotated[UploadFile, File(description="Image to upload")],
    record: dict[str, Any] = Depends(get_current_user_record),
):
    """
    Upload an image.

    Returns the media row; use its url field to reference the image.

    Raises:
        400: Not an allowed image type
        413: Larger than MAX_UPLOAD_SIZE_MB
    """
    filename = file.filename or ""
    if file.size is not None:
        StorageService.validate_image(filename, file.size)
    # One byte past the limit is enough for the size check to fail
    content = await file.read(settings.max_upload_size_bytes + 1)
    return StorageService.upload_image(filename, content, uploaded_by=str(record["id"]))


@router.get("")
async def list_media(
    pagination: PaginationDep,
    _: dict[str, Any] = Depends(require_permission("manage_media")),
):
    return StorageService.list_media(page=pagination.page, limit=pagination.limit)


@router.delete("/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_media(
    media_id: Annotated[UUID, Path(description="Media UUID")],
    _: dict[str, Any] = Depends(require_permission("manage_media")),
):
    StorageService.delete_media(str(media_id))


@router.get("/{path:path}")
async def serve_media(path: str):
    """Stream a stored object back with its content type."""
    content = StorageService.download(path)
    return Response(
        content=content,
        media_type=content_type_for(path),
        headers={"Cache-Control": CACHE_CONTROL},
    )
