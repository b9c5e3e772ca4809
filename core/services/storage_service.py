# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles image upload/download/delete against Supabase Storage and keeps
# a row per upload in the media table for the admin media library.
#
# Files are served back through GET /api/media/{path}, so the bucket can
# stay private.
# =============================================================================

import logging
import os
import uuid
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import page_range, total_pages
from app.config import settings
from app.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    NotFoundError,
    StorageDeleteError,
    StorageDownloadError,
    StorageUploadError,
)

logger = logging.getLogger(__name__)

# Folder inside the bucket for user uploads
UPLOAD_PREFIX = "uploads"

CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(path: str) -> str:
    """Content type from the file extension."""
    _, ext = os.path.splitext(path.lower())
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def media_url(path: str) -> str:
    return f"/api/media/{path}"


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles uploading, downloading and deleting images.
    """

    @staticmethod
    def _bucket():
        client = SupabaseClient.get_client()
        return client.storage.from_(settings.SUPABASE_STORAGE_BUCKET)

    @staticmethod
    def validate_image(filename: str, size: int) -> str:
        """
        Check extension and size.

        Returns:
            The lowercased extension

        Raises:
            InvalidFileTypeError: Extension not in ALLOWED_IMAGE_EXTENSIONS
            FileTooLargeError: Larger than MAX_UPLOAD_SIZE_MB
        """
        allowed = settings.allowed_image_extensions_list
        _, ext = os.path.splitext((filename or "").lower())
        if ext not in allowed:
            raise InvalidFileTypeError(filename, allowed)

        if size > settings.max_upload_size_bytes:
            raise FileTooLargeError(size / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)
        return ext

    @staticmethod
    def upload_image(
        filename: str,
        content: bytes,
        uploaded_by: str | None = None,
    ) -> dict[str, Any]:
        """
        Upload an image and record it in the media table.

        The stored name is random, so re-uploading the same filename never
        overwrites an earlier file.

        Returns:
            Media row with id, path, url, content_type, size

        Raises:
            StorageUploadError: If upload fails
        """
        ext = StorageService.validate_image(filename, len(content))
        path = f"{UPLOAD_PREFIX}/{uuid.uuid4().hex}{ext}"
        content_type = content_type_for(path)

        try:
            StorageService._bucket().upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

        client = SupabaseClient.get_client()
        response = client.table("media").insert({
            "path": path,
            "filename": filename,
            "content_type": content_type,
            "size": len(content),
            "url": media_url(path),
            "uploaded_by": uploaded_by,
        }).execute()

        logger.info(f"Uploaded {filename} to storage: {path}")
        return response.data[0]

    @staticmethod
    def download(path: str) -> bytes:
        """
        Raises:
            StorageDownloadError: If the object is missing or unreadable
        """
        try:
            return StorageService._bucket().download(path)
        except Exception as e:
            logger.warning(f"Storage download failed for {path}: {e}")
            raise StorageDownloadError(path, str(e))

    @staticmethod
    def list_media(page: int = 1, limit: int = 50) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        start, end = page_range(page, limit)
        response = (
            client.table("media")
            .select("*", count="exact")
            .order("created_at", desc=True)
            .range(start, end)
            .execute()
        )
        total = response.count or 0
        return {
            "media": response.data or [],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages(total, limit),
        }

    @staticmethod
    def delete_media(media_id: str) -> None:
        """Remove the stored object and its media row."""
        row = SupabaseClient.fetch_one("media", "id", str(media_id))
        if not row:
            raise NotFoundError("Media", str(media_id))

        try:
            StorageService._bucket().remove([row["path"]])
        except Exception as e:
            logger.error(f"Storage delete failed for {row['path']}: {e}")
            raise StorageDeleteError(row["path"], str(e))

        client = SupabaseClient.get_client()
        client.table("media").delete().eq("id", str(media_id)).execute()
        logger.info(f"Deleted media {media_id} ({row['path']})")
