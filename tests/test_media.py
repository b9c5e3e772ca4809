# =============================================================================
# tests/test_media.py - Media Upload Tests
# =============================================================================
# Run with: pytest tests/test_media.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError, StorageUploadError
from core.services.storage_service import StorageService, content_type_for

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class TestValidation:

    @pytest.mark.parametrize("filename", ["avatar.png", "PHOTO.JPG", "x.webp"])
    def test_allowed(self, filename):
        assert StorageService.validate_image(filename, 1024).startswith(".")

    @pytest.mark.parametrize("filename", ["script.exe", "noext", ""])
    def test_rejected_type(self, filename):
        with pytest.raises(InvalidFileTypeError):
            StorageService.validate_image(filename, 10)

    def test_too_large(self):
        too_big = settings.max_upload_size_bytes + 1
        with pytest.raises(FileTooLargeError):
            StorageService.validate_image("big.png", too_big)

    def test_content_type(self):
        assert content_type_for("uploads/a.JPEG") == "image/jpeg"
        assert content_type_for("uploads/a.bin") == "application/octet-stream"


class TestUpload:

    def test_upload_records_row(self, db, make_user):
        user = make_user()
        row = StorageService.upload_image("avatar.png", PNG_BYTES, uploaded_by=user["id"])

        assert row["path"].startswith("uploads/")
        assert row["path"].endswith(".png")
        assert row["url"] == f"/api/media/{row['path']}"
        assert db.storage.objects[row["path"]] == PNG_BYTES

    def test_same_name_never_overwrites(self, db):
        first = StorageService.upload_image("avatar.png", PNG_BYTES)
        second = StorageService.upload_image("avatar.png", PNG_BYTES)
        assert first["path"] != second["path"]

    def test_storage_failure(self, db):
        db.storage.fail_uploads = True
        with pytest.raises(StorageUploadError):
            StorageService.upload_image("avatar.png", PNG_BYTES)
        assert db.rows("media") == []


class TestMediaRoutes:

    def test_upload_and_serve(self, client, db, make_user, auth_headers):
        user = make_user()
        upload = client.post(
            "/api/media",
            files={"file": ("avatar.png", PNG_BYTES, "image/png")},
            headers=auth_headers(user),
        )
        assert upload.status_code == 201

        served = client.get(upload.json()["url"])

        assert served.status_code == 200
        assert served.content == PNG_BYTES
        assert served.headers["content-type"] == "image/png"
        assert served.headers["cache-control"] == "public, max-age=31536000"

    def test_oversized_upload_rejected(self, client, db, make_user, auth_headers):
        with patch.object(settings, "MAX_UPLOAD_SIZE_MB", 0):
            response = client.post(
                "/api/media",
                files={"file": ("avatar.png", PNG_BYTES, "image/png")},
                headers=auth_headers(make_user()),
            )

        assert response.status_code == 413
        assert db.storage.objects == {}
        assert db.rows("media") == []

    def test_upload_requires_login(self, client, db):
        response = client.post("/api/media", files={"file": ("avatar.png", PNG_BYTES, "image/png")})
        assert response.status_code == 401

    def test_missing_object(self, client, db):
        response = client.get("/api/media/uploads/nothing.png")
        assert response.status_code == 404

    def test_delete_needs_manage_media(self, client, db, seeded_roles, make_user, auth_headers):
        user = make_user()
        row = StorageService.upload_image("avatar.png", PNG_BYTES, uploaded_by=user["id"])

        denied = client.delete(f"/api/media/{row['id']}", headers=auth_headers(user))
        admin = make_user("admin@example.com", is_admin=True)
        allowed = client.delete(f"/api/media/{row['id']}", headers=auth_headers(admin))

        assert denied.status_code == 403
        assert allowed.status_code == 204
        assert db.storage.objects == {}
