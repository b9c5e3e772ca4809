# =============================================================================
# tests/test_admin.py - Admin, Health & Worker Task Tests
# =============================================================================
# Run with: pytest tests/test_admin.py -v
# =============================================================================

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import ExternalServiceError, ServiceNotConfiguredError
from core.services.sync_service import LAST_SYNC_KEY
from lib.supabase_client import SupabaseClient
from lib.utils import utcnow


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", is_admin=True)


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client, db):
        response = client.get("/api/health/ready")
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"] == "healthy"
        assert body["checks"]["luma"] == "configured"


class TestStats:

    def test_counts(self, client, db, admin, make_user, auth_headers):
        make_user("paid@example.com", subscription_status="active")
        make_user("new@example.com", is_verified=False)
        db.add("people", api_id="usr-1", slug="a-usr1")
        SupabaseClient.set_cache_metadata(LAST_SYNC_KEY, "2025-03-01T00:00:00+00:00")

        response = client.get("/api/admin/stats", headers=auth_headers(admin))

        body = response.json()
        assert body["users"] == 3
        assert body["verified_users"] == 2
        assert body["premium_users"] == 1
        assert body["people"] == 1
        assert body["last_sync"] == "2025-03-01T00:00:00+00:00"

    def test_premium_counts_grants(self, client, db, admin, make_user, auth_headers):
        future = (utcnow() + timedelta(days=30)).isoformat()
        past = (utcnow() - timedelta(days=1)).isoformat()
        make_user("paid@example.com", subscription_status="active", premium_source="luma", premium_expires_at=future)
        make_user("ticket@example.com", premium_source="luma", premium_expires_at=future)
        make_user("lapsed@example.com", premium_source="manual", premium_expires_at=past)

        response = client.get("/api/admin/stats", headers=auth_headers(admin))

        assert response.json()["premium_users"] == 2

    def test_admin_only(self, client, db, make_user, auth_headers):
        response = client.get("/api/admin/stats", headers=auth_headers(make_user()))
        assert response.status_code == 403


class TestUserAdministration:

    def test_list_and_search(self, client, db, admin, make_user, auth_headers):
        make_user("someone@example.com", display_name="Someone Else")

        response = client.get("/api/admin/users", params={"search": "someone"}, headers=auth_headers(admin))

        body = response.json()
        assert body["total"] == 1
        assert body["users"][0]["email"] == "someone@example.com"
        assert "password" not in body["users"][0]

    def test_manual_premium_grant_and_revoke(self, client, db, admin, make_user, auth_headers):
        user = make_user()
        until = (utcnow() + timedelta(days=30)).isoformat()

        granted = client.patch(
            f"/api/admin/users/{user['id']}",
            json={"premium_expires_at": until},
            headers=auth_headers(admin),
        )
        revoked = client.patch(
            f"/api/admin/users/{user['id']}",
            json={"revoke_premium": True},
            headers=auth_headers(admin),
        )

        assert granted.json()["premium_source"] == "manual"
        assert granted.json()["has_premium"] is True
        assert revoked.json()["premium_source"] is None
        assert revoked.json()["has_premium"] is False

    def test_promote_to_admin(self, client, db, admin, make_user, auth_headers):
        user = make_user()
        response = client.patch(
            f"/api/admin/users/{user['id']}", json={"is_admin": True}, headers=auth_headers(admin)
        )
        assert response.json()["is_admin"] is True


class TestQueuedSyncs:

    def test_refresh_is_queued(self, client, db, admin, auth_headers):
        with patch("workers.tasks.refresh_directory_task") as task:
            task.delay.return_value = MagicMock(id="task-1")
            response = client.post("/api/admin/refresh", headers=auth_headers(admin))

        assert response.json() == {"task_id": "task-1", "status": "queued", "message": "Directory refresh queued"}
        task.delay.assert_called_once_with()

    def test_attendance_sync_passes_window(self, client, db, admin, auth_headers):
        with patch("workers.tasks.sync_attendance_task") as task:
            task.delay.return_value = MagicMock(id="task-2")
            client.post("/api/admin/sync-attendance", params={"upcoming": "true"}, headers=auth_headers(admin))

        task.delay.assert_called_once_with(upcoming=True)


class TestWorkerTasks:

    def test_refresh_without_luma_key(self):
        from workers.tasks import refresh_directory_task

        with patch(
            "core.services.sync_service.SyncService.refresh",
            side_effect=ServiceNotConfiguredError("Luma", "LUMA_API_KEY"),
        ):
            result = refresh_directory_task.apply().get()

        assert result["success"] is False

    def test_luma_failure_is_not_retried(self):
        from workers.tasks import refresh_directory_task

        with patch(
            "core.services.sync_service.SyncService.refresh",
            side_effect=ExternalServiceError("Luma", "bad gateway"),
        ) as refresh:
            result = refresh_directory_task.apply().get()

        assert result == {"success": False, "error": "Luma request failed: bad gateway"}
        refresh.assert_called_once_with()

    def test_no_retry_policy_configured(self):
        from workers.config import CeleryConfig

        assert not hasattr(CeleryConfig, "task_annotations")

    def test_attendance_summary(self):
        from workers.tasks import sync_attendance_task

        results = [{"event_api_id": "evt-1", "attendees": 3}, {"event_api_id": "evt-2", "error": "boom"}]
        with patch(
            "core.services.attendance_service.AttendanceService.sync_events",
            return_value=results,
        ):
            result = sync_attendance_task.apply(kwargs={"upcoming": True}).get()

        assert result["events"] == 2
        assert result["failed"] == 1
        assert result["success"] is False


class TestTaskStatus:

    def test_success_carries_result(self, client, db, admin, auth_headers):
        with patch("workers.celery_app.celery_app.AsyncResult") as async_result:
            async_result.return_value = MagicMock(status="SUCCESS", result={"people": 12})
            response = client.get("/api/admin/tasks/task-1", headers=auth_headers(admin))

        body = response.json()
        assert body["status"] == "SUCCESS"
        assert body["result"] == {"people": 12}

    def test_finished_task_not_cancelled(self, client, db, admin, auth_headers):
        with patch("workers.celery_app.celery_app.AsyncResult") as async_result:
            async_result.return_value = MagicMock(status="FAILURE")
            response = client.delete("/api/admin/tasks/task-1", headers=auth_headers(admin))

        assert response.json()["cancelled"] is False
