# =============================================================================
# tests/test_sync.py - Reset & Sync Tests
# =============================================================================
# Drives SyncService.reset_and_sync() with a mocked Luma client and checks:
# - The stream always ends with exactly one complete or error event
# - Progress never goes backwards
# - People and attendance are replaced, events are upserted and pruned
# - Accounts are re-linked to their person by email
# - The SSE route frames each event as "data: {...}"
#
# Run with: pytest tests/test_sync.py -v
# =============================================================================

import json
from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import ExternalServiceError
from core.models.sync import SyncEventType
from core.services.sync_service import LAST_SYNC_KEY, ResetRun, SyncService


@pytest.fixture
def luma(luma_entries):
    mock = MagicMock()
    mock.list_events.return_value = luma_entries["events"]
    mock.list_people.return_value = luma_entries["people"]
    return mock


def _run(luma):
    return list(SyncService.reset_and_sync(luma=luma))


class TestResetAndSync:

    def test_ends_with_single_complete(self, db, luma):
        events = _run(luma)

        terminal = [e for e in events if e.is_terminal]
        assert len(terminal) == 1
        assert events[-1].type == SyncEventType.COMPLETE
        assert events[-1].progress == 100
        assert events[-1].data["events"] == 2
        assert events[-1].data["people"] == 2

    def test_progress_is_monotonic(self, db, luma):
        progress = [e.progress for e in _run(luma) if e.progress is not None]
        assert progress == sorted(progress)

    def test_replaces_people_and_attendance(self, db, luma):
        db.add("people", api_id="usr-gone01", slug="old-gone01", email="old@example.com")
        db.add("attendance", event_api_id="evt-AAA111", guest_api_id="g-1", user_email="old@example.com")

        _run(luma)

        assert {p["api_id"] for p in db.rows("people")} == {"usr-Jane01", "usr-Sam002"}
        assert db.rows("attendance") == []

    def test_keeps_event_settings_and_prunes_missing(self, db, luma):
        db.add("events", api_id="evt-AAA111", title="Old title", grants_premium_access=True)
        db.add("events", api_id="evt-GONE99", title="Cancelled")

        events = _run(luma)

        by_id = {e["api_id"]: e for e in db.rows("events")}
        assert set(by_id) == {"evt-AAA111", "evt-BBB222"}
        assert by_id["evt-AAA111"]["title"] == "Founders Breakfast"
        assert by_id["evt-AAA111"]["grants_premium_access"] is True
        assert any("no longer on Luma" in e.message for e in events)

    def test_people_rows_are_normalized(self, db, luma):
        _run(luma)

        jane = next(p for p in db.rows("people") if p["api_id"] == "usr-Jane01")
        assert jane["email"] == "jane@example.com"
        assert jane["slug"] == "jane-doe-jane01"
        sam = next(p for p in db.rows("people") if p["api_id"] == "usr-Sam002")
        assert sam["slug"] == "u-sam002"

    def test_relinks_accounts(self, db, luma, make_user):
        user = make_user("jane@example.com", person_id=None)

        _run(luma)

        jane = next(p for p in db.rows("people") if p["api_id"] == "usr-Jane01")
        stored = next(u for u in db.rows("users") if u["id"] == user["id"])
        assert stored["person_id"] == jane["id"]

    def test_records_last_sync(self, db, luma):
        _run(luma)
        assert SyncService.last_sync_time() is not None
        assert db.rows("cache_metadata")[0]["key"] == LAST_SYNC_KEY

    def test_duplicate_entries_collapse(self, db, luma, luma_entries):
        luma.list_people.return_value = luma_entries["people"] + luma_entries["people"][:1]

        events = _run(luma)

        assert events[-1].data["people"] == 2
        assert len(db.rows("people")) == 2

    def test_upstream_failure_ends_with_error(self, db, luma):
        luma.list_people.side_effect = ExternalServiceError("Luma", "rate limited", upstream_status=429)

        events = _run(luma)

        assert events[-1].type == SyncEventType.ERROR
        assert "rate limited" in events[-1].message
        assert events[-1].data["events"] == 2
        assert len([e for e in events if e.is_terminal]) == 1

    def test_events_phase_failure_ends_with_error(self, db, luma):
        luma.list_events.side_effect = ExternalServiceError("Luma", "bad gateway", upstream_status=502)

        events = _run(luma)

        assert events[-1].type == SyncEventType.ERROR
        assert "bad gateway" in events[-1].message
        assert len([e for e in events if e.is_terminal]) == 1
        luma.list_people.assert_not_called()

    def test_injected_client_is_not_closed(self, db, luma):
        _run(luma)
        luma.close.assert_not_called()


class TestResetRun:

    def test_stream_ends_with_complete(self, db, luma):
        events = list(ResetRun(luma).start().stream())

        assert events[-1].type == SyncEventType.COMPLETE
        assert len([e for e in events if e.is_terminal]) == 1

    def test_import_finishes_after_reader_leaves(self, db, luma):
        db.add("people", api_id="usr-gone01", slug="old-gone01")
        run = ResetRun(luma).start()

        stream = run.stream()
        for _ in range(3):
            next(stream)
        stream.close()

        assert run.join(timeout=10)
        assert {p["api_id"] for p in db.rows("people")} == {"usr-Jane01", "usr-Sam002"}
        assert SyncService.last_sync_time() is not None

    def test_failure_still_reaches_reader(self, db, luma):
        luma.list_events.side_effect = ExternalServiceError("Luma", "timeout")

        events = list(ResetRun(luma).start().stream())

        assert events[-1].type == SyncEventType.ERROR


class TestRefresh:

    def test_upserts_without_clearing(self, db, luma):
        db.add("attendance", event_api_id="evt-AAA111", guest_api_id="g-1", user_email="jane@example.com")

        with patch("core.services.sync_service.LumaClient.from_settings") as from_settings:
            from_settings.return_value.__enter__.return_value = luma
            stats = SyncService.refresh()

        assert stats["events"] == 2
        assert stats["people"] == 2
        assert len(db.rows("attendance")) == 1


class TestResetRoute:

    def test_streams_server_sent_events(self, client, db, luma, make_user, auth_headers):
        admin = make_user("admin@example.com", is_admin=True)

        with patch("core.services.sync_service.LumaClient.from_settings", return_value=luma):
            response = client.get("/_internal/reset-database", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        frames = [f for f in response.text.split("\n\n") if f]
        assert all(f.startswith("data: ") for f in frames)
        last = json.loads(frames[-1][len("data: "):])
        assert last["type"] == "complete"
        luma.close.assert_called_once()

    def test_admin_only(self, client, db, make_user, auth_headers):
        user = make_user()
        response = client.get("/_internal/reset-database", headers=auth_headers(user))
        assert response.status_code == 403
        assert response.json()["error"] == "ADMIN_REQUIRED"
