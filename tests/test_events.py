# =============================================================================
# tests/test_events.py - Events, Agenda & Attendance Tests
# =============================================================================
# Run with: pytest tests/test_events.py -v
# =============================================================================

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from app.exceptions import NotFoundError
from core.models.event import PresentationCreate, SpeakerCreate
from core.services.attendance_service import AttendanceService
from core.services.event_service import EventService, event_row_from_luma
from core.services.premium_service import default_grant_expiry, has_active_premium
from lib.utils import utcnow


@pytest.fixture
def event(db):
    return db.add(
        "events",
        api_id="evt-AAA111",
        title="Founders Breakfast",
        start_time="2025-03-01T14:00:00+00:00",
        end_time="2025-03-01T16:00:00+00:00",
        grants_premium_access=False,
        premium_ticket_types=[],
        premium_expires_at=None,
    )


def _guest(api_id, email, status="approved", ticket_type="tkt-vip"):
    return {
        "api_id": api_id,
        "guest": {
            "api_id": api_id,
            "email": email,
            "approval_status": status,
            "registered_at": "2025-02-01T00:00:00Z",
            "event_ticket": {"event_ticket_type_id": ticket_type, "name": "VIP", "amount": 2500},
        },
    }


@pytest.fixture
def luma():
    mock = MagicMock()
    mock.list_guests.return_value = [
        _guest("g-1", "Jane@Example.com"),
        _guest("g-2", "sam@example.com", ticket_type="tkt-general"),
        _guest("g-3", "pending@example.com", status="pending_approval"),
    ]
    return mock


class TestLumaMapping:

    def test_location_and_title(self):
        row = event_row_from_luma({
            "api_id": "evt-1",
            "event": {
                "api_id": "evt-1",
                "name": "Meetup",
                "start_at": "2025-01-01T00:00:00Z",
                "geo_address_json": {"city": "Sarasota"},
                "geo_latitude": "27.3",
            },
        })
        assert row["title"] == "Meetup"
        assert row["end_time"] == "2025-01-01T00:00:00Z"
        assert row["location"]["city"] == "Sarasota"
        assert row["location"]["latitude"] == 27.3

    def test_untitled(self):
        assert event_row_from_luma({"api_id": "evt-2"})["title"] == "Untitled event"


class TestAttendanceSync:

    def test_only_approved_guests(self, db, event, luma):
        result = AttendanceService.sync_event("evt-AAA111", luma=luma)

        assert result["attendees"] == 2
        assert {r["user_email"] for r in db.rows("attendance")} == {"jane@example.com", "sam@example.com"}
        assert db.rows("events")[0]["last_attendance_sync"] is not None

    def test_resync_replaces_rows(self, db, event, luma):
        AttendanceService.sync_event("evt-AAA111", luma=luma)
        AttendanceService.sync_event("evt-AAA111", luma=luma)
        assert len(db.rows("attendance")) == 2

    def test_premium_ticket_grants_access(self, db, event, luma, make_user):
        db.rows("events")[0].update(grants_premium_access=True, premium_ticket_types=["tkt-vip"])
        jane = make_user("jane@example.com")
        sam = make_user("sam@example.com")

        result = AttendanceService.sync_event("evt-AAA111", luma=luma)

        stored = {u["email"]: u for u in db.rows("users")}
        assert result["premium_granted"] == 1
        assert stored[jane["email"]]["premium_source"] == "luma"
        assert stored[sam["email"]]["premium_source"] is None

    def test_grant_expires_end_of_event_year(self):
        expiry = default_grant_expiry("2025-03-01T14:00:00+00:00")
        assert expiry == datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc)

    def test_subscriber_left_alone(self, db, event, luma, make_user):
        db.rows("events")[0].update(grants_premium_access=True, premium_ticket_types=["tkt-vip"])
        make_user("jane@example.com", subscription_status="active")

        result = AttendanceService.sync_event("evt-AAA111", luma=luma)

        assert result["premium_granted"] == 0

    def test_longer_grant_is_kept(self, db, event, luma, make_user):
        later = (utcnow() + timedelta(days=3650)).isoformat()
        db.rows("events")[0].update(
            grants_premium_access=True,
            premium_ticket_types=["tkt-vip"],
            premium_expires_at=(utcnow() + timedelta(days=30)).isoformat(),
        )
        make_user("jane@example.com", premium_source="luma", premium_expires_at=later)

        AttendanceService.sync_event("evt-AAA111", luma=luma)

        jane = next(u for u in db.rows("users") if u["email"] == "jane@example.com")
        assert jane["premium_expires_at"] == later
        assert has_active_premium(jane)


class TestAgenda:

    def test_speakers_and_presentations(self, db, event):
        speaker = EventService.create_speaker("evt-AAA111", SpeakerCreate(name="Ada", display_order=2))
        EventService.create_speaker("evt-AAA111", SpeakerCreate(name="Bob", display_order=1))
        EventService.create_presentation(
            "evt-AAA111", PresentationCreate(title="Keynote", speaker_ids=[speaker["id"]])
        )

        agenda = EventService.get_agenda("evt-AAA111")

        assert [s["name"] for s in agenda["speakers"]] == ["Bob", "Ada"]
        assert agenda["presentations"][0]["speaker_ids"] == [speaker["id"]]

    def test_presentation_speaker_must_belong_to_event(self, db, event):
        db.add("events", api_id="evt-OTHER", title="Other",
               start_time="2025-05-01T00:00:00+00:00", end_time="2025-05-01T02:00:00+00:00")
        foreign = EventService.create_speaker("evt-OTHER", SpeakerCreate(name="Eve"))

        with pytest.raises(NotFoundError):
            EventService.create_presentation(
                "evt-AAA111", PresentationCreate(title="Talk", speaker_ids=[foreign["id"]])
            )

    def test_speaker_of_other_event_not_editable(self, db, event):
        db.add("events", api_id="evt-OTHER", title="Other",
               start_time="2025-05-01T00:00:00+00:00", end_time="2025-05-01T02:00:00+00:00")
        foreign = EventService.create_speaker("evt-OTHER", SpeakerCreate(name="Eve"))

        with pytest.raises(NotFoundError):
            EventService.delete_speaker("evt-AAA111", foreign["id"])


class TestEventRoutes:

    def test_public_agenda(self, client, db, event):
        response = client.get("/api/events/evt-AAA111/agenda")
        assert response.status_code == 200
        assert response.json()["event"]["title"] == "Founders Breakfast"

    def test_unknown_event(self, client, db):
        response = client.get("/api/events/evt-missing")
        assert response.status_code == 404
        assert response.json()["error"] == "EVENT_NOT_FOUND"

    def test_premium_settings_need_manage_events(self, client, db, seeded_roles, event, make_user, auth_headers):
        user = make_user()
        payload = {"grants_premium_access": True, "premium_ticket_types": ["tkt-vip"]}

        denied = client.put("/api/events/evt-AAA111/premium-settings", json=payload, headers=auth_headers(user))
        admin = make_user("admin@example.com", is_admin=True)
        allowed = client.put("/api/events/evt-AAA111/premium-settings", json=payload, headers=auth_headers(admin))

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["premium_ticket_types"] == ["tkt-vip"]
