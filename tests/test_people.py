# =============================================================================
# tests/test_people.py - Directory People Tests
# =============================================================================
# Run with: pytest tests/test_people.py -v
# =============================================================================

import pytest

from app.exceptions import PersonNotFoundError
from core.services.person_service import (
    PersonService,
    build_missing_profile,
    person_row_from_luma,
)


@pytest.fixture
def jane(db):
    return db.add(
        "people",
        api_id="usr-8fK2mQ",
        slug="jane-doe-8fk2mq",
        email="jane@example.com",
        user_name="Jane Doe",
        organization_name="Acme",
        job_title="CTO",
    )


class TestMissingProfile:

    def test_complete_profile(self):
        assert build_missing_profile(has_user=True, has_name=True) is None

    def test_reasons(self):
        missing = build_missing_profile(has_user=False, has_name=False)
        assert missing.reasons == ["no_linked_account", "no_display_name"]
        assert "needs to set up" in missing.message

    def test_own_profile_wording(self):
        missing = build_missing_profile(has_user=True, has_name=False, is_own_profile=True)
        assert missing.message.startswith("Your profile")


class TestLookup:

    def test_by_slug_is_case_insensitive(self, db, jane):
        assert PersonService.get_by_slug("Jane-Doe-8FK2MQ")["id"] == jane["id"]

    def test_by_api_id(self, db, jane):
        assert PersonService.get_by_slug("usr-8fK2mQ")["id"] == jane["id"]

    def test_renamed_person_found_by_fragment(self, db, jane):
        assert PersonService.get_by_slug("jane-smith-8fk2mq")["id"] == jane["id"]

    def test_fragment_must_come_from_api_id(self, db, jane):
        db.add("people", api_id="usr-q1w2e3", slug="team-review", user_name="Team")

        with pytest.raises(PersonNotFoundError):
            PersonService.get_by_slug("best-review")

    def test_ambiguous_fragment_not_guessed(self, db, jane):
        db.add("people", api_id="org-8fk2mq", slug="jane-twin-8fk2mq", user_name="Jane Twin")

        with pytest.raises(PersonNotFoundError):
            PersonService.get_by_slug("jane-smith-8fk2mq")

    def test_unknown(self, db, jane):
        with pytest.raises(PersonNotFoundError):
            PersonService.get_by_slug("nobody-here")


class TestProfile:

    def test_no_linked_account(self, client, db, jane):
        response = client.get("/api/people/jane-doe-8fk2mq")

        assert response.status_code == 200
        body = response.json()
        assert body["user"] is None
        assert body["missing_profile"]["reasons"] == ["no_linked_account"]

    def test_linked_account_hides_private_contact(self, db, jane, make_user):
        make_user("jane@example.com", person_id=jane["id"], phone_number="555-0100", is_phone_public=False)

        profile = PersonService.get_profile("jane-doe-8fk2mq")

        assert profile["missing_profile"] is None
        assert "phone_number" not in profile["user"]
        assert "password" not in profile["user"]

    def test_public_contact_shown(self, db, jane, make_user):
        make_user("jane@example.com", is_email_public=True)
        profile = PersonService.get_profile("jane-doe-8fk2mq")
        assert profile["user"]["email"] == "jane@example.com"

    def test_events_attended(self, client, db, jane):
        db.add("events", api_id="evt-1", title="One", start_time="2025-01-01T00:00:00+00:00")
        db.add("events", api_id="evt-2", title="Two", start_time="2025-02-01T00:00:00+00:00")
        for event_id in ("evt-1", "evt-2"):
            db.add("attendance", event_api_id=event_id, guest_api_id=f"g-{event_id}", user_email="jane@example.com")

        profile = client.get("/api/people/jane-doe-8fk2mq").json()
        events = client.get("/api/people/jane-doe-8fk2mq/events").json()["events"]

        assert profile["events_attended"] == 2
        assert [e["api_id"] for e in events] == ["evt-2", "evt-1"]


class TestListing:

    def test_search(self, client, db, jane):
        db.add("people", api_id="usr-other1", slug="bob-other1", user_name="Bob", job_title="Chef")

        response = client.get("/api/people", params={"search": "acme"})

        assert response.status_code == 200
        assert [p["user_name"] for p in response.json()["people"]] == ["Jane Doe"]

    def test_limit_is_bounded(self, client, db):
        response = client.get("/api/people", params={"limit": 500})
        assert response.status_code == 400


class TestLumaMapping:

    def test_email_lowercased_and_slugged(self):
        row = person_row_from_luma({"api_id": "usr-ABC123", "email": " Bob@X.com ", "user": {"name": "Bob"}})
        assert row["email"] == "bob@x.com"
        assert row["slug"] == "bob-abc123"
