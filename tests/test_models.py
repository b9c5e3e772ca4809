# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the request/response models to ensure:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Default values work as expected
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

import json
from uuid import uuid4

import pytest
from pydantic import ValidationError

from core.models.company import CompanyCreate, CompanyMemberCreate, CompanyMemberRole
from core.models.post import PostCreate, PostStatus
from core.models.sync import SyncEvent, SyncEventType
from core.models.user import UserProfileUpdate, UserRegister


class TestUserModels:

    def test_register_requires_valid_email(self):
        with pytest.raises(ValidationError):
            UserRegister(email="not-an-email", password="long-enough")

    def test_register_password_length(self):
        with pytest.raises(ValidationError):
            UserRegister(email="a@example.com", password="short")

    def test_profile_update_partial(self):
        update = UserProfileUpdate(bio="Hello")
        assert update.model_dump(exclude_unset=True) == {"bio": "Hello"}

    def test_custom_link_needs_title(self):
        with pytest.raises(ValidationError):
            UserProfileUpdate(custom_links=[{"title": "", "url": "https://x"}])


class TestPostModels:

    def test_defaults(self):
        post = PostCreate(title="Hi", body="There")
        assert post.status == PostStatus.DRAFT
        assert post.members_only is False
        assert post.tags == []

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            PostCreate(title="Hi", body="There", status="archived")


class TestCompanyModels:

    def test_member_defaults(self):
        member = CompanyMemberCreate(user_id=uuid4())
        assert member.role == CompanyMemberRole.USER
        assert member.is_public is True

    def test_name_required(self):
        with pytest.raises(ValidationError):
            CompanyCreate(name="")


class TestSyncEvent:

    def test_sse_frame(self):
        frame = SyncEvent(type=SyncEventType.PROGRESS, message="Imported 1/2 events", progress=30).to_sse()

        assert frame.startswith("data: ")
        assert frame.endswith("\n\n")
        assert json.loads(frame[len("data: "):]) == {
            "type": "progress",
            "message": "Imported 1/2 events",
            "progress": 30,
        }

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            SyncEvent(type=SyncEventType.STATUS, message="x", progress=101)

    def test_terminal(self):
        assert SyncEvent(type=SyncEventType.ERROR, message="x").is_terminal
        assert not SyncEvent(type=SyncEventType.STATUS, message="x").is_terminal
