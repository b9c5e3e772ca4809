# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - user.py: Accounts, credentials and premium fields
# - person.py: Directory people and the missing-profile panel
# - company.py: Companies and company members
# - event.py: Events, speakers, presentations, attendees
# - post.py: Bulletin posts and tags
# - role.py: Roles, permissions and the permission grid
# - timeline.py: About page milestones
# - sync.py: Reset & sync progress events
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Accounts
# -----------------------------------------------------------------------------
from .user import (
    AdminUserUpdate,
    CustomLink,
    PasswordResetConfirm,
    PasswordResetRequest,
    PremiumSource,
    UserList,
    UserLogin,
    UserProfileUpdate,
    UserRegister,
    UserResponse,
    VerifyEmailRequest,
)

# -----------------------------------------------------------------------------
# Directory
# -----------------------------------------------------------------------------
from .person import (
    LinkedUserSummary,
    MissingProfile,
    PersonList,
    PersonProfile,
    PersonResponse,
)
from .company import (
    MANAGING_ROLES,
    CompanyCreate,
    CompanyList,
    CompanyMemberCreate,
    CompanyMemberResponse,
    CompanyMemberRole,
    CompanyMemberUpdate,
    CompanyResponse,
    CompanyUpdate,
)

# -----------------------------------------------------------------------------
# Events
# -----------------------------------------------------------------------------
from .event import (
    AttendeeResponse,
    EventAgenda,
    EventList,
    EventLocation,
    EventPremiumSettings,
    EventResponse,
    PresentationCreate,
    PresentationResponse,
    PresentationUpdate,
    SpeakerCreate,
    SpeakerResponse,
    SpeakerUpdate,
)

# -----------------------------------------------------------------------------
# Bulletin
# -----------------------------------------------------------------------------
from .post import (
    PostCreate,
    PostList,
    PostResponse,
    PostStatus,
    PostUpdate,
    TagResponse,
)

# -----------------------------------------------------------------------------
# Roles, Timeline, Sync
# -----------------------------------------------------------------------------
from .role import (
    PermissionResponse,
    RoleMatrixRow,
    RolePermissionCell,
    RolePermissionChange,
    RoleResponse,
)
from .timeline import (
    TimelineEventCreate,
    TimelineEventResponse,
    TimelineEventUpdate,
)
from .sync import (
    SyncEvent,
    SyncEventType,
    SyncStats,
)

__all__ = [
    # User
    "AdminUserUpdate",
    "CustomLink",
    "PasswordResetConfirm",
    "PasswordResetRequest",
    "PremiumSource",
    "UserList",
    "UserLogin",
    "UserProfileUpdate",
    "UserRegister",
    "UserResponse",
    "VerifyEmailRequest",
    # Person
    "LinkedUserSummary",
    "MissingProfile",
    "PersonList",
    "PersonProfile",
    "PersonResponse",
    # Company
    "MANAGING_ROLES",
    "CompanyCreate",
    "CompanyList",
    "CompanyMemberCreate",
    "CompanyMemberResponse",
    "CompanyMemberRole",
    "CompanyMemberUpdate",
    "CompanyResponse",
    "CompanyUpdate",
    # Event
    "AttendeeResponse",
    "EventAgenda",
    "EventList",
    "EventLocation",
    "EventPremiumSettings",
    "EventResponse",
    "PresentationCreate",
    "PresentationResponse",
    "PresentationUpdate",
    "SpeakerCreate",
    "SpeakerResponse",
    "SpeakerUpdate",
    # Post
    "PostCreate",
    "PostList",
    "PostResponse",
    "PostStatus",
    "PostUpdate",
    "TagResponse",
    # Role
    "PermissionResponse",
    "RoleMatrixRow",
    "RolePermissionCell",
    "RolePermissionChange",
    "RoleResponse",
    # Timeline
    "TimelineEventCreate",
    "TimelineEventResponse",
    "TimelineEventUpdate",
    # Sync
    "SyncEvent",
    "SyncEventType",
    "SyncStats",
]
