# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .attendance_service import AttendanceService
from .billing_service import BillingService
from .company_service import CompanyService
from .event_service import EventService
from .person_service import PersonService
from .post_service import PostService
from .premium_service import PremiumService, has_active_premium, can_view_members_content
from .role_service import RoleService, REQUIRED_ROLE_PERMISSIONS
from .storage_service import StorageService
from .sync_service import SyncService
from .tag_service import TagService
from .timeline_service import TimelineService
from .user_service import UserService, public_user

__all__ = [
    "AttendanceService",
    "BillingService",
    "CompanyService",
    "EventService",
    "PersonService",
    "PostService",
    "PremiumService",
    "has_active_premium",
    "can_view_members_content",
    "RoleService",
    "REQUIRED_ROLE_PERMISSIONS",
    "StorageService",
    "SyncService",
    "TagService",
    "TimelineService",
    "UserService",
    "public_user",
]
