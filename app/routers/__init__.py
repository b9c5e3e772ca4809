# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - people.py / companies.py: The directory
# - events.py: Events, agenda and attendance
# - posts.py / tags.py: The bulletin
# - roles.py: Role/permission grid and user role assignments
# - timeline.py: About page milestones
# - media.py / unsplash.py: Images
# - billing.py: Stripe membership
# - admin.py / tasks.py: User admin, stats and background sync
# - internal.py: The reset & sync stream
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import people
from . import companies
from . import events
from . import posts
from . import tags
from . import roles
from . import timeline
from . import media
from . import unsplash
from . import billing
from . import admin
from . import tasks
from . import internal

__all__ = [
    "health",
    "people",
    "companies",
    "events",
    "posts",
    "tags",
    "roles",
    "timeline",
    "media",
    "unsplash",
    "billing",
    "admin",
    "tasks",
    "internal",
]
