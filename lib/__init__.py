# =============================================================================
# lib/ - Integration Clients and Standalone Helpers
# =============================================================================
# This package contains reusable, framework-free modules:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - luma_client.py: Luma public API client (events, people, guests)
# - stripe_client.py: Stripe SDK wrapper for membership billing
# - unsplash_client.py: Stock photo search
# - email_client.py: SendGrid transactional email
# - slugs.py: URL slug generation for people and companies
# - utils.py: Shared utilities (UUIDs, timestamps, pagination)
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.slugs import company_slug, person_slug, slugify
from lib.utils import normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Slugs
    "slugify",
    "person_slug",
    "company_slug",
    # Utils
    "normalize_uuid",
]
