# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for data validation
# - services/: Directory, events, bulletin, billing and sync operations
#
# Services raise app.exceptions errors and read/write through
# lib.supabase_client. Routers stay thin and delegate here.
# =============================================================================
