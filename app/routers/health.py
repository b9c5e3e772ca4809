# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import SupabaseDep
from lib.utils import utcnow_iso

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str
    storage: str
    luma: str
    stripe: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=utcnow_iso(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(supabase: SupabaseDep):
    """
    Readiness check endpoint.

    Checks database and storage connectivity and reports whether the
    optional integrations are configured. Only the database and storage
    decide the overall status.
    """
    checks = ChecksResponse(
        database="unknown",
        storage="unknown",
        luma="configured" if settings.LUMA_API_KEY else "not configured",
        stripe="configured" if settings.STRIPE_SECRET_KEY else "not configured",
    )

    # Check database
    try:
        client = supabase.get_client()
        client.table("users").select("id").limit(1).execute()
        checks.database = "healthy"
    except Exception as e:
        logger.warning(f"Database readiness check failed: {e}")
        checks.database = f"unhealthy: {str(e)[:50]}"

    # Check storage
    try:
        client = supabase.get_client()
        client.storage.list_buckets()
        checks.storage = "healthy"
    except Exception as e:
        logger.warning(f"Storage readiness check failed: {e}")
        checks.storage = f"unhealthy: {str(e)[:50]}"

    all_healthy = checks.database == "healthy" and checks.storage == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=utcnow_iso(),
    )
