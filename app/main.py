# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Lumate API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.exceptions import (
    LumateException,
    http_exception_handler,
    lumate_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    admin,
    billing,
    companies,
    events,
    health,
    internal,
    media,
    people,
    posts,
    roles,
    tags,
    tasks,
    timeline,
    unsplash,
)
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the configuration on startup, including which optional
    integrations are switched off.
    """
    logger.info(f"Starting Lumate API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    for name, value in (
        ("LUMA_API_KEY", settings.LUMA_API_KEY),
        ("STRIPE_SECRET_KEY", settings.STRIPE_SECRET_KEY),
        ("UNSPLASH_ACCESS_KEY", settings.UNSPLASH_ACCESS_KEY),
        ("SENDGRID_API_KEY", settings.SENDGRID_API_KEY),
    ):
        if not value:
            logger.warning(f"{name} is not set; the matching endpoints will answer 503")

    yield

    logger.info("Shutting down Lumate API")


# Create FastAPI application
app = FastAPI(
    title="Lumate API",
    description="""
## Community Directory API

Lumate mirrors a Luma calendar into a member directory.

- **Directory**: people imported from Luma, and companies with their members
- **Events**: Luma events with curated speakers and presentations
- **Bulletin**: posts with tags, drafts and members-only content
- **Membership**: Stripe subscriptions and ticket-based premium access
- **Admin**: roles & permissions, users, media, and the reset & sync stream

Authentication is a session cookie set by `POST /api/auth/login`.
""",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Registration, login and the current user"},
        {"name": "People", "description": "Directory people and profiles"},
        {"name": "Companies", "description": "Company profiles and members"},
        {"name": "Events", "description": "Events, agendas and attendance"},
        {"name": "Posts", "description": "Bulletin posts"},
        {"name": "Tags", "description": "Post tags"},
        {"name": "Roles", "description": "Roles, permissions and assignments"},
        {"name": "Timeline", "description": "About page timeline"},
        {"name": "Media", "description": "Image upload and serving"},
        {"name": "Unsplash", "description": "Image search"},
        {"name": "Billing", "description": "Stripe membership"},
        {"name": "Admin", "description": "User admin, stats and background sync"},
        {"name": "Tasks", "description": "Background task status"},
        {"name": "Internal", "description": "Reset & sync stream"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# Session cookies need explicit origins; "*" is refused with credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(LumateException)
async def handle_lumate_exception(request: Request, exc: LumateException):
    """Handle custom Lumate exceptions."""
    return await lumate_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/auth", tags=["Auth"])
app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(people.router, prefix="/api/people", tags=["People"])
app.include_router(companies.router, prefix="/api/companies", tags=["Companies"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
app.include_router(tags.router, prefix="/api/tags", tags=["Tags"])
app.include_router(roles.router, prefix="/api/roles", tags=["Roles"])
app.include_router(timeline.router, prefix="/api/timeline", tags=["Timeline"])
app.include_router(media.router, prefix="/api/media", tags=["Media"])
app.include_router(unsplash.router, prefix="/api/unsplash", tags=["Unsplash"])
app.include_router(billing.router, prefix="/api/stripe", tags=["Billing"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(tasks.router, prefix="/api/admin/tasks", tags=["Tasks"])

# Reset & sync stream (opened directly by the browser's EventSource)
app.include_router(internal.router, prefix="/_internal", tags=["Internal"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Lumate API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }
