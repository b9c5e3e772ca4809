# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error leaves the API as {"error": <code>, "message": <text>} with an
# optional suggestion telling the caller how to fix it.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class LumateException(Exception):
    """
    Base exception for the Lumate API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "LUMATE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.code,
            "message": self.message,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Lookup Exceptions
# =============================================================================

class NotFoundError(LumateException):
    """Raised when a record doesn't exist."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            details={"id": identifier},
        )


class PersonNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__("Person", identifier)


class CompanyNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__("Company", identifier)


class EventNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__("Event", identifier)


class PostNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__("Post", identifier)


class UserNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__("User", identifier)


class RoleNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__("Role", identifier)


class PermissionNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__("Permission", identifier)


class DuplicateError(LumateException):
    """Raised when a unique value is already taken."""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            message=f"{resource} with {field} '{value}' already exists",
            code="DUPLICATE",
            status_code=409,
            details={"field": field, "value": value},
        )


# =============================================================================
# Authentication / Authorization Exceptions
# =============================================================================

class NotAuthenticatedError(LumateException):
    """Raised when a route needs a session and none is present."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            message=message,
            code="NOT_AUTHENTICATED",
            status_code=401,
            suggestion="Log in and try again",
        )


class InvalidCredentialsError(LumateException):
    def __init__(self):
        super().__init__(
            message="Invalid email or password",
            code="INVALID_CREDENTIALS",
            status_code=401,
        )


class EmailNotVerifiedError(LumateException):
    def __init__(self, email: str):
        super().__init__(
            message="Email address has not been verified",
            code="EMAIL_NOT_VERIFIED",
            status_code=403,
            suggestion="Follow the link in the verification email we sent you",
            details={"email": email},
        )


class InvalidTokenError(LumateException):
    """Raised for unknown, used or expired verification/reset tokens."""

    def __init__(self, reason: str = "Invalid or expired token"):
        super().__init__(
            message=reason,
            code="INVALID_TOKEN",
            status_code=400,
            suggestion="Request a new link and try again",
        )


class ForbiddenError(LumateException):
    def __init__(self, message: str = "You don't have access to this resource"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
        )


class AdminRequiredError(ForbiddenError):
    def __init__(self):
        super().__init__("Admin access required")
        self.code = "ADMIN_REQUIRED"


class PermissionDeniedError(ForbiddenError):
    def __init__(self, permission: str):
        super().__init__(f"Missing permission: {permission}")
        self.code = "PERMISSION_DENIED"
        self.details = {"permission": permission}


class PremiumRequiredError(LumateException):
    def __init__(self):
        super().__init__(
            message="An active membership is required",
            code="PREMIUM_REQUIRED",
            status_code=403,
            suggestion="Subscribe to a membership to unlock this content",
        )


class RequiredPermissionError(LumateException):
    """Raised when removing a permission that a built-in role must keep."""

    def __init__(self, role: str, permission: str):
        super().__init__(
            message=f"Permission '{permission}' is required for role '{role}' and cannot be removed",
            code="REQUIRED_PERMISSION",
            status_code=409,
            details={"role": role, "permission": permission},
        )


# =============================================================================
# Billing Exceptions
# =============================================================================

class BillingError(LumateException):
    """Raised when a billing action doesn't apply to the account."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(
            message=message,
            code="BILLING_ERROR",
            status_code=400,
            suggestion=suggestion,
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(LumateException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(LumateException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class StorageUploadError(LumateException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class StorageDeleteError(LumateException):
    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Failed to delete file from storage: {error}",
            code="STORAGE_DELETE_ERROR",
            status_code=500,
            details={"path": path, "error": error}
        )


class StorageDownloadError(LumateException):
    """Raised when a file can't be read back from storage."""

    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Failed to download file from storage: {error}",
            code="STORAGE_DOWNLOAD_ERROR",
            status_code=404,
            details={"path": path, "error": error}
        )


# =============================================================================
# External Service Exceptions
# =============================================================================

class ExternalServiceError(LumateException):
    """
    Raised when Luma, Stripe, Unsplash or SendGrid rejects a call.

    The upstream status code is forwarded as-is. Connection failures
    (no upstream response) map to 502.
    """

    def __init__(self, service: str, message: str, upstream_status: int | None = None):
        super().__init__(
            message=f"{service} request failed: {message}",
            code=f"{service.upper()}_ERROR",
            status_code=upstream_status or 502,
            details={"service": service, "upstream_status": upstream_status},
        )
        self.service = service
        self.upstream_status = upstream_status


class ServiceNotConfiguredError(LumateException):
    def __init__(self, service: str, setting: str):
        super().__init__(
            message=f"{service} is not configured",
            code="SERVICE_NOT_CONFIGURED",
            status_code=503,
            suggestion=f"Set {setting} in the environment",
            details={"service": service},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def lumate_exception_handler(
    request: Request,
    exc: LumateException
) -> JSONResponse:
    """
    Convert LumateException to JSON response.

    Returns structured error with:
    - error: Machine-readable error code
    - message: Human-readable message
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Answers 400 with one entry per offending field.
    """
    fields = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "details": {"fields": fields},
        }
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (404 routes, 405, ...) in the same shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP_ERROR",
            "message": str(exc.detail),
        },
        headers=getattr(exc, "headers", None),
    )
