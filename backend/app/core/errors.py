"""Error Hierarchy — typed, categorized exceptions for every Throwback failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are 4xx; infrastructure errors are 5xx
    - to_response() produces the {"success": false, "message": ...} envelope
    - Upload errors share the UploadError base so one handler translates them all
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ThrowbackError base: FastAPI global handlers catch all
    - Auth gate failures (NotAuthenticatedError, AccessDeniedError) are exceptions so
      a dependency can stop the pipeline before the route body runs
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


ACCESS_DENIED_MESSAGE = (
    "Accès refusé. Vous n'avez pas les permissions nécessaires."
)


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    UPLOAD = "upload"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    path: str | None = None
    debug_info: dict[str, Any] | None = None


class ThrowbackError(Exception):
    """Base exception for all Throwback errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "success": False,
            "message": self.message,
            "error": {
                "code": self.code,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            },
        }


# ─── Access Errors ──────────────────────────────────────────────

class NotAuthenticatedError(ThrowbackError):
    """No authenticated user on a gated route. Answered with a login redirect."""
    def __init__(self, login_url: str = "/login", context: ErrorContext | None = None):
        super().__init__(
            "Authentication required", "NOT_AUTHENTICATED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.INFO, context, 302,
        )
        self.login_url = login_url


class AccessDeniedError(ThrowbackError):
    """Authenticated user's role is outside the route's allow-list."""
    def __init__(self, role: str, required: list[str], context: ErrorContext | None = None):
        super().__init__(
            ACCESS_DENIED_MESSAGE, "ACCESS_DENIED",
            ErrorCategory.AUTHORIZATION, ErrorSeverity.WARNING, context, 403,
        )
        self.role = role
        self.required = required


class InvalidCredentialsError(ThrowbackError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid email or password", "INVALID_CREDENTIALS",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 401,
        )


class AccountInactiveError(ThrowbackError):
    def __init__(self, status: str, context: ErrorContext | None = None):
        super().__init__(
            f"Account is not active (status: {status})", "ACCOUNT_INACTIVE",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 403,
        )
        self.status = status


# ─── Upload Errors (always 400) ─────────────────────────────────

class UploadError(ThrowbackError):
    """Generic upload-layer failure. Message is passed through to the client."""
    def __init__(
        self, message: str, code: str = "UPLOAD_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.UPLOAD,
            ErrorSeverity.ERROR, context, 400,
        )


class UnsupportedMediaTypeError(UploadError):
    def __init__(self, mime_type: str, context: ErrorContext | None = None):
        super().__init__(
            "Only video files are allowed (MP4, WebM, MOV, AVI, MKV)",
            "UNSUPPORTED_MEDIA_TYPE", context,
        )
        self.mime_type = mime_type


class FileTooLargeError(UploadError):
    def __init__(self, max_bytes: int, context: ErrorContext | None = None):
        super().__init__("file too large, max 100MB", "LIMIT_FILE_SIZE", context)
        self.max_bytes = max_bytes


class TooManyFilesError(UploadError):
    def __init__(self, count: int, context: ErrorContext | None = None):
        super().__init__(
            "only one file allowed per upload", "LIMIT_FILE_COUNT", context,
        )
        self.count = count


class UnexpectedFileFieldError(UploadError):
    def __init__(self, field_name: str, expected: str, context: ErrorContext | None = None):
        super().__init__(
            f'Unexpected file field. Use the "{expected}" field.',
            "LIMIT_UNEXPECTED_FILE", context,
        )
        self.field_name = field_name


# ─── Domain Errors ──────────────────────────────────────────────

class ResourceNotFoundError(ThrowbackError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class EmailAlreadyUsedError(ThrowbackError):
    def __init__(self, email: str, context: ErrorContext | None = None):
        super().__init__(
            "This email is already used by another user.",
            "EMAIL_ALREADY_USED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 400,
        )
        self.email = email


class SelfDeletionError(ThrowbackError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You cannot delete your own account",
            "SELF_DELETION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class MissingVideoFileError(ThrowbackError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A video file is required to create a short",
            "MISSING_VIDEO_FILE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ThrowbackError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
