"""Error Hierarchy — typed, categorized exceptions for all PromptCal failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Extraction failures share the ExtractionError base and are terminal for one extract() call
    - Domain errors (4xx) are recoverable by the caller; infrastructure errors (5xx) are critical
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with ScheduleAppError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    EXTRACTION = "extraction"
    AUTHENTICATION = "authentication"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    schedule_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class ScheduleAppError(Exception):
    """Base exception for all PromptCal errors."""

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
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "schedule_id": self.context.schedule_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Extraction Errors ──────────────────────────────────────────

class ExtractionError(ScheduleAppError):
    """Prompt → schedule extraction failed. Never retried inside the pipeline."""


class ModelCallFailedError(ExtractionError):
    """Language model call raised, timed out, or was unreachable."""
    def __init__(
        self,
        message: str,
        api_error_type: str = "unknown",
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Model call failed ({api_error_type}): {message}",
            "MODEL_CALL_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.api_error_type = api_error_type


class NoStructuredReplyError(ExtractionError):
    """Model reply contained no {...} object span."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No structured object found in model reply",
            "NO_STRUCTURED_REPLY", ErrorCategory.EXTRACTION,
            ErrorSeverity.ERROR, context, 422,
        )


class MalformedReplyError(ExtractionError):
    """Object span found but could not be decoded."""
    def __init__(self, detail: str, context: ErrorContext | None = None):
        super().__init__(
            f"Malformed structured reply: {detail}",
            "MALFORMED_REPLY", ErrorCategory.EXTRACTION,
            ErrorSeverity.ERROR, context, 422,
        )
        self.detail = detail


class SchemaInvalidError(ExtractionError):
    """Decoded candidate failed a schedule schema check."""
    def __init__(
        self, reason: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid schedule data: {reason}",
            "SCHEMA_INVALID", ErrorCategory.EXTRACTION,
            ErrorSeverity.ERROR, context, 422,
        )
        self.reason = reason
        self.field = field


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(ScheduleAppError):
    """Requested resource does not exist (or is not visible to the caller)."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class AuthenticationError(ScheduleAppError):
    """Missing, invalid, or expired credentials."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "AUTHENTICATION_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InactiveAccountError(ScheduleAppError):
    """Credentials valid but the account is deactivated."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Account is deactivated", "ACCOUNT_INACTIVE",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 403,
        )


class EmailAlreadyRegisteredError(ScheduleAppError):
    """Registration attempted with an email that already has an account."""
    def __init__(self, email: str, context: ErrorContext | None = None):
        super().__init__(
            f"User with email '{email}' already exists",
            "EMAIL_ALREADY_REGISTERED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ScheduleAppError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
