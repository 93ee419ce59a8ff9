"""Error Hierarchy: typed, categorized exceptions for every Samaj Diary failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error carries a localized user_message (Hindi) for the mobile client
    - Domain errors are 4xx; infrastructure errors are 5xx
    - to_response() never includes debug_info
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from samaj_diary.core.language_strings import Message, get_message


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    CONFLICT = "conflict"
    EXTERNAL_API = "external_api"
    STORAGE = "storage"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_message: str | None = None
    wizard_id: str | None = None
    collection: str | None = None
    retry_after_ms: int | None = None
    debug_info: dict[str, Any] | None = None


class SamajError(Exception):
    """Base exception for all Samaj Diary errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        user_message: Message = Message.SERVER_ERROR,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        if self.context.user_message is None:
            self.context.user_message = get_message(user_message)
        self.http_status = http_status

    @property
    def user_message(self) -> str:
        return self.context.user_message or get_message(Message.SERVER_ERROR)

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "user_message": self.user_message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "wizard_id": self.context.wizard_id,
                    "collection": self.context.collection,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidMobileError(SamajError):
    """Mobile number is not exactly 10 digits."""
    def __init__(self, mobile: str, context: ErrorContext | None = None):
        super().__init__(
            f"Mobile number must be exactly 10 digits (got {len(mobile)})",
            "INVALID_MOBILE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400, Message.INVALID_MOBILE,
        )


class InvalidNameError(SamajError):
    """Name field contains characters outside the Devanagari allow-list."""
    def __init__(self, field_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Field '{field_name}' must be written in Devanagari",
            "INVALID_NAME_SCRIPT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400, Message.DEVANAGARI_ONLY,
        )
        self.field = field_name


class MissingFieldsError(SamajError):
    """One or more required form fields are blank."""
    def __init__(self, fields: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Required fields missing: {', '.join(fields)}",
            "MISSING_FIELDS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400, Message.ALL_FIELDS_REQUIRED,
        )
        self.fields = fields


class MobileAlreadyRegisteredError(SamajError):
    """Mobile number already belongs to a member record."""
    def __init__(
        self, mobile: str, for_update: bool = False,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Mobile ending {mobile[-4:]} is already registered",
            "MOBILE_ALREADY_REGISTERED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
            Message.MOBILE_TAKEN_BY_OTHER if for_update else Message.MOBILE_ALREADY_REGISTERED,
        )


class WizardStepError(SamajError):
    """Wizard action called from a step that does not allow it."""
    def __init__(self, action: str, step: str, context: ErrorContext | None = None):
        super().__init__(
            f"Action '{action}' is not allowed at step '{step}'",
            "WIZARD_STEP_INVALID", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409, Message.WIZARD_RESTART,
        )
        self.action = action
        self.step = step


class OtpMismatchError(SamajError):
    """Submitted code does not equal the most recent code."""
    def __init__(self, attempts_left: int, context: ErrorContext | None = None):
        super().__init__(
            f"OTP mismatch ({attempts_left} attempts left)",
            "OTP_MISMATCH", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400, Message.WRONG_OTP,
        )
        self.attempts_left = attempts_left


class OtpExpiredError(SamajError):
    """Most recent code is past its expiry window."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "OTP expired", "OTP_EXPIRED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 410, Message.OTP_EXPIRED,
        )


class OtpAttemptsExceededError(SamajError):
    """Too many wrong codes for the current challenge."""
    def __init__(self, max_attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"OTP attempt limit reached ({max_attempts})",
            "OTP_ATTEMPTS_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 429, Message.OTP_ATTEMPTS_EXCEEDED,
        )


class ResourceNotFoundError(SamajError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404, Message.NOT_FOUND,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class NothingToExportError(SamajError):
    """Member export requested on an empty directory."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No members to export", "NOTHING_TO_EXPORT",
            ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.INFO,
            context, 404, Message.NO_DATA,
        )


class AdminAuthError(SamajError):
    """Admin credentials or session token rejected."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Admin authentication failed: {reason}",
            "ADMIN_UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401, Message.WRONG_CREDENTIALS,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DocumentStoreError(SamajError):
    """Document store request failed."""
    def __init__(
        self, message: str, operation: str, collection: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.collection = ctx.collection or collection
        super().__init__(
            f"Document store {operation} failed: {message}",
            "DOCUMENT_STORE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, ctx, 503, Message.SAVE_FAILED,
        )
        self.operation = operation


class MessagingGatewayError(SamajError):
    """OTP could not be dispatched through the messaging gateway."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Messaging gateway error: {message}",
            "OTP_DISPATCH_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502, Message.OTP_SEND_FAILED,
        )


class LanguageModelError(SamajError):
    """Anthropic API call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Anthropic API error ({api_error_type}): {message}",
            "LANGUAGE_MODEL_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503, Message.CONTENT_UNAVAILABLE,
        )
        self.api_error_type = api_error_type
