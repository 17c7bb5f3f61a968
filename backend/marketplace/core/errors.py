"""Error Hierarchy — typed, categorized exceptions for all marketplace failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope: "error" is always a plain string
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with MarketplaceError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
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
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Request-scoped context attached to an error for logging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    item_id: str | None = None
    address: str | None = None
    transaction_hash: str | None = None
    debug_info: dict[str, Any] | None = None


class MarketplaceError(Exception):
    """Base exception for all marketplace errors."""

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
        """Convert to REST error body: {"error": message, "code": code}."""
        return {"error": self.message, "code": self.code}

    def log_extra(self) -> dict:
        """Structured logging fields for this error."""
        return {
            "error_code": self.code,
            "item_id": self.context.item_id,
            "address": self.context.address,
            "transaction_hash": self.context.transaction_hash,
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InputValidationError(MarketplaceError):
    """Request input missing or malformed."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class ResourceNotFoundError(MarketplaceError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class PriceMismatchError(MarketplaceError):
    """Submitted price differs from the listed price."""
    def __init__(
        self, submitted: str, listed: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            "Please submit the asking price",
            "PRICE_MISMATCH", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.submitted = submitted
        self.listed = listed


class InsufficientBalanceError(MarketplaceError):
    """Ledger balance lower than the amount to debit."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Insufficient balance",
            "INSUFFICIENT_BALANCE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )


class AlreadySoldError(MarketplaceError):
    """Item already reached the terminal sold state."""
    def __init__(self, item_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Item already sold",
            "ALREADY_SOLD", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.item_id = item_id


class InvalidTransitionError(MarketplaceError):
    """Settlement transition not allowed from the item's current status."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TRANSITION", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class UpstreamUnavailableError(MarketplaceError):
    """External balance lookup failed."""
    def __init__(
        self, message: str, reason: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Balance lookup unavailable ({reason}): {message}",
            "UPSTREAM_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503,
        )
        self.reason = reason

    def to_response(self) -> dict:
        # Upstream details stay in the logs
        return {"error": "Balance lookup unavailable", "code": self.code}


class DatabaseError(MarketplaceError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation

    def to_response(self) -> dict:
        return {"error": "Service temporarily unavailable", "code": self.code}
