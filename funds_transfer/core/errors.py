"""Error Hierarchy — typed, categorized exceptions for every transfer engine failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - Every CONCURRENCY_CONFLICT (version miss, deadlock, serialization failure) is a
      ConcurrencyConflictError, so one except clause covers the retryable cases
    - to_response() produces the REST envelope used by the API boundary
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TransferEngineError base: FastAPI global handler catches all
    - ErrorContext as dataclass: carries transfer/account ids without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any


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
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    transfer_id: str | None = None
    account_id: str | None = None
    details: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class TransferEngineError(Exception):
    """Base exception for all transfer engine errors."""

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
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "transfer_id": self.context.transfer_id,
                    "account_id": self.context.account_id,
                    "details": _jsonable(self.context.details),
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


def _jsonable(details: dict[str, Any] | None) -> dict[str, Any] | None:
    # Decimal is not JSON serializable; amounts travel as strings
    if details is None:
        return None
    return {
        key: str(value) if isinstance(value, Decimal) else value
        for key, value in details.items()
    }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(TransferEngineError):
    """Transfer request violates an input invariant."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class NotFoundError(TransferEngineError):
    """Requested account or transfer does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InsufficientFundsError(TransferEngineError):
    """Source balance is below the amount being moved."""
    def __init__(
        self,
        account_id: str,
        current_balance: Decimal,
        required_amount: Decimal,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.account_id = account_id
        ctx.details = {
            "current_balance": current_balance,
            "required_amount": required_amount,
        }
        super().__init__(
            "Insufficient balance",
            "INSUFFICIENT_FUNDS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.account_id = account_id
        self.current_balance = current_balance
        self.required_amount = required_amount


class InvalidStateError(TransferEngineError):
    """Transition attempted from a state that does not allow it."""
    def __init__(
        self,
        transfer_id: str,
        current_status: str,
        action: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.transfer_id = transfer_id
        ctx.details = {"current_status": current_status}
        super().__init__(
            f"Only pending transfers can be {action}",
            "INVALID_STATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.transfer_id = transfer_id
        self.current_status = current_status


# ─── Conflict / Infrastructure Errors ───────────────────────────

class ConcurrencyConflictError(TransferEngineError):
    """Account version changed between read and conditional write."""
    def __init__(
        self,
        account_id: str,
        stale_version: int,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.account_id = account_id
        ctx.details = {"stale_version": stale_version}
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Account '{account_id}' was modified concurrently "
            f"(expected version {stale_version}); retry the operation",
            "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.account_id = account_id
        self.stale_version = stale_version


class DatabaseError(TransferEngineError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class TransactionConflictError(ConcurrencyConflictError):
    """Database aborted the transaction to resolve contention (deadlock, serialization)."""
    def __init__(
        self,
        sqlstate: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.details = {"sqlstate": sqlstate}
        ctx.retry_after_ms = retry_after_ms
        TransferEngineError.__init__(
            self,
            "Transaction was aborted by a concurrent writer; retry the operation",
            "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.account_id = None
        self.stale_version = None
        self.sqlstate = sqlstate
