"""
Domain exceptions for Tap Ledger.

Purpose
-------
Define the structured exception hierarchy raised by ledger services for rule
violations: bad input, wrong lifecycle state, foreign writes, and commit
conflicts. The command line and embedding applications translate these into
user-facing output.

Design Notes
------------
- All domain exceptions inherit from ``LedgerDomainException``.
- Each exception carries:
  - ``message``: human-readable description
  - ``details``: additional structured context (dict-like)
  - ``severity``: ``ErrorSeverity`` value for logging decisions
  - ``is_retryable``: whether resubmitting the same call can succeed
  - ``error_code``: short, stable identifier for programmatic use
  - ``category``: validation | precondition | authorization | conflict
- Every domain exception is raised before any state is changed, or rolls
  the whole transaction back; none of them leaves a partial update.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected, not concerning
    INFO = "info"  # Normal rejections (validation, lifecycle)
    WARNING = "warning"  # Concerning but handled (conflicts, foreign writes)
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # System-level failures


class LedgerDomainException(Exception):
    """
    Base exception for all ledger domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise LedgerDomainException(
        ...     "Ledger rejected the call",
        ...     {"reason": "example"}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False
    CATEGORY: str = "domain"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    @property
    def category(self) -> str:
        return self.CATEGORY

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "category": self.category,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


# ============================================================================
# Validation
# ============================================================================


class ValidationError(LedgerDomainException):
    """
    Raised when caller input fails domain validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    CATEGORY = "validation"

    def __init__(self, field: str, message: str, error_code: Optional[str] = None) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={
                "field": field,
                "validation_message": message,
            },
            error_code=error_code or f"VALIDATION_{field.upper()}",
        )


class InvalidScoreError(ValidationError):
    """
    Raised when a submitted score is not a positive integer within range.

    The message of the zero case is exactly ``"Score must be greater than 0."``.
    """

    def __init__(self, score: Any, reason: str = "Score must be greater than 0.") -> None:
        self.score = score
        self.reason = reason
        super().__init__("score", reason, error_code="INVALID_SCORE")
        self.message = reason
        self.details["score"] = score if isinstance(score, (int, str)) else repr(score)


# ============================================================================
# Lifecycle preconditions
# ============================================================================


class PreconditionError(LedgerDomainException):
    """
    Raised when an operation is called in the wrong lifecycle state.

    Args:
        operation: Name of the rejected operation
        reason: What state made the call invalid
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    CATEGORY = "precondition"

    def __init__(
        self,
        operation: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(
            reason,
            details={"operation": operation, **(details or {})},
            error_code=error_code or f"INVALID_{operation.upper()}",
        )


class AlreadyInitializedError(PreconditionError):
    """Raised by a second ``initialize``; the existing record is untouched."""

    def __init__(self, administrator: Optional[str] = None) -> None:
        self.administrator = administrator
        super().__init__(
            "initialize",
            "Leaderboard is already initialized",
            details={"administrator": administrator},
            error_code="ALREADY_INITIALIZED",
        )


class PlayerAlreadyRegisteredError(PreconditionError):
    def __init__(self, identity: str) -> None:
        self.identity = identity
        super().__init__(
            "register_player",
            f"Player already registered: {identity}",
            details={"identity": identity},
            error_code="PLAYER_ALREADY_REGISTERED",
        )


class LeaderboardNotInitializedError(PreconditionError):
    def __init__(self, operation: str = "query_leaderboard") -> None:
        super().__init__(
            operation,
            "Leaderboard has not been initialized",
            error_code="LEADERBOARD_NOT_INITIALIZED",
        )


class NotFoundError(PreconditionError):
    """
    Raised when a requested ledger record does not exist.

    Args:
        resource_type: Type of record (e.g., "PlayerRecord")
        identifier: Optional identifier for the missing record
    """

    def __init__(
        self,
        resource_type: str,
        identifier: Optional[Any] = None,
        operation: str = "lookup",
        error_code: Optional[str] = None,
    ) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            operation,
            message,
            details={
                "resource_type": resource_type,
                "identifier": identifier,
            },
            error_code=error_code or f"{resource_type.upper()}_NOT_FOUND",
        )


class PlayerRecordNotFoundError(NotFoundError):
    def __init__(self, identity: str, operation: str = "submit_score") -> None:
        self.identity = identity
        super().__init__(
            "PlayerRecord",
            identity,
            operation=operation,
            error_code="PLAYER_RECORD_NOT_FOUND",
        )


# ============================================================================
# Authorization
# ============================================================================


class UnauthorizedError(LedgerDomainException):
    """
    Raised when a caller tries to mutate a player record it does not own.

    Args:
        caller: Identity that issued the call
        owner: Identity that owns the targeted record
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    CATEGORY = "authorization"

    def __init__(self, caller: str, owner: str) -> None:
        self.caller = caller
        self.owner = owner
        super().__init__(
            "Caller does not own the player record",
            details={"caller": caller, "owner": owner},
            error_code="UNAUTHORIZED",
        )


# ============================================================================
# Commit conflicts
# ============================================================================


class ConcurrentUpdateError(LedgerDomainException):
    """
    Raised when a commit would overwrite a record another writer changed.

    Nothing is applied; the caller may resubmit the same call.
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True
    CATEGORY = "conflict"

    def __init__(self, record: str, key: Optional[str] = None) -> None:
        self.record = record
        self.key = key
        super().__init__(
            f"{record} was modified concurrently; resubmit the operation",
            details={"record": record, "key": key},
            error_code="CONCURRENT_UPDATE",
        )


# Utility functions for exception handling patterns


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """
    Get the severity level of an exception for logging.

    Unknown (non-domain) exceptions are treated as ERROR.
    """
    if isinstance(exc, LedgerDomainException):
        return exc.severity
    return ErrorSeverity.ERROR
