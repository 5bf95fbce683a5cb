"""
Input Validation Layer for Tap Ledger

Purpose
-------
Centralized validation for caller-supplied inputs: identities and scores.
Enforces type safety and bounds checking before any record is touched, so a
rejected call never reaches the database.

Responsibilities
----------------
- Validate caller/player identity strings
- Validate and convert scores (ints, or digit strings from the command line)
- Raise ValidationError / InvalidScoreError with clear messages

Non-Responsibilities
--------------------
- Lifecycle checks (initialized, registered) (service layer concern)
- Ownership checks (service layer concern)
- Database constraints (model concern)

Observability
-------------
Every validation failure is logged at debug level with field_name, raw_value
(repr) and reason.
"""

from __future__ import annotations

from typing import Any, NoReturn, Optional

from tapledger.core.config.config import Config
from tapledger.core.database.types import U64_MAX
from tapledger.core.logging.logger import get_logger
from tapledger.modules.shared.exceptions import InvalidScoreError, ValidationError

logger = get_logger(__name__)

ZERO_SCORE_MESSAGE = "Score must be greater than 0."


def _log_failure(field_name: str, value: Any, message: str) -> None:
    logger.debug(
        "Input validation failed",
        extra={
            "field_name": field_name,
            "raw_value": repr(value),
            "reason": message,
        },
    )


def _raise_validation_error(field_name: str, value: Any, message: str) -> NoReturn:
    """Log and raise a ValidationError for ``field_name``."""
    _log_failure(field_name, value, message)
    raise ValidationError(field_name, message)


def _raise_invalid_score(value: Any, message: str) -> NoReturn:
    _log_failure("score", value, message)
    raise InvalidScoreError(value, message)


class InputValidator:
    """
    Stateless validation for ledger inputs.

    All validation methods return the validated (possibly converted) value on
    success and raise on failure; they never silently coerce bad input.
    """

    # =========================================================================
    # IDENTITY VALIDATION
    # =========================================================================

    @staticmethod
    def validate_identity(
        value: Any,
        field_name: str = "caller",
        max_length: Optional[int] = None,
    ) -> str:
        """
        Validate an opaque caller identity.

        Identities are compared exactly, so surrounding whitespace is rejected
        rather than stripped.

        Raises:
            ValidationError: If the value is not a non-empty string within
                ``max_length`` (default ``Config.MAX_IDENTITY_LENGTH``).
        """
        limit = max_length if max_length is not None else Config.MAX_IDENTITY_LENGTH

        if value is None:
            _raise_validation_error(field_name, value, "Identity is required")

        if not isinstance(value, str):
            _raise_validation_error(
                field_name,
                value,
                f"Identity must be a string, got {type(value).__name__}",
            )

        if not value.strip():
            _raise_validation_error(field_name, value, "Identity cannot be empty")

        if value != value.strip():
            _raise_validation_error(
                field_name,
                value,
                "Identity cannot start or end with whitespace",
            )

        if len(value) > limit:
            _raise_validation_error(
                field_name,
                value,
                f"Identity cannot exceed {limit} characters, got {len(value)}",
            )

        return value

    # =========================================================================
    # SCORE VALIDATION
    # =========================================================================

    @staticmethod
    def validate_score(value: Any) -> int:
        """
        Validate a submitted score.

        Accepts ints and strings of decimal digits. Booleans and floats are
        rejected even when they look integral.

        Raises:
            InvalidScoreError: If the score is missing, not an integer, zero,
                negative, or wider than an unsigned 64-bit integer.
        """
        if value is None:
            _raise_invalid_score(value, "Score is required")

        if isinstance(value, bool) or not isinstance(value, (int, str)):
            _raise_invalid_score(
                value,
                f"Score must be a whole number, got {type(value).__name__}",
            )

        if isinstance(value, str):
            text = value.strip()
            digits = text[1:] if text.startswith("-") else text
            if not (digits.isascii() and digits.isdigit()):
                _raise_invalid_score(value, f"Score must be a whole number, got '{value}'")
            int_value = int(text)
        else:
            int_value = value

        if int_value == 0:
            _raise_invalid_score(int_value, ZERO_SCORE_MESSAGE)

        if int_value < 0:
            _raise_invalid_score(int_value, f"Score cannot be negative, got {int_value}")

        if int_value > U64_MAX:
            _raise_invalid_score(int_value, f"Score cannot exceed {U64_MAX}")

        return int_value
