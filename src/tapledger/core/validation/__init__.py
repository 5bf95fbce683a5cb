"""Caller input validation."""

from .input_validator import ZERO_SCORE_MESSAGE, InputValidator

__all__ = ["InputValidator", "ZERO_SCORE_MESSAGE"]
