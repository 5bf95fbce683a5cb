"""Async database engine, declarative base and record keys."""

from .base import Base, TimestampMixin
from .keys import GLOBAL_RECORD_KEY, derive_record_key, player_record_key
from .types import U64_MAX, UnsignedBigInteger
from .service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "GLOBAL_RECORD_KEY",
    "derive_record_key",
    "player_record_key",
    "DatabaseService",
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
    "U64_MAX",
    "UnsignedBigInteger",
]
