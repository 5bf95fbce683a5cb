"""
Tap Ledger Shared Module

Purpose
-------
Domain-level foundations for ledger modules:
- Domain exceptions and error handling
- Base service and repository patterns

Architecture
------------
- BaseService: Foundation for service classes (logging, config, events)
- BaseRepository: Type-safe keyed record access
- Domain exceptions: Rule violations surfaced to callers

Usage
-----
    from tapledger.modules.shared import (
        BaseRepository,
        BaseService,
        InvalidScoreError,
    )
"""

from __future__ import annotations

# Base patterns
from .base_repository import BaseRepository
from .base_service import BaseService

# Domain exceptions
from .exceptions import (
    AlreadyInitializedError,
    ConcurrentUpdateError,
    ErrorSeverity,
    InvalidScoreError,
    LeaderboardNotInitializedError,
    LedgerDomainException,
    NotFoundError,
    PlayerAlreadyRegisteredError,
    PlayerRecordNotFoundError,
    PreconditionError,
    UnauthorizedError,
    ValidationError,
    get_error_severity,
)

__all__ = [
    "BaseRepository",
    "BaseService",
    "AlreadyInitializedError",
    "ConcurrentUpdateError",
    "ErrorSeverity",
    "InvalidScoreError",
    "LeaderboardNotInitializedError",
    "LedgerDomainException",
    "NotFoundError",
    "PlayerAlreadyRegisteredError",
    "PlayerRecordNotFoundError",
    "PreconditionError",
    "UnauthorizedError",
    "ValidationError",
    "get_error_severity",
]
