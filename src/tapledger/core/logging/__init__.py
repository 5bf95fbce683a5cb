"""Structured, queue-backed logging for Tap Ledger."""

from .logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    get_logger,
    is_logging_initialized,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "ContextFilter",
    "JSONFormatter",
    "LogContext",
    "get_logger",
    "is_logging_initialized",
    "setup_logging",
    "shutdown_logging",
]
