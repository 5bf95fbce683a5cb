"""
Base Service Foundation

Purpose
-------
Foundational class for ledger services. Services implement business rules,
run them inside DatabaseService transactions, and emit domain events.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access
- Event emission helpers

What this class does NOT do:
- Manage database transactions (that's DatabaseService's job)
- Handle SQLAlchemy sessions directly
- Contain leaderboard rules

Usage
-----
    class LeaderboardService(BaseService):
        def __init__(self, config, event_bus, logger, clock):
            super().__init__(config, event_bus, logger)
            self._clock = clock
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Type

from .exceptions import LedgerDomainException, get_error_severity

if TYPE_CHECKING:
    from logging import Logger

    from tapledger.core.config.config import Config
    from tapledger.core.event.bus import EventBus


class BaseService:
    """
    Base class for all ledger services.

    Args:
        config: Static configuration class
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config
        self._events = event_bus
        self.log = logger

    def get_config(self, key: str, default: Optional[Any] = None) -> Any:
        """Read a configuration attribute, falling back to ``default``."""
        return getattr(self._config, key, default)

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Publish a domain event.

        Args:
            event_type: Type/name of the event
            data: Event payload data
            context: Optional additional context merged into the payload
        """
        await self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, message: Optional[str] = None, **context: Any) -> None:
        """Log a successful service operation at INFO."""
        self.log.info(
            message or f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(self, operation: str, error: Exception, **context: Any) -> None:
        """
        Log a failed service operation.

        Domain rule rejections are logged at their own severity; anything
        else is logged as an error.
        """
        level = logging.getLevelName(get_error_severity(error).value.upper())
        extra: Dict[str, Any] = {
            "operation": operation,
            "error_type": type(error).__name__,
            "error_message": str(error),
            **context,
        }
        if isinstance(error, LedgerDomainException):
            extra["error_code"] = error.error_code
            extra["error_category"] = error.category

        self.log.log(
            level,
            f"Service error during {operation}: {error}",
            extra=extra,
        )
