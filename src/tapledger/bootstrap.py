"""
Ledger Bootstrap - Startup and Shutdown Orchestration

Purpose
-------
Single entry point for bringing the ledger up and down, shared by the
command line and by applications that embed the ledger.

Bootstrap Sequence
------------------
1. ``Config.validate()`` (reload environment, create directories)
2. ``DatabaseService.initialize()`` (engine + session factory)
3. Optional health check with ``DATABASE_HEALTH_TIMEOUT_SECONDS`` timeout
4. Optional ``DatabaseService.create_schema()``
5. Build a ``LeaderboardService`` wired to the process event bus

Logging is not configured here; entry points call ``setup_logging()`` first.

Usage Example
-------------
>>> service = await startup()
>>> await service.register_player("alice")
>>> await shutdown()
"""

from __future__ import annotations

import asyncio
from typing import Optional

from tapledger.core.clock import Clock
from tapledger.core.config.config import Config
from tapledger.core.database.service import (
    DatabaseInitializationError,
    DatabaseService,
)
from tapledger.core.event.bus import EventBus, event_bus
from tapledger.core.logging.logger import get_logger
from tapledger.modules.leaderboard.service import LeaderboardService

logger = get_logger(__name__)


async def initialize_database_subsystem(
    database_url: Optional[str] = None,
    *,
    verify_health: bool = True,
    create_schema: bool = True,
) -> None:
    """
    Initialize the database and, optionally, verify it and create tables.

    Raises
    ------
    DatabaseInitializationError
        If initialization fails or the health check fails or times out.
    """
    logger.info("Initializing database subsystem")

    await DatabaseService.initialize(database_url)

    if verify_health:
        timeout = float(Config.DATABASE_HEALTH_TIMEOUT_SECONDS)
        try:
            healthy = await asyncio.wait_for(DatabaseService.health_check(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.error(
                "Database health check timed out during bootstrap",
                extra={"timeout_seconds": timeout},
            )
            raise DatabaseInitializationError(
                f"Database health check timed out after {timeout}s"
            ) from exc

        if not healthy:
            logger.error("Database health check failed during bootstrap")
            raise DatabaseInitializationError(
                "Database is unreachable or unhealthy after initialization"
            )

    if create_schema:
        await DatabaseService.create_schema()

    logger.info(
        "Database subsystem ready",
        extra={"verified": verify_health, "schema_created": create_schema},
    )


async def startup(
    database_url: Optional[str] = None,
    *,
    bus: Optional[EventBus] = None,
    clock: Optional[Clock] = None,
    verify_health: bool = True,
    create_schema: bool = True,
) -> LeaderboardService:
    """Validate config, bring up the database and return a ready service."""
    Config.validate()
    logger.info("Starting tap ledger", extra={"config": Config.get_config_summary()})

    await initialize_database_subsystem(
        database_url,
        verify_health=verify_health,
        create_schema=create_schema,
    )

    return LeaderboardService(
        Config,
        bus or event_bus,
        get_logger("tapledger.modules.leaderboard"),
        clock=clock,
    )


async def shutdown() -> None:
    """Dispose the database engine. Safe to call more than once."""
    logger.info("Shutting down database subsystem")
    await DatabaseService.shutdown()
    logger.info("Database subsystem shutdown complete")
