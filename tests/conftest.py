"""
Pytest Configuration and Fixtures for Tap Ledger
================================================

Purpose
-------
Centralized fixtures for the test suite: a throwaway database per test, a
controllable clock, an isolated event bus, and ready-made services.

Architecture Notes
------------------
- The environment is switched to ``testing`` before any tapledger import so
  that Config picks it up on load.
- Integration tests get a fresh SQLite file under ``tmp_path``; nothing is
  shared between tests.
- Unit tests use mocks and never open a database.
"""

from __future__ import annotations

import os
import tempfile

_TEST_HOME = tempfile.mkdtemp(prefix="tapledger-tests-")
os.environ["ENVIRONMENT"] = "testing"
os.environ["TAPLEDGER_HOME"] = _TEST_HOME
os.environ.pop("DATABASE_URL", None)
os.environ.pop("LOG_TO_FILE", None)

from datetime import datetime, timezone  # noqa: E402
from typing import Any, AsyncGenerator, Dict, List, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from tapledger.core.clock import FixedClock  # noqa: E402
from tapledger.core.config.config import Config  # noqa: E402
from tapledger.core.database.service import DatabaseService  # noqa: E402
from tapledger.core.event.bus import EventBus  # noqa: E402
from tapledger.core.logging.logger import get_logger  # noqa: E402
from tapledger.modules.leaderboard.service import LeaderboardService  # noqa: E402

START_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# DATABASE FIXTURES (Integration Tests)
# ============================================================================


@pytest.fixture
def database_url(tmp_path) -> str:
    """URL of a brand-new SQLite file for this test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"


@pytest_asyncio.fixture
async def database(database_url: str) -> AsyncGenerator[str, None]:
    """
    Initialized DatabaseService with the ledger schema created.

    Scope: function (fresh database file per test)
    """
    await DatabaseService.shutdown()
    await DatabaseService.initialize(database_url)
    await DatabaseService.create_schema()

    yield database_url

    await DatabaseService.shutdown()


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START_TIME)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorded_events(bus: EventBus) -> List[Tuple[str, Dict[str, Any]]]:
    """Every event published on ``bus``, as (event_name, payload) pairs."""
    events: List[Tuple[str, Dict[str, Any]]] = []

    def record(name: str):
        def _listener(payload: Dict[str, Any]) -> None:
            events.append((name, dict(payload)))

        return _listener

    for name in (
        "leaderboard.initialized",
        "leaderboard.player_registered",
        "leaderboard.score_submitted",
        "leaderboard.personal_best",
        "leaderboard.top_score_changed",
    ):
        bus.subscribe(name, record(name), identifier=f"recorder@{name}")

    return events


@pytest.fixture
def service(database: str, bus: EventBus, clock: FixedClock) -> LeaderboardService:
    return LeaderboardService(Config, bus, get_logger("tests.leaderboard"), clock=clock)


@pytest_asyncio.fixture
async def initialized_service(service: LeaderboardService) -> LeaderboardService:
    """Service whose ledger was initialized by ``admin``."""
    await service.initialize("admin")
    return service


# ============================================================================
# MOCK FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def mock_event_bus(mocker):
    mock_bus = mocker.MagicMock()
    mock_bus.publish = mocker.AsyncMock(return_value=[])
    mock_bus.subscribe = mocker.MagicMock()
    return mock_bus
