"""Integration tests for the keyed leaderboard repositories."""

import logging

import pytest

from tapledger.core.database import DatabaseService, player_record_key
from tapledger.database.models import GlobalLeaderboardRecord, PlayerRecord
from tapledger.modules.leaderboard import scoring_logic
from tapledger.modules.leaderboard.repository import (
    GlobalRecordRepository,
    PlayerRecordRepository,
)
from tests.conftest import START_TIME

pytestmark = [pytest.mark.integration, pytest.mark.database]


@pytest.fixture
def global_repo():
    return GlobalRecordRepository(GlobalLeaderboardRecord, logging.getLogger("tests.repo.global"))


@pytest.fixture
def player_repo():
    return PlayerRecordRepository(PlayerRecord, logging.getLogger("tests.repo.player"))


@pytest.fixture
async def seeded(database, global_repo, player_repo):
    async with DatabaseService.get_transaction() as session:
        global_repo.add(session, scoring_logic.new_global_record("admin"))
        for identity in ("alice", "bob"):
            player_repo.add(session, scoring_logic.new_player_record(identity, START_TIME))
    return database


class TestRepositories:
    async def test_load_missing_records(self, database, global_repo, player_repo):
        async with DatabaseService.get_session() as session:
            assert await global_repo.load(session) is None
            assert await player_repo.load(session, "alice") is None
            assert not await player_repo.is_registered(session, "alice")

    async def test_load_by_identity(self, seeded, global_repo, player_repo):
        async with DatabaseService.get_transaction() as session:
            board = await global_repo.load(session, for_update=True)
            alice = await player_repo.load(session, "alice", for_update=True)

        assert board.administrator_identity == "admin"
        assert alice.record_key == player_record_key("alice")
        assert alice.owner_identity == "alice"

    async def test_is_registered_by_identity(self, seeded, player_repo):
        async with DatabaseService.get_session() as session:
            assert await player_repo.is_registered(session, "bob")
            assert not await player_repo.is_registered(session, "carol")
            assert not await player_repo.is_registered(session, "Bob")
