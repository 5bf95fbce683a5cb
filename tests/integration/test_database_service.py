"""Integration tests for DatabaseService lifecycle, transactions and schema."""

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from tapledger.core.database import (
    GLOBAL_RECORD_KEY,
    U64_MAX,
    DatabaseNotInitializedError,
    DatabaseService,
    player_record_key,
)
from tapledger.database.models import GlobalLeaderboardRecord, PlayerRecord

pytestmark = [pytest.mark.integration, pytest.mark.database]


def _global(**overrides):
    values = {
        "record_key": GLOBAL_RECORD_KEY,
        "administrator_identity": "admin",
        "total_players": 0,
        "total_games": 0,
        "top_score": 0,
        "top_player": None,
    }
    values.update(overrides)
    return GlobalLeaderboardRecord(**values)


def _player(identity="alice", **overrides):
    values = {
        "record_key": player_record_key(identity),
        "owner_identity": identity,
        "high_score": 0,
        "total_games": 0,
        "last_played_at": 0,
    }
    values.update(overrides)
    return PlayerRecord(**values)


class TestLifecycle:
    async def test_initialize_is_idempotent(self, database):
        engine = DatabaseService._engine

        await DatabaseService.initialize("sqlite+aiosqlite:///elsewhere.db")

        assert DatabaseService._engine is engine
        assert DatabaseService.is_initialized()

    async def test_use_before_initialize(self):
        await DatabaseService.shutdown()

        assert not DatabaseService.is_initialized()
        assert await DatabaseService.health_check() is False
        with pytest.raises(DatabaseNotInitializedError):
            async with DatabaseService.get_session():
                pass
        with pytest.raises(DatabaseNotInitializedError):
            async with DatabaseService.get_transaction():
                pass

    async def test_shutdown_twice_is_safe(self, database):
        await DatabaseService.shutdown()
        await DatabaseService.shutdown()

        assert not DatabaseService.is_initialized()

    async def test_health_check(self, database):
        assert await DatabaseService.health_check() is True

    async def test_in_memory_database_is_shared(self):
        await DatabaseService.shutdown()
        await DatabaseService.initialize("sqlite+aiosqlite:///:memory:")
        try:
            await DatabaseService.create_schema()
            async with DatabaseService.get_transaction() as session:
                session.add(_global())

            async with DatabaseService.get_session() as session:
                record = await session.get(GlobalLeaderboardRecord, GLOBAL_RECORD_KEY)

            assert record.administrator_identity == "admin"
        finally:
            await DatabaseService.shutdown()


class TestSchema:
    async def test_creates_ledger_tables(self, database):
        async with DatabaseService._engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

        assert {"leaderboard_global", "leaderboard_players"} <= set(tables)

    async def test_create_schema_is_repeatable(self, database):
        await DatabaseService.create_schema()

        assert await DatabaseService.health_check()


class TestTransactions:
    async def test_commit_on_success(self, database):
        async with DatabaseService.get_transaction() as session:
            session.add(_global())

        async with DatabaseService.get_session() as session:
            assert await session.get(GlobalLeaderboardRecord, GLOBAL_RECORD_KEY) is not None

    async def test_rollback_on_error(self, database):
        with pytest.raises(RuntimeError):
            async with DatabaseService.get_transaction() as session:
                session.add(_global())
                await session.flush()
                raise RuntimeError("abort")

        async with DatabaseService.get_session() as session:
            assert await session.get(GlobalLeaderboardRecord, GLOBAL_RECORD_KEY) is None

    async def test_version_increments_on_update(self, database):
        async with DatabaseService.get_transaction() as session:
            session.add(_global())

        async with DatabaseService.get_transaction() as session:
            record = await session.get(
                GlobalLeaderboardRecord, GLOBAL_RECORD_KEY, with_for_update=True
            )
            assert record.version == 1
            record.total_players = 1

        async with DatabaseService.get_session() as session:
            result = await session.execute(select(GlobalLeaderboardRecord.version))
            assert result.scalar_one() == 2


class TestConstraints:
    async def test_duplicate_player_key_rejected(self, database):
        async with DatabaseService.get_transaction() as session:
            session.add(_player())

        with pytest.raises(IntegrityError):
            async with DatabaseService.get_transaction() as session:
                session.add(_player())

    @pytest.mark.parametrize(
        "overrides",
        [
            {"high_score": 5, "total_games": 0},
            {"high_score": 0, "total_games": 2},
            {"high_score": -1, "total_games": 1},
        ],
    )
    async def test_player_check_constraints(self, database, overrides):
        with pytest.raises(IntegrityError):
            async with DatabaseService.get_transaction() as session:
                session.add(_player(**overrides))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"top_score": 10, "total_games": 1, "top_player": None},
            {"top_score": 0, "total_games": 0, "top_player": "alice"},
            {"total_players": -1},
        ],
    )
    async def test_global_check_constraints(self, database, overrides):
        with pytest.raises(IntegrityError):
            async with DatabaseService.get_transaction() as session:
                session.add(_global(**overrides))


class TestUnsignedScores:
    @pytest.mark.parametrize("score", [1, 2**63 - 1, 2**63, U64_MAX])
    async def test_scores_are_stored_exactly(self, database, score):
        async with DatabaseService.get_transaction() as session:
            session.add(_player(high_score=score, total_games=1))
            session.add(_global(top_score=score, total_games=1, top_player="alice"))

        async with DatabaseService.get_session() as session:
            player = await session.get(PlayerRecord, player_record_key("alice"))
            board = await session.get(GlobalLeaderboardRecord, GLOBAL_RECORD_KEY)

        assert player.high_score == score
        assert board.top_score == score
        assert type(player.high_score) is int
