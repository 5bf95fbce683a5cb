"""
Leaderboard Service
===================

Purpose
-------
Owns every mutation of the ledger: initializing the global record,
registering players and accepting scores. Also serves the read-side
projections of both record types.

Domain
------
- initialize(caller): create the global record once
- register_player(caller): create the caller's player record and count it
- submit_score(caller, score): update the caller's best and the global top
- query_leaderboard(), get_player_record(), get_administrator(),
  is_registered(): read-only views

Consistency
-----------
- Every mutation runs in one ``DatabaseService.get_transaction()``: either
  both records change or neither does.
- Writers are serialized by an asyncio lock per service instance. Across
  instances or processes, rows are read with SELECT ... FOR UPDATE where the
  backend supports it, and each row carries a version counter; a commit that
  would overwrite a concurrent change raises ConcurrentUpdateError.
- The global record is always locked before a player record.
- Input validation happens before any database access; lifecycle and
  ownership checks happen inside the transaction against locked rows.
- Domain events are published only after the transaction commits.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from tapledger.core.clock import Clock, SystemClock
from tapledger.core.database.service import DatabaseService
from tapledger.core.logging.logger import LogContext, get_logger
from tapledger.core.validation.input_validator import InputValidator
from tapledger.database.models import GlobalLeaderboardRecord, PlayerRecord
from tapledger.modules.leaderboard import scoring_logic
from tapledger.modules.leaderboard.repository import (
    GlobalRecordRepository,
    PlayerRecordRepository,
)
from tapledger.modules.leaderboard.snapshots import (
    LeaderboardSnapshot,
    PlayerSnapshot,
    ScoreOutcome,
)
from tapledger.modules.shared.base_repository import BaseRepository
from tapledger.modules.shared.base_service import BaseService
from tapledger.modules.shared.exceptions import (
    AlreadyInitializedError,
    ConcurrentUpdateError,
    LeaderboardNotInitializedError,
    LedgerDomainException,
    PlayerAlreadyRegisteredError,
    PlayerRecordNotFoundError,
    UnauthorizedError,
)

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from tapledger.core.config.config import Config
    from tapledger.core.event.bus import EventBus


# ============================================================================
# Event names
# ============================================================================

EVENT_INITIALIZED = "leaderboard.initialized"
EVENT_PLAYER_REGISTERED = "leaderboard.player_registered"
EVENT_SCORE_SUBMITTED = "leaderboard.score_submitted"
EVENT_PERSONAL_BEST = "leaderboard.personal_best"
EVENT_TOP_SCORE_CHANGED = "leaderboard.top_score_changed"


class LeaderboardService(BaseService):
    """
    Service for the tap leaderboard ledger.

    Public Methods
    --------------
    - initialize() -> Create the global record
    - register_player() -> Create the caller's player record
    - submit_score() -> Record one game for the caller
    - query_leaderboard() -> Global aggregate snapshot
    - get_player_record() -> One player's snapshot
    - get_administrator() -> Identity that initialized the ledger
    - is_registered() -> Whether an identity has a player record
    """

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(config, event_bus, logger)

        self._clock: Clock = clock or SystemClock()
        self._write_lock = asyncio.Lock()

        self._global_repo = GlobalRecordRepository(
            model_class=GlobalLeaderboardRecord,
            logger=get_logger(f"{__name__}.GlobalRecordRepository"),
        )
        self._player_repo = PlayerRecordRepository(
            model_class=PlayerRecord,
            logger=get_logger(f"{__name__}.PlayerRecordRepository"),
        )

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def initialize(self, caller: str) -> LeaderboardSnapshot:
        """
        Create the global record with ``caller`` as administrator.

        Raises:
            ValidationError: If ``caller`` is not a valid identity
            AlreadyInitializedError: If the ledger was already initialized;
                a second call is an error, not a no-op
        """
        caller = self._identity(caller, "caller")

        with LogContext(caller=caller, operation="initialize", component="leaderboard"):
            try:
                async with self._write_lock:
                    async with DatabaseService.get_transaction() as session:
                        existing = await self._global_repo.load(session, for_update=True)
                        if existing is not None:
                            raise AlreadyInitializedError(existing.administrator_identity)

                        record = scoring_logic.new_global_record(caller)
                        self._global_repo.add(session, record)
                        await self._flush(
                            session,
                            self._global_repo,
                            on_duplicate=AlreadyInitializedError,
                        )
                        snapshot = LeaderboardSnapshot.from_record(record)

            except LedgerDomainException as exc:
                self.log_error("initialize", exc, caller=caller)
                raise

            self.log_operation("initialize", "Leaderboard initialized", administrator=caller)
            await self.emit_event(EVENT_INITIALIZED, {"administrator": caller})
            return snapshot

    async def register_player(self, caller: str) -> PlayerSnapshot:
        """
        Create the caller's player record and count it in ``total_players``.

        Both changes commit together.

        Raises:
            ValidationError: If ``caller`` is not a valid identity
            LeaderboardNotInitializedError: If the ledger has no global record
            PlayerAlreadyRegisteredError: If ``caller`` already has a record
        """
        caller = self._identity(caller, "caller")

        with LogContext(caller=caller, operation="register_player", component="leaderboard"):
            try:
                async with self._write_lock:
                    async with DatabaseService.get_transaction() as session:
                        global_record = await self._global_repo.load(session, for_update=True)
                        if global_record is None:
                            raise LeaderboardNotInitializedError("register_player")

                        if await self._player_repo.is_registered(session, caller):
                            raise PlayerAlreadyRegisteredError(caller)

                        record = scoring_logic.new_player_record(caller, self._clock.now())
                        self._player_repo.add(session, record)
                        total_players = scoring_logic.register(global_record)
                        await self._flush(
                            session,
                            self._player_repo,
                            on_duplicate=lambda: PlayerAlreadyRegisteredError(caller),
                        )
                        snapshot = PlayerSnapshot.from_record(record)

            except LedgerDomainException as exc:
                self.log_error("register_player", exc, caller=caller)
                raise

            self.log_operation(
                "register_player",
                "Player registered",
                identity=caller,
                total_players=total_players,
            )
            await self.emit_event(
                EVENT_PLAYER_REGISTERED,
                {"identity": caller, "total_players": total_players},
            )
            return snapshot

    async def submit_score(
        self,
        caller: str,
        score: int,
        player: Optional[str] = None,
    ) -> ScoreOutcome:
        """
        Record one game with ``score`` for the caller.

        ``player`` names the record to update and defaults to the caller; a
        caller may only ever update its own record.

        Check order: identity, ownership of the named record, score value,
        then (inside the transaction) global record, player record, and the
        stored owner.

        Raises:
            ValidationError: If ``caller`` or ``player`` is not a valid identity
            UnauthorizedError: If the targeted record belongs to someone else
            InvalidScoreError: If ``score`` is zero, negative, not an integer,
                or above 2**64 - 1
            LeaderboardNotInitializedError: If the ledger has no global record
            PlayerRecordNotFoundError: If the caller never registered
            ConcurrentUpdateError: If another writer changed a record first
        """
        caller = self._identity(caller, "caller")
        target = caller if player is None else self._identity(player, "player")

        with LogContext(
            caller=caller,
            player=target,
            operation="submit_score",
            component="leaderboard",
        ):
            try:
                if target != caller:
                    raise UnauthorizedError(caller, target)

                score = InputValidator.validate_score(score)

                async with self._write_lock:
                    async with DatabaseService.get_transaction() as session:
                        global_record = await self._global_repo.load(session, for_update=True)
                        if global_record is None:
                            raise LeaderboardNotInitializedError("submit_score")

                        record = await self._player_repo.load(session, target, for_update=True)
                        if record is None:
                            raise PlayerRecordNotFoundError(target)

                        if record.owner_identity != caller:
                            raise UnauthorizedError(caller, record.owner_identity)

                        outcome = scoring_logic.apply_score(
                            record, global_record, score, self._clock.now()
                        )
                        await self._flush(session, self._player_repo)

            except LedgerDomainException as exc:
                self.log_error("submit_score", exc, caller=caller, score=repr(score))
                raise

            await self._announce_score(outcome)
            return outcome

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def query_leaderboard(self) -> LeaderboardSnapshot:
        """
        Snapshot of the global record.

        Raises:
            LeaderboardNotInitializedError: If the ledger has no global record
        """
        async with DatabaseService.get_session() as session:
            record = await self._global_repo.load(session)
            if record is None:
                raise LeaderboardNotInitializedError("query_leaderboard")
            snapshot = LeaderboardSnapshot.from_record(record)

        self.log.info(
            "Leaderboard info",
            extra={"operation": "query_leaderboard", **snapshot.to_dict()},
        )
        return snapshot

    async def get_player_record(self, identity: str) -> PlayerSnapshot:
        """
        Snapshot of one player's record.

        Raises:
            ValidationError: If ``identity`` is not a valid identity
            LeaderboardNotInitializedError: If the ledger has no global record
            PlayerRecordNotFoundError: If ``identity`` never registered
        """
        identity = self._identity(identity, "identity")

        async with DatabaseService.get_session() as session:
            if await self._global_repo.load(session) is None:
                raise LeaderboardNotInitializedError("get_player_record")

            record = await self._player_repo.load(session, identity)
            if record is None:
                raise PlayerRecordNotFoundError(identity, operation="get_player_record")
            return PlayerSnapshot.from_record(record)

    async def get_administrator(self) -> str:
        """
        Identity that initialized the ledger.

        Raises:
            LeaderboardNotInitializedError: If the ledger has no global record
        """
        async with DatabaseService.get_session() as session:
            record = await self._global_repo.load(session)
            if record is None:
                raise LeaderboardNotInitializedError("get_administrator")
            return record.administrator_identity

    async def is_registered(self, identity: str) -> bool:
        """Whether ``identity`` has a player record. Never raises for lifecycle state."""
        identity = self._identity(identity, "identity")

        async with DatabaseService.get_session() as session:
            return await self._player_repo.is_registered(session, identity)

    # ========================================================================
    # PRIVATE HELPERS
    # ========================================================================

    def _identity(self, value: Any, field_name: str) -> str:
        return InputValidator.validate_identity(
            value,
            field_name,
            max_length=self.get_config("MAX_IDENTITY_LENGTH"),
        )

    async def _flush(
        self,
        session: AsyncSession,
        repo: BaseRepository,
        on_duplicate: Optional[Callable[[], LedgerDomainException]] = None,
    ) -> None:
        """
        Flush pending changes, translating store conflicts into domain errors.

        A primary-key or unique violation means another writer created the
        same record first; a version mismatch means another writer updated it.
        """
        try:
            await repo.flush(session)
        except IntegrityError as exc:
            if on_duplicate is None:
                raise
            raise on_duplicate() from exc
        except StaleDataError as exc:
            raise ConcurrentUpdateError(repo.model_class.__name__) from exc

    async def _announce_score(self, outcome: ScoreOutcome) -> None:
        if outcome.is_personal_best:
            self.log_operation(
                "submit_score",
                "New high score for player",
                identity=outcome.identity,
                previous_high_score=outcome.previous_high_score,
                high_score=outcome.high_score,
            )

        self.log_operation(
            "submit_score",
            "Score submitted",
            identity=outcome.identity,
            score=outcome.score,
            total_games=outcome.total_games,
            top_score=outcome.top_score,
            top_player=outcome.top_player,
        )

        await self.emit_event(
            EVENT_SCORE_SUBMITTED,
            {
                "identity": outcome.identity,
                "score": outcome.score,
                "total_games": outcome.total_games,
            },
        )

        if outcome.is_personal_best:
            await self.emit_event(
                EVENT_PERSONAL_BEST,
                {
                    "identity": outcome.identity,
                    "previous_high_score": outcome.previous_high_score,
                    "high_score": outcome.high_score,
                },
            )

        if outcome.is_new_top_score:
            await self.emit_event(
                EVENT_TOP_SCORE_CHANGED,
                {
                    "identity": outcome.identity,
                    "previous_top_player": outcome.previous_top_player,
                    "previous_top_score": outcome.previous_top_score,
                    "top_score": outcome.top_score,
                },
            )
