"""Repositories for the two leaderboard tables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from tapledger.core.database.keys import GLOBAL_RECORD_KEY, player_record_key
from tapledger.database.models import GlobalLeaderboardRecord, PlayerRecord
from tapledger.modules.shared.base_repository import BaseRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class GlobalRecordRepository(BaseRepository[GlobalLeaderboardRecord]):
    """Access to the singleton global record."""

    async def load(
        self, session: AsyncSession, for_update: bool = False
    ) -> Optional[GlobalLeaderboardRecord]:
        return await self.get(session, GLOBAL_RECORD_KEY, for_update)


class PlayerRecordRepository(BaseRepository[PlayerRecord]):
    """Access to per-identity player records by derived key."""

    async def load(
        self, session: AsyncSession, identity: str, for_update: bool = False
    ) -> Optional[PlayerRecord]:
        return await self.get(session, player_record_key(identity), for_update)

    async def is_registered(self, session: AsyncSession, identity: str) -> bool:
        return await self.exists(session, player_record_key(identity))
