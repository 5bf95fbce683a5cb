"""
Base Repository Pattern

Purpose
-------
Generic repository over SQLAlchemy 2.0 async sessions for records addressed
by their derived ``record_key``. Keeps data access out of the services.

What this class does NOT do:
- Manage transactions (DatabaseService.get_transaction handles that)
- Contain business logic
- Perform validation

Usage
-----
    class PlayerRecordRepository(BaseRepository[PlayerRecord]):
        async def load(self, session, identity, for_update=False):
            return await self.get(session, player_record_key(identity), for_update)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository for keyed ledger records.

    Type Parameters:
        T: The SQLAlchemy model class this repository manages. It must expose
           a ``record_key`` primary key column.
    """

    def __init__(self, model_class: Type[T], logger: Logger) -> None:
        self.model_class = model_class
        self.log = logger

    async def get(
        self,
        session: AsyncSession,
        record_key: str,
        for_update: bool = False,
    ) -> Optional[T]:
        """
        Get a single record by key.

        With ``for_update`` the row is read with SELECT ... FOR UPDATE;
        backends without row locks (SQLite) omit the clause.
        """
        stmt = select(self.model_class).where(
            self.model_class.record_key == record_key  # type: ignore[attr-defined]
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.get: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "record_key": record_key,
                "found": instance is not None,
                "locked": for_update,
            },
        )

        return instance

    async def exists(self, session: AsyncSession, record_key: str) -> bool:
        """True if a record with ``record_key`` is stored."""
        stmt = (
            select(func.count())
            .select_from(self.model_class)
            .where(self.model_class.record_key == record_key)  # type: ignore[attr-defined]
        )
        found = int((await session.execute(stmt)).scalar_one()) > 0

        self.log.debug(
            f"Repository.exists: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__, "record_key": record_key, "exists": found},
        )

        return found

    def add(self, session: AsyncSession, instance: T) -> T:
        """Stage a new instance in the session."""
        session.add(instance)

        self.log.debug(
            f"Repository.add: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "record_key": getattr(instance, "record_key", None),
            },
        )

        return instance

    async def flush(self, session: AsyncSession) -> None:
        """Flush pending changes to the database."""
        await session.flush()

        self.log.debug(
            f"Repository.flush: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__},
        )
