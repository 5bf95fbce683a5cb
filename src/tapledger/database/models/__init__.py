"""
Database Models Package
=======================

SQLAlchemy ORM models for the ledger. Models are schema-only:
- ``Mapped[]`` syntax with ``mapped_column()``
- Inherit TimestampMixin for row bookkeeping
- Optimistic locking via a ``version`` column (``version_id_col``)
- Check constraints for every invariant expressible as a row predicate

Importing this package registers every table on ``Base.metadata``.
"""

from tapledger.core.database.base import Base

from .leaderboard import GlobalLeaderboardRecord, PlayerRecord

__all__ = [
    "Base",
    "GlobalLeaderboardRecord",
    "PlayerRecord",
]
