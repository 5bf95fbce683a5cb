"""
Global Leaderboard Record Model
===============================

The singleton aggregate for the whole ledger:
- Administrator identity (who initialized the ledger)
- Registered player and submitted game counters
- Current top score and the identity holding it

The row is created exactly once and never deleted. Its primary key is always
``GLOBAL_RECORD_KEY``.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from tapledger.core.database.base import Base, TimestampMixin
from tapledger.core.database.keys import RECORD_KEY_LENGTH
from tapledger.core.database.types import UnsignedBigInteger


class GlobalLeaderboardRecord(Base, TimestampMixin):
    """Singleton leaderboard state shared by every player."""

    # ========================================================================
    # TABLE CONFIGURATION
    # ========================================================================

    __tablename__ = "leaderboard_global"
    __table_args__ = (
        CheckConstraint("total_players >= 0", name="total_players_non_negative"),
        CheckConstraint("total_games >= 0", name="total_games_non_negative"),
        CheckConstraint("top_score >= 0", name="top_score_non_negative"),
        CheckConstraint(
            "(top_player IS NULL AND top_score = 0 AND total_games = 0) "
            "OR (top_player IS NOT NULL AND top_score > 0 AND total_games > 0)",
            name="top_player_consistent",
        ),
    )

    # ========================================================================
    # PRIMARY KEY & IDENTITY
    # ========================================================================

    record_key: Mapped[str] = mapped_column(
        String(RECORD_KEY_LENGTH),
        primary_key=True,
        doc="Derived record key (always GLOBAL_RECORD_KEY)",
    )

    version: Mapped[int] = mapped_column(
        nullable=False,
        doc="Optimistic locking version for concurrent updates",
    )

    administrator_identity: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        doc="Identity that initialized the ledger (immutable)",
    )

    # ========================================================================
    # AGGREGATES
    # ========================================================================

    total_players: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Number of registered players",
    )

    total_games: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Number of accepted score submissions",
    )

    top_score: Mapped[int] = mapped_column(
        UnsignedBigInteger,
        nullable=False,
        default=0,
        doc="Highest score ever submitted",
    )

    top_player: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        default=None,
        doc="Identity that first reached top_score (NULL before any score)",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<GlobalLeaderboardRecord players={self.total_players} "
            f"games={self.total_games} top={self.top_score}/{self.top_player!r}>"
        )
