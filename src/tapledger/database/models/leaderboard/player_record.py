"""
Player Record Model
===================

One row per registered identity:
- Owner identity (unique, immutable)
- Personal best score and submission counter
- Time of the latest submission, as whole Unix seconds

Rows are created by player registration and only ever mutated by score
submissions from the owner.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from tapledger.core.database.base import Base, TimestampMixin
from tapledger.core.database.keys import RECORD_KEY_LENGTH
from tapledger.core.database.types import UnsignedBigInteger


class PlayerRecord(Base, TimestampMixin):
    """Per-identity score history summary."""

    # ========================================================================
    # TABLE CONFIGURATION
    # ========================================================================

    __tablename__ = "leaderboard_players"
    __table_args__ = (
        CheckConstraint("high_score >= 0", name="high_score_non_negative"),
        CheckConstraint("total_games >= 0", name="total_games_non_negative"),
        CheckConstraint(
            "(total_games = 0 AND high_score = 0) OR (total_games > 0 AND high_score > 0)",
            name="high_score_consistent",
        ),
    )

    # ========================================================================
    # PRIMARY KEY & IDENTITY
    # ========================================================================

    record_key: Mapped[str] = mapped_column(
        String(RECORD_KEY_LENGTH),
        primary_key=True,
        doc="Derived record key (player_record_key(owner_identity))",
    )

    version: Mapped[int] = mapped_column(
        nullable=False,
        doc="Optimistic locking version for concurrent updates",
    )

    owner_identity: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        unique=True,
        doc="Identity that owns this record (immutable)",
    )

    # ========================================================================
    # SCORES
    # ========================================================================

    high_score: Mapped[int] = mapped_column(
        UnsignedBigInteger,
        nullable=False,
        default=0,
        doc="Best score ever submitted by the owner",
    )

    total_games: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Number of scores submitted by the owner",
    )

    last_played_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        doc="Unix seconds of the latest submission (registration time if none)",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<PlayerRecord owner={self.owner_identity!r} "
            f"high={self.high_score} games={self.total_games}>"
        )
