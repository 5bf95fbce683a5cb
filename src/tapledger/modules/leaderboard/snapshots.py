"""
Read-side value objects returned by the leaderboard service.

Snapshots are immutable copies of record state taken inside a session; they
stay valid after the session closes and never write back.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from tapledger.core.clock import from_unix_seconds
from tapledger.database.models import GlobalLeaderboardRecord, PlayerRecord


@dataclass(frozen=True)
class LeaderboardSnapshot:
    """Public projection of the global record."""

    total_players: int
    total_games: int
    top_score: int
    top_player: Optional[str]

    @classmethod
    def from_record(cls, record: GlobalLeaderboardRecord) -> "LeaderboardSnapshot":
        return cls(
            total_players=record.total_players,
            total_games=record.total_games,
            top_score=record.top_score,
            top_player=record.top_player,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlayerSnapshot:
    owner_identity: str
    high_score: int
    total_games: int
    last_played_at: datetime

    @classmethod
    def from_record(cls, record: PlayerRecord) -> "PlayerSnapshot":
        return cls(
            owner_identity=record.owner_identity,
            high_score=record.high_score,
            total_games=record.total_games,
            last_played_at=from_unix_seconds(record.last_played_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner_identity": self.owner_identity,
            "high_score": self.high_score,
            "total_games": self.total_games,
            "last_played_at": self.last_played_at.isoformat(),
        }


@dataclass(frozen=True)
class ScoreOutcome:
    """
    Effect of one accepted score submission on both records.

    ``previous_*`` fields hold the values the submission replaced, so
    listeners can tell a personal best or a new champion apart from an
    ordinary game.
    """

    identity: str
    score: int
    previous_high_score: int
    high_score: int
    player_total_games: int
    total_games: int
    previous_top_score: int
    previous_top_player: Optional[str]
    top_score: int
    top_player: Optional[str]
    played_at: datetime

    @property
    def is_personal_best(self) -> bool:
        return self.high_score != self.previous_high_score

    @property
    def is_new_top_score(self) -> bool:
        return self.top_score != self.previous_top_score

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["played_at"] = self.played_at.isoformat()
        data["is_personal_best"] = self.is_personal_best
        data["is_new_top_score"] = self.is_new_top_score
        return data
