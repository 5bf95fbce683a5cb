"""
Leaderboard module: the ledger's records, rules and service.

Usage
-----
    from tapledger.modules.leaderboard import LeaderboardService

    service = LeaderboardService(Config, event_bus, get_logger("tapledger.leaderboard"))
    await service.initialize("admin")
"""

from .service import (
    EVENT_INITIALIZED,
    EVENT_PERSONAL_BEST,
    EVENT_PLAYER_REGISTERED,
    EVENT_SCORE_SUBMITTED,
    EVENT_TOP_SCORE_CHANGED,
    LeaderboardService,
)
from .snapshots import LeaderboardSnapshot, PlayerSnapshot, ScoreOutcome

__all__ = [
    "LeaderboardService",
    "LeaderboardSnapshot",
    "PlayerSnapshot",
    "ScoreOutcome",
    "EVENT_INITIALIZED",
    "EVENT_PERSONAL_BEST",
    "EVENT_PLAYER_REGISTERED",
    "EVENT_SCORE_SUBMITTED",
    "EVENT_TOP_SCORE_CHANGED",
]
