"""
Pure leaderboard state transitions.

Every rule about how the two records change lives here, free of sessions,
locks and logging, so the service only has to load records, call one of
these functions and persist the result.

Rules
-----
- A new record starts empty: no games, no score, no champion.
- A personal best or the global top score only moves on a strictly greater
  score. An equal score never displaces the identity that reached it first.
- Every accepted submission counts as one game for the player and one for
  the ledger, and stamps the player's last-played time.
"""

from __future__ import annotations

from datetime import datetime

from tapledger.core.clock import from_unix_seconds, to_unix_seconds
from tapledger.core.database.keys import GLOBAL_RECORD_KEY, player_record_key
from tapledger.database.models import GlobalLeaderboardRecord, PlayerRecord
from tapledger.modules.leaderboard.snapshots import ScoreOutcome


def is_improvement(score: int, current_best: int) -> bool:
    """Strictly-greater comparison used for both personal and global bests."""
    return score > current_best


def new_global_record(administrator: str) -> GlobalLeaderboardRecord:
    return GlobalLeaderboardRecord(
        record_key=GLOBAL_RECORD_KEY,
        administrator_identity=administrator,
        total_players=0,
        total_games=0,
        top_score=0,
        top_player=None,
    )


def new_player_record(identity: str, registered_at: datetime) -> PlayerRecord:
    return PlayerRecord(
        record_key=player_record_key(identity),
        owner_identity=identity,
        high_score=0,
        total_games=0,
        last_played_at=to_unix_seconds(registered_at),
    )


def register(global_record: GlobalLeaderboardRecord) -> int:
    """Count one more registered player. Returns the new total."""
    global_record.total_players += 1
    return global_record.total_players


def apply_score(
    player: PlayerRecord,
    global_record: GlobalLeaderboardRecord,
    score: int,
    played_at: datetime,
) -> ScoreOutcome:
    """
    Apply one validated score to both records in place.

    ``score`` must already be a positive integer and ``player`` must belong
    to the submitting identity; this function does not re-check either.
    """
    previous_high = player.high_score
    previous_top_score = global_record.top_score
    previous_top_player = global_record.top_player

    if is_improvement(score, player.high_score):
        player.high_score = score
    player.total_games += 1
    player.last_played_at = to_unix_seconds(played_at)

    global_record.total_games += 1
    if is_improvement(score, global_record.top_score):
        global_record.top_score = score
        global_record.top_player = player.owner_identity

    return ScoreOutcome(
        identity=player.owner_identity,
        score=score,
        previous_high_score=previous_high,
        high_score=player.high_score,
        player_total_games=player.total_games,
        total_games=global_record.total_games,
        previous_top_score=previous_top_score,
        previous_top_player=previous_top_player,
        top_score=global_record.top_score,
        top_player=global_record.top_player,
        played_at=from_unix_seconds(player.last_played_at),
    )
