"""Leaderboard record models."""

from .global_record import GlobalLeaderboardRecord
from .player_record import PlayerRecord

__all__ = ["GlobalLeaderboardRecord", "PlayerRecord"]
