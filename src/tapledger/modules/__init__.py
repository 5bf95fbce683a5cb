"""Ledger business modules (leaderboard) and their shared foundations."""
