"""
Tap Ledger
==========

Authoritative leaderboard ledger: per-player high scores plus a single global
champion, kept consistent across an unbounded stream of score submissions.

Package Layout
--------------
- tapledger.core              : configuration, logging, database, events, validation
- tapledger.database.models   : schema-only ORM models
- tapledger.modules           : business services (leaderboard) and shared foundations
- tapledger.cli               : command line entry point
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
