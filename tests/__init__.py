"""
Tap Ledger Test Suite
=====================

Test Organization
-----------------
- tests/unit/          : Fast unit tests (no database)
- tests/integration/   : Tests against a real SQLite database via aiosqlite

Testing Philosophy
------------------
- Unit tests: fast, isolated, test rules and helpers
- Integration tests: run the real DatabaseService and LeaderboardService
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
