"""Schema-only persistence layer for Tap Ledger."""
