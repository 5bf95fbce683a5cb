"""Core infrastructure for Tap Ledger (config, logging, database, events, validation)."""
