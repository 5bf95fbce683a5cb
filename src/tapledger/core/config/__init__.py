"""Static configuration for Tap Ledger."""

from .config import Config, Environment

__all__ = ["Config", "Environment"]
