"""
Static configuration management for Tap Ledger.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. Values are read
once at startup; there is no database-backed or hot-reloaded configuration.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to every tunable the ledger uses
- Validate critical settings on startup
- Create required directories (logs, data) on validation
- Track which values came from the environment versus defaults

Non-Responsibilities
--------------------
- Secrets management (use environment variables)
- Schema creation or database connectivity (DatabaseService)

Architecture Notes
------------------
- Singleton pattern via class attributes and class methods (no instantiation)
- ``Config.load()`` runs on import and has no side effects
- ``Config.validate()`` is called by the bootstrap and may create directories
- Directory paths are relative to TAPLEDGER_HOME (default: working directory)

Environment Variables
---------------------
- ENVIRONMENT: development | testing | staging | production (default: development)
- DEBUG: Debug flag (default: False)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON: Force JSON console logs (default: production only)
- LOG_TO_FILE: Add the daily rotating JSON log file (default: False)
- DATABASE_URL: SQLAlchemy async URL (default: SQLite file under DATA_DIR)
- DATABASE_ECHO, DATABASE_POOL_SIZE, DATABASE_MAX_OVERFLOW,
  DATABASE_POOL_RECYCLE, DATABASE_POOL_TIMEOUT, DATABASE_STATEMENT_TIMEOUT_MS,
  DATABASE_HEALTH_TIMEOUT_SECONDS
- MAX_IDENTITY_LENGTH: Longest accepted caller identity (default: 128)
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# ============================================================================
# Enums
# ============================================================================


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") is Environment.PRODUCTION
        True
        >>> Environment.from_string("qa") is Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


# ============================================================================
# Configuration Metrics Tracker
# ============================================================================


class _ConfigLoadMetrics:
    """Tracks where each configuration value came from and any parse errors."""

    def __init__(self) -> None:
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any) -> None:
        self.env_vars_loaded[key] = from_env
        if from_env:
            self.defaults_used.pop(key, None)
        else:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str) -> None:
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": sorted(self.defaults_used),
            "last_reload": self.last_reload,
        }


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Centralized static configuration for Tap Ledger.

    Usage
    -----
    >>> Config.DATABASE_URL
    'sqlite+aiosqlite:////srv/ledger/data/tapledger.db'
    >>> Config.is_production()
    False
    >>> Config.get_config_summary()["environment"]
    'development'
    """

    _metrics: Optional[_ConfigLoadMetrics] = None
    _validated: bool = False

    # =========================================================================
    # Environment
    # =========================================================================

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_TO_FILE: bool = False

    # =========================================================================
    # Directories
    # =========================================================================

    HOME_DIR: Path = Path.cwd()
    LOGS_DIR: Path = HOME_DIR / "logs"
    DATA_DIR: Path = HOME_DIR / "data"

    # =========================================================================
    # Database
    # =========================================================================

    DATABASE_URL: str = ""
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 1800
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_STATEMENT_TIMEOUT_MS: int = 30_000
    DATABASE_HEALTH_TIMEOUT_SECONDS: int = 5

    # =========================================================================
    # Ledger Limits
    # =========================================================================

    MAX_IDENTITY_LENGTH: int = 128

    # =========================================================================
    # Parsing Helpers
    # =========================================================================

    @classmethod
    def _init_metrics(cls) -> None:
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _reject(cls, key: str, error: str) -> None:
        logging.warning(error)
        if cls._metrics:
            cls._metrics.record_validation_error(key, error)

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Parse an integer from the environment, falling back to ``default``
        when the variable is unset, malformed, or out of bounds.

        Example
        -------
        >>> Config._safe_int("DATABASE_POOL_SIZE", 5, min_val=1, max_val=200)
        5
        """
        cls._init_metrics()
        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        try:
            value = int(raw_value.strip())
        except ValueError:
            cls._reject(key, f"{key}='{raw_value}' is not a valid integer, using default {default}")
            return default

        if min_val is not None and value < min_val:
            cls._reject(key, f"{key}={value} is below minimum {min_val}, using default {default}")
            return default

        if max_val is not None and value > max_val:
            cls._reject(key, f"{key}={value} exceeds maximum {max_val}, using default {default}")
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Parse a boolean from the environment.

        Recognizes true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        cls._init_metrics()
        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        normalized = raw_value.strip().lower()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            cls._reject(key, f"{key}='{raw_value}' is not a valid boolean, using default {default}")
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        cls._init_metrics()
        value = os.getenv(key)
        if value is None or not value.strip():
            cls._metrics.record_env_load(key, False, default)
            return default
        cls._metrics.record_env_load(key, True, default)
        return value.strip()

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables.

        Called automatically on import and again by ``validate()``. Safe to
        call repeatedly (tests change the environment and reload).
        """
        cls._metrics = _ConfigLoadMetrics()

        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("ENVIRONMENT", "development")
        ).value
        cls.DEBUG = bool(cls._safe_bool("DEBUG", False))
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO").upper()
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)
        cls.LOG_TO_FILE = bool(cls._safe_bool("LOG_TO_FILE", False))

        cls.HOME_DIR = Path(cls._safe_str("TAPLEDGER_HOME", str(Path.cwd()))).resolve()
        cls.LOGS_DIR = Path(cls._safe_str("LOGS_DIR", str(cls.HOME_DIR / "logs")))
        cls.DATA_DIR = Path(cls._safe_str("DATA_DIR", str(cls.HOME_DIR / "data")))

        cls.DATABASE_URL = cls._safe_str(
            "DATABASE_URL",
            f"sqlite+aiosqlite:///{cls.DATA_DIR / 'tapledger.db'}",
        )
        cls.DATABASE_ECHO = bool(cls._safe_bool("DATABASE_ECHO", False))
        cls.DATABASE_POOL_SIZE = cls._safe_int("DATABASE_POOL_SIZE", 5, min_val=1, max_val=200)
        cls.DATABASE_MAX_OVERFLOW = cls._safe_int(
            "DATABASE_MAX_OVERFLOW", 10, min_val=0, max_val=200
        )
        cls.DATABASE_POOL_RECYCLE = cls._safe_int("DATABASE_POOL_RECYCLE", 1800, min_val=60)
        cls.DATABASE_POOL_TIMEOUT = cls._safe_int("DATABASE_POOL_TIMEOUT", 30, min_val=1)
        cls.DATABASE_STATEMENT_TIMEOUT_MS = cls._safe_int(
            "DATABASE_STATEMENT_TIMEOUT_MS", 30_000, min_val=100
        )
        cls.DATABASE_HEALTH_TIMEOUT_SECONDS = cls._safe_int(
            "DATABASE_HEALTH_TIMEOUT_SECONDS", 5, min_val=1, max_val=300
        )

        cls.MAX_IDENTITY_LENGTH = cls._safe_int(
            "MAX_IDENTITY_LENGTH", 128, min_val=1, max_val=1024
        )

        cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Validate critical configuration values on startup.

        Reloads from the environment, normalizes the log level, creates the
        logs/data directories and warns about risky production settings.

        Raises
        ------
        ValueError
            If validation fails in production. Outside production problems are
            logged and startup continues.
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)

        try:
            cls.load()

            if not cls.DATABASE_URL:
                raise ValueError("DATABASE_URL must not be empty")

            if not cls.DATABASE_URL.split(":", 1)[0].endswith(("+aiosqlite", "+asyncpg")):
                logger.warning(
                    "DATABASE_URL does not name an async driver (aiosqlite/asyncpg)",
                    extra={"url_scheme": cls.DATABASE_URL.split(":", 1)[0]},
                )

            valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            if cls.LOG_LEVEL not in valid_log_levels:
                logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
                cls.LOG_LEVEL = "INFO"

            if cls.is_production():
                if cls.DATABASE_URL.startswith("sqlite"):
                    logger.warning("Production environment is using a SQLite database")
                if cls.DEBUG:
                    logger.warning("DEBUG mode enabled in production")

            cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)
            cls.DATA_DIR.mkdir(parents=True, exist_ok=True)

            cls._validated = True

            summary = cls.get_config_summary()
            logger.info(f"Configuration loaded: {summary}")
            if cls._metrics and cls._metrics.validation_errors:
                logger.warning(f"Configuration warnings: {cls._metrics.validation_errors}")

        except Exception as e:
            logger.warning(f"Config validation warning: {e}")
            if cls.is_production():
                logger.error("Configuration validation failed in production")
                raise

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == Environment.PRODUCTION.value

    @classmethod
    def is_testing(cls) -> bool:
        return cls.ENVIRONMENT == Environment.TESTING.value

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """
        Non-sensitive configuration summary for debugging.

        The database URL itself is never included since it may carry
        credentials; only its scheme is reported.
        """
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "database_url_scheme": cls.DATABASE_URL.split(":", 1)[0] if cls.DATABASE_URL else None,
            "database_pool_size": cls.DATABASE_POOL_SIZE,
            "database_max_overflow": cls.DATABASE_MAX_OVERFLOW,
            "max_identity_length": cls.MAX_IDENTITY_LENGTH,
            "sources": cls._metrics.get_summary() if cls._metrics else {},
            "invalid_settings": sorted(cls._metrics.validation_errors) if cls._metrics else [],
        }


# Load on import (no side effects; validate() runs at startup)
Config.load()
