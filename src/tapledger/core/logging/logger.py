"""
Tap Ledger Logging Subsystem

Purpose
-------
Structured logging for the ledger. Records are handed to a bounded queue and
written by a background listener, so a slow sink never blocks a ledger
operation. Console output is plain text in development and JSON in
production; an optional daily rotating file always receives JSON.

Every record carries the active ``LogContext`` (caller, player, command,
component, operation and a short correlation id).

Entry points call ``setup_logging()`` once and ``shutdown_logging()`` on exit.
Nothing is configured on import. Console output goes to stderr so that the
JSON results on stdout stay parseable.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from typing import Any, Dict, List, Optional

from tapledger.core.config.config import Config

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DAILY_BASENAME = "tapledger_daily.json.log"
QUEUE_MAX_SIZE = 10_000

_INITIALIZED_FLAG = "_tapledger_logging_initialized"

_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})
_queue_listener: Optional[QueueListener] = None


def _log_level() -> int:
    level_name = Config.LOG_LEVEL if isinstance(Config.LOG_LEVEL, str) else "INFO"
    return getattr(logging, level_name.upper(), logging.INFO)


def _use_json() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return bool(Config.LOG_JSON)


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Copies the active LogContext onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context: Dict[str, Any] = _log_context.get()

        # Values passed via extra= win over the ambient context.
        defaults = {
            "caller": context.get("caller", "N/A"),
            "player": context.get("player", "N/A"),
            "command": context.get("command", "N/A"),
            "correlation_id": context.get("correlation_id") or "N/A",
            "component": context.get("component") or record.name.split(".", 1)[0],
            "operation": context.get("operation") or "N/A",
        }
        for key, value in {**context, **defaults}.items():
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record; unknown attributes go under ``extra``."""

    STANDARD_ATTRS = frozenset(
        logging.LogRecord("", 0, "", 0, "", (), None).__dict__
    ) | {"message", "asctime", "taskName"}

    CONTEXT_ATTRS = ("caller", "player", "command", "correlation_id", "component", "operation")

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for attr in self.CONTEXT_ATTRS:
            value = getattr(record, attr, None)
            if value not in (None, "N/A"):
                log_data[attr] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: val
            for key, val in record.__dict__.items()
            if key not in self.STANDARD_ATTRS
            and key not in self.CONTEXT_ATTRS
            and not key.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False, default=str)


# ============================================================================
# Queue Handler
# ============================================================================


class LedgerQueueHandler(QueueHandler):
    """Drops records instead of blocking when the queue is full."""

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            sys.stderr.write("Tap Ledger logging queue full; dropping log record.\n")


# ============================================================================
# Global Setup
# ============================================================================


def _build_console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if _use_json():
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _build_daily_file_handler() -> logging.Handler:
    logs_dir = Config.LOGS_DIR.resolve()
    logs_dir.mkdir(parents=True, exist_ok=True)

    handler = TimedRotatingFileHandler(
        filename=str(logs_dir / DAILY_BASENAME),
        when="midnight",
        backupCount=1,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(JSONFormatter())
    return handler


def is_logging_initialized() -> bool:
    return bool(getattr(logging.getLogger(), _INITIALIZED_FLAG, False))


def setup_logging() -> None:
    """Install the queue-backed root handler. Idempotent."""
    global _queue_listener

    if is_logging_initialized():
        return

    level = _log_level()
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handlers: List[logging.Handler] = [_build_console_handler()]
    if Config.LOG_TO_FILE:
        handlers.append(_build_daily_file_handler())

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)
    _queue_listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    _queue_listener.start()

    queue_handler = LedgerQueueHandler(log_queue)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    setattr(root, _INITIALIZED_FLAG, True)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(level),
            "json": _use_json(),
            "to_file": bool(Config.LOG_TO_FILE),
        },
    )


def shutdown_logging() -> None:
    """Flush the queue, stop the listener and remove root handlers."""
    global _queue_listener

    if not is_logging_initialized():
        return

    root = logging.getLogger()
    logging.getLogger(__name__).info("Shutting down logging subsystem.")

    if _queue_listener is not None:
        _queue_listener.stop()
        for handler in _queue_listener.handlers:
            handler.flush()
            handler.close()
        _queue_listener = None

    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)

    setattr(root, _INITIALIZED_FLAG, False)


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Scoped logging context.

    Example
    -------
    >>> async with LogContext(caller="alice", operation="submit_score"):
    ...     logger.info("Score accepted")
    """

    def __init__(
        self,
        caller: Optional[str] = None,
        player: Optional[str] = None,
        command: Optional[str] = None,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context: Dict[str, Any] = {
            "caller": caller if caller is not None else "N/A",
            "player": player if player is not None else "N/A",
            "command": command or "N/A",
            "component": component,
            "operation": operation,
            "correlation_id": correlation_id or str(uuid.uuid4())[:8],
            **extra,
        }
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
