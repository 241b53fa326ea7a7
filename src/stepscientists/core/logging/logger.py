"""
Step Scientists Logging Subsystem

Purpose
-------
Structured logs for the progression backend. Every line written while a
step sync, mode switch or claim is running carries the player id, the
operation name and a correlation id, so one request can be followed from
the service call through the domain events it emitted.

Responsibilities
----------------
- Install and tear down a queue-backed root logging stack:
  console (JSON in production, plain text elsewhere) and a daily JSON file.
- Bind player/operation context with `LogContext` (sync and async).
- Report queue state through `get_logging_health()`.

Design Decisions
----------------
- JSONFormatter is the canonical line format; extras passed with
  `logger.info("msg", extra={...})` land under "extra".
- ContextFilter sits on the queue handler, so records from every named
  logger are enriched before they cross the queue. Explicit extras win
  over the ambient context.
- The queue is bounded. A full queue drops the record and counts it.
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
from pathlib import Path
from typing import Any, Dict, List, Optional

from stepscientists.core.config.config import Config

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(player_id)-12s | %(operation)-22s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DAILY_LOG_NAME = "stepscientists_daily.json.log"
QUEUE_MAX_SIZE = 10_000

_INITIALIZED_FLAG = "_stepscientists_logging_initialized"

_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})

_log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
_queue_listener: Optional[QueueListener] = None
_dropped_records = 0


def _log_level() -> int:
    level_name = Config.LOG_LEVEL if isinstance(Config.LOG_LEVEL, str) else "INFO"
    return getattr(logging, level_name.upper(), logging.INFO)


def _json_console() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return bool(Config.LOG_JSON)


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Copy the ambient LogContext onto each record without clobbering extras."""

    DEFAULTS = ("player_id", "operation", "correlation_id")

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for key, value in _log_context.get({}).items():
            if not hasattr(record, key):
                setattr(record, key, value)

        for key in self.DEFAULTS:
            if not hasattr(record, key):
                setattr(record, key, "N/A")
        if not getattr(record, "component", None):
            record.component = record.name.rsplit(".", 1)[-1]

        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line: core fields, known context, then extras."""

    CONTEXT_ATTRS = ("player_id", "operation", "component", "correlation_id")

    # Attributes every LogRecord has; anything else came in through `extra`.
    _RECORD_ATTRS = frozenset(
        vars(logging.LogRecord("", 0, "", 0, "", (), None))
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
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
            key: value
            for key, value in vars(record).items()
            if key not in self._RECORD_ATTRS
            and key not in self.CONTEXT_ATTRS
            and not key.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False, default=str)


class _DroppingQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        global _dropped_records
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _dropped_records += 1
            sys.stderr.write("Logging queue full; dropping log record.\n")


# ============================================================================
# Global Setup
# ============================================================================


def _build_handlers(file_output: bool) -> List[logging.Handler]:
    level = _log_level()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    if _json_console():
        console.setFormatter(JSONFormatter())
    else:
        console.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    handlers: List[logging.Handler] = [console]

    if file_output:
        logs_dir = Path(Config.LOGS_DIR).resolve()
        logs_dir.mkdir(parents=True, exist_ok=True)
        daily = TimedRotatingFileHandler(
            filename=str(logs_dir / DAILY_LOG_NAME),
            when="midnight",
            backupCount=1,
            encoding="utf-8",
            utc=True,
        )
        daily.setLevel(level)
        daily.setFormatter(JSONFormatter())
        handlers.append(daily)

    return handlers


def setup_logging(*, file_output: bool = True) -> None:
    """
    Install the queue-backed logging stack on the root logger.

    Idempotent: a second call while initialized is a no-op.
    """
    global _queue_listener, _log_queue, _dropped_records

    root = logging.getLogger()
    if getattr(root, _INITIALIZED_FLAG, False):
        return

    level = _log_level()
    root.setLevel(level)
    root.handlers.clear()

    _dropped_records = 0
    _log_queue = queue.Queue(QUEUE_MAX_SIZE)
    _queue_listener = QueueListener(
        _log_queue, *_build_handlers(file_output), respect_handler_level=True
    )
    _queue_listener.start()

    queue_handler = _DroppingQueueHandler(_log_queue)
    queue_handler.setLevel(level)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if Config.DATABASE_ECHO else logging.WARNING
    )
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    setattr(root, _INITIALIZED_FLAG, True)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(level),
            "json_console": _json_console(),
            "file_output": file_output,
        },
    )


def shutdown_logging() -> None:
    """Flush the queue, stop the listener and detach all root handlers."""
    global _queue_listener, _log_queue

    root = logging.getLogger()
    if not getattr(root, _INITIALIZED_FLAG, False):
        return

    logging.getLogger(__name__).info("Shutting down logging subsystem.")

    if _queue_listener:
        _queue_listener.stop()
        for handler in _queue_listener.handlers:
            handler.flush()
            handler.close()
        _queue_listener = None

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    setattr(root, _INITIALIZED_FLAG, False)
    _log_queue = None


def get_logging_health() -> Dict[str, Any]:
    """Snapshot of the logging queue for health endpoints."""
    return {
        "initialized": bool(getattr(logging.getLogger(), _INITIALIZED_FLAG, False)),
        "queue_size": _log_queue.qsize() if _log_queue is not None else 0,
        "queue_max_size": _log_queue.maxsize if _log_queue is not None else 0,
        "records_dropped": _dropped_records,
    }


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the ambient logging context."""
    return dict(_log_context.get({}))


def clear_log_context() -> None:
    _log_context.set({})


class LogContext:
    """
    Bind player/operation context to every log line emitted inside the block.

    Nested blocks inherit the outer context and its correlation id.

    >>> async with LogContext(player_id="p-1", operation="sync_steps"):
    ...     logger.info("Steps recorded")
    """

    def __init__(
        self,
        player_id: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        inherited = _log_context.get({})

        self.context: Dict[str, Any] = {
            **inherited,
            "correlation_id": correlation_id
            or inherited.get("correlation_id")
            or uuid.uuid4().hex[:8],
            **extra,
        }
        if player_id is not None:
            self.context["player_id"] = str(player_id)
        if operation is not None:
            self.context["operation"] = operation

        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
