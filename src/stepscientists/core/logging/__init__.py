"""
Step Scientists Logging Infrastructure

Exports the structured logging subsystem and the log context helpers.
"""

from stepscientists.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    clear_log_context,
    get_log_context,
    get_logger,
    get_logging_health,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "get_logging_health",
    "LogContext",
    "get_log_context",
    "clear_log_context",
    "ContextFilter",
    "JSONFormatter",
]
