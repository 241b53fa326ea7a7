"""
Base Service Foundation

Purpose
-------
Foundational class for domain services. Services orchestrate domain models
inside database transactions, enforce service-boundary validation and log
the domain events the aggregates emit.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access
- Domain event logging
- Common validation helpers

What this class does NOT do:
- Manage database transactions (that's DatabaseService's job)
- Contain game rules (those live in domain models and the calculator)

Usage
-----
    class ProgressionService(BaseService):
        def __init__(self, logger=None):
            super().__init__(logger or get_logger(__name__))

        async def sync_steps(self, player_id: str, steps_in_mode: int):
            self.log_operation("sync_steps", player_id=player_id)
            ...
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from stepscientists.core.config.config import Config
from stepscientists.modules.shared.exceptions import ErrorSeverity

if TYPE_CHECKING:
    from logging import Logger

    from stepscientists.domain.models.base import DomainEvent

_SEVERITY_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class BaseService:
    """
    Base class for all domain services.

    Args:
        logger: Structured logger instance
        config: Configuration holder (defaults to the global Config class)
    """

    def __init__(self, logger: Logger, config: Optional[Any] = None) -> None:
        self._config = config if config is not None else Config
        self.log = logger

    def get_config(self, key: str, default: Optional[Any] = None) -> Any:
        """Read a configuration attribute, falling back to default."""
        return getattr(self._config, key, default)

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log a service operation with structured context."""
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(
        self,
        operation: str,
        error: Exception,
        **context: Any,
    ) -> None:
        """Log a service error with full context."""
        self.log.error(
            f"Service error during {operation}: {str(error)}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_message": str(error),
                **context,
            },
        )

    def log_domain_error(
        self, operation: str, error: Exception, **context: Any
    ) -> None:
        """Log a domain exception at the level its severity calls for."""
        from .exceptions import StepDomainException, get_error_severity

        level = _SEVERITY_LEVELS[get_error_severity(error)]
        payload = error.to_dict() if isinstance(error, StepDomainException) else {
            "error_type": type(error).__name__,
            "message": str(error),
        }
        self.log.log(
            level,
            f"Domain error during {operation}: {error}",
            extra={"operation": operation, "error": payload, **context},
        )

    def log_domain_events(self, events: Iterable[DomainEvent]) -> None:
        """Emit one structured log line per domain event."""
        for event in events:
            self.log.info(
                f"Domain event: {event.event_name}",
                extra={
                    "event_name": event.event_name,
                    "occurred_at": event.occurred_at.isoformat(),
                    **event.payload,
                },
            )

    def validate_non_negative_int(self, value: Any, name: str) -> None:
        """
        Validate that a value is a non-negative integer.

        Raises:
            ValidationError: If value is negative or not an int
        """
        from .exceptions import ValidationError

        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(
                name, f"{name} must be a non-negative integer, got {value!r}"
            )
