"""
Domain exceptions for Step Scientists.

Purpose
-------
Define the structured exception hierarchy for progression rules. These are
raised by the calculator, the Player aggregate and the services for invalid
input and invalid state. The caller decides whether to surface them to the
player or silently ignore them (duplicate claims usually are).

Design Notes
------------
- All domain exceptions inherit from `StepDomainException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict-like)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
- None of these are retried internally and none are fatal to the process.
- Helper functions (`is_transient_error`, `get_error_severity`, `should_alert`)
  centralize common exception handling patterns.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected, not concerning (e.g., duplicate claims)
    INFO = "info"  # Normal operation (e.g., validation failures)
    WARNING = "warning"  # Concerning but handled
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # System-level failures requiring immediate action


class StepDomainException(Exception):
    """
    Base exception for all Step Scientists domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise StepDomainException(
        ...     "Step sync rejected",
        ...     {"reason": "counter went backwards"}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class InvalidStepCountError(StepDomainException):
    """
    Raised when a step count is negative or not an integer.

    Args:
        value: The rejected value
        field: Which input carried it (e.g., "steps_increment")
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, value: Any, field: str = "steps") -> None:
        self.value = value
        self.field = field
        super().__init__(
            f"Invalid step count for {field}: {value!r} "
            "(must be a non-negative integer)",
            details={"field": field, "value": repr(value)},
            error_code="INVALID_STEP_COUNT",
        )


class MilestoneNotReachedError(StepDomainException):
    """
    Raised when a milestone reward is claimed before its threshold.

    Args:
        threshold_steps: Milestone threshold
        total_steps: Player's lifetime steps at claim time
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, threshold_steps: int, total_steps: int) -> None:
        self.threshold_steps = threshold_steps
        self.total_steps = total_steps
        super().__init__(
            f"Milestone {threshold_steps:,} not yet reached: "
            f"have {total_steps:,} steps",
            details={
                "threshold_steps": threshold_steps,
                "total_steps": total_steps,
                "remaining": threshold_steps - total_steps,
            },
            error_code="MILESTONE_NOT_YET_REACHED",
        )


class MilestoneAlreadyClaimedError(StepDomainException):
    """
    Raised when a milestone reward has already been claimed.

    Expected on client retries; callers usually treat it as a no-op.
    """

    DEFAULT_SEVERITY = ErrorSeverity.DEBUG
    DEFAULT_RETRYABLE = False

    def __init__(self, threshold_steps: int) -> None:
        self.threshold_steps = threshold_steps
        super().__init__(
            f"Milestone {threshold_steps:,} reward already claimed",
            details={"threshold_steps": threshold_steps},
            error_code="MILESTONE_ALREADY_CLAIMED",
        )


class NotFoundError(StepDomainException):
    """
    Raised when a requested game resource cannot be found.

    Args:
        resource_type: Type of resource (e.g., "Milestone", "MagnifyingGlass")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={
                "resource_type": resource_type,
                "identifier": identifier,
            },
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class ValidationError(StepDomainException):
    """
    Raised when service input fails validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={
                "field": field,
                "validation_message": message,
            },
            error_code=f"VALIDATION_{field.upper()}",
        )


# Utility functions for exception handling patterns


def is_transient_error(exc: Exception) -> bool:
    """True if the exception is a domain error marked retryable."""
    if isinstance(exc, StepDomainException):
        return exc.is_retryable
    return False


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """
    Get the severity level of an exception for logging.

    Unknown exceptions are treated as ERROR.
    """
    if isinstance(exc, StepDomainException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """True if severity is ERROR or CRITICAL."""
    return get_error_severity(exc) in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
