"""
Step Scientists Shared Module

Purpose
-------
Domain-level foundations for all game modules:
- Domain exceptions and error handling
- Base service and repository patterns
- Gameplay constants and pure formulas
- Domain validation utilities

Architecture
------------
- BaseService: Foundation for service classes (logging, config)
- BaseRepository: Type-safe database access patterns
- Domain exceptions: Player-facing errors and rule violations
- Formulas: Pure integer calculations for step conversion
- Validators: Raise-on-error validation with structured exceptions
- Constants: Conversion rates, caps and infinite-progression tuning

Usage
-----
    from stepscientists.modules.shared import (
        BaseService,
        InvalidStepCountError,
        effective_steps_per_unit,
        validate_step_count,
    )
"""

from __future__ import annotations

from .base_repository import BaseRepository
from .base_service import BaseService

from .exceptions import (
    ErrorSeverity,
    InvalidStepCountError,
    MilestoneAlreadyClaimedError,
    MilestoneNotReachedError,
    NotFoundError,
    StepDomainException,
    ValidationError,
    get_error_severity,
    is_transient_error,
    should_alert,
)

from .constants import (
    DISCOVERY_STEPS_PER_CELL,
    INFINITE_PROGRESSION_INTERVAL_STEPS,
    INFINITE_PROGRESSION_START_STEPS,
    MAX_BONUS_CELLS_PER_DAY,
    MAX_EFFICIENCY_PCT,
    TRAINING_STEPS_PER_XP,
)

from .formulas import (
    cap_efficiency,
    effective_steps_per_unit,
    floor_percentage_between,
    infinite_milestone_count,
    rounded_percentage,
    units_for_steps,
)

from .validators import validate_player_id, validate_step_count

__all__ = [
    # Base patterns
    "BaseRepository",
    "BaseService",
    # Exceptions
    "StepDomainException",
    "InvalidStepCountError",
    "MilestoneNotReachedError",
    "MilestoneAlreadyClaimedError",
    "NotFoundError",
    "ValidationError",
    "ErrorSeverity",
    "get_error_severity",
    "is_transient_error",
    "should_alert",
    # Constants
    "DISCOVERY_STEPS_PER_CELL",
    "TRAINING_STEPS_PER_XP",
    "MAX_EFFICIENCY_PCT",
    "MAX_BONUS_CELLS_PER_DAY",
    "INFINITE_PROGRESSION_START_STEPS",
    "INFINITE_PROGRESSION_INTERVAL_STEPS",
    # Formulas
    "cap_efficiency",
    "effective_steps_per_unit",
    "units_for_steps",
    "rounded_percentage",
    "floor_percentage_between",
    "infinite_milestone_count",
    # Validators
    "validate_step_count",
    "validate_player_id",
]
