"""
Step Scientists Domain Validators

Purpose
-------
Validation utilities that raise structured domain exceptions. Validators
accept data as parameters and return None on success (raise-on-error).

Usage
-----
    from stepscientists.modules.shared.validators import validate_step_count

    validate_step_count(steps, "steps_increment")
    # Raises InvalidStepCountError for -1, 1.5, True, "100"
"""

from __future__ import annotations

from typing import Any

from stepscientists.modules.shared.exceptions import InvalidStepCountError, ValidationError


def validate_step_count(value: Any, field: str = "steps") -> None:
    """
    Validate that a step count is a non-negative integer.

    bool is rejected even though it subclasses int.

    Raises:
        InvalidStepCountError: If value is negative or not an integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidStepCountError(value, field)


def validate_player_id(player_id: Any) -> None:
    """
    Validate a player identifier at the service boundary.

    Raises:
        ValidationError: If player_id is not a non-empty string of at most 64 chars
    """
    if not isinstance(player_id, str) or not player_id.strip():
        raise ValidationError("player_id", "must be a non-empty string")
    if len(player_id) > 64:
        raise ValidationError("player_id", "must be at most 64 characters")
