"""
Step Scientists Game Formulas

Purpose
-------
Pure integer calculation functions for step conversion and progress
percentages. Used by the progression calculator.

Design Notes
------------
All formulas:
- Accept parameters explicitly (no config access)
- Use integer arithmetic with explicit floors; no floats
- Are deterministic and side-effect free

Usage
-----
    from stepscientists.modules.shared.formulas import effective_steps_per_unit

    rate = effective_steps_per_unit(1000, efficiency_pct=20)  # 800
"""

from __future__ import annotations

from stepscientists.modules.shared.constants import (
    INFINITE_PROGRESSION_INTERVAL_STEPS,
    INFINITE_PROGRESSION_START_STEPS,
    MAX_EFFICIENCY_PCT,
    MIN_STEPS_PER_UNIT,
    PERCENT,
)


def cap_efficiency(efficiency_pct: int) -> int:
    """Clamp an efficiency percentage into [0, MAX_EFFICIENCY_PCT]."""
    return max(0, min(MAX_EFFICIENCY_PCT, efficiency_pct))


def effective_steps_per_unit(base_rate: int, efficiency_pct: int) -> int:
    """
    Steps needed for one cell/XP after applying an efficiency reduction.

    floor(base_rate * (100 - eff) / 100), never below 1. Efficiency is
    capped before use.

    Args:
        base_rate: Unreduced steps per unit
        efficiency_pct: Whole-number efficiency percentage

    Returns:
        Effective steps per unit

    Example:
        >>> effective_steps_per_unit(1000, 20)
        800
        >>> effective_steps_per_unit(10, 50)
        5
        >>> effective_steps_per_unit(1, 50)
        1
    """
    reduced = base_rate * (PERCENT - cap_efficiency(efficiency_pct)) // PERCENT
    return max(MIN_STEPS_PER_UNIT, reduced)


def units_for_steps(steps: int, steps_per_unit: int) -> int:
    """
    Whole units earned for a step count; the remainder is dropped.

    Example:
        >>> units_for_steps(1600, 800)
        2
    """
    return steps // steps_per_unit


def rounded_percentage(value: int, whole: int) -> int:
    """
    round(100 * value / whole) with half-up rounding, in integers.

    Example:
        >>> rounded_percentage(1, 8)
        13
        >>> rounded_percentage(2_500, 5_000)
        50
    """
    return (2 * PERCENT * value + whole) // (2 * whole)


def floor_percentage_between(value: int, lower: int, upper: int) -> int:
    """
    floor(100 * (value - lower) / (upper - lower)), clamped to [0, 100].

    Example:
        >>> floor_percentage_between(150_000, 100_000, 200_000)
        50
    """
    span = upper - lower
    if span <= 0:
        return PERCENT
    pct = PERCENT * (value - lower) // span
    return max(0, min(PERCENT, pct))


def infinite_milestone_count(total_steps: int) -> int:
    """
    Completed 600,000-step intervals above 3,500,000 lifetime steps.

    Example:
        >>> infinite_milestone_count(6_500_000)
        5
        >>> infinite_milestone_count(3_000_000)
        0
    """
    steps_above = max(0, total_steps - INFINITE_PROGRESSION_START_STEPS)
    return steps_above // INFINITE_PROGRESSION_INTERVAL_STEPS
