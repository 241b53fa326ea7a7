"""
Progression Calculator

Purpose
-------
Deterministic rules that turn a player's lifetime step total into:
- the unlocked achievement tier and its bonus bundle (plus infinite
  progression above 3,500,000 steps),
- effective step-conversion rates for both game modes,
- resources earned for a step increment,
- progress toward the next magnifying-glass milestone and achievement.

Responsibilities
----------------
- Validate step inputs (InvalidStepCountError for negative/non-int/bool)
- Resolve named tiers from the immutable catalog
- Integer-only percentage math with explicit floors

Non-Responsibilities
--------------------
- Mutating player state (see stepscientists.domain.models.player)
- Persistence or locking (see ProgressionService)

Design Notes
------------
- Every function is pure; no module-level mutable state.
- Named tiers are partial bundles. They are folded once at import into a
  tuple of cumulative bundles, then resolved per call by a descending scan
  for the last tier whose threshold is <= total steps.
- Resource gain for a running counter goes through
  `compute_cumulative_gain`, which carries the unconverted remainder between
  syncs; converting each increment on its own drops it every time.

Usage
-----
>>> bonuses = calculate_lifetime_bonuses(100_000)
>>> bonuses.bonus_cells_per_day, bonuses.discovery_efficiency_pct
(1, 2)
>>> compute_resource_gain(1_600, GameMode.DISCOVERY, LifetimeAchievement(discovery_efficiency_pct=20))
Resources(cells=2, experience_points=0)
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from stepscientists.domain.models.progression import (
    AchievementTier,
    ConversionRates,
    GameMode,
    LifetimeAchievement,
    Milestone,
    Resources,
)
from stepscientists.modules.progression.catalog import ACHIEVEMENT_TIERS, MILESTONES
from stepscientists.modules.shared.constants import (
    DISCOVERY_STEPS_PER_CELL,
    INFINITE_EFFICIENCY_PER_MILESTONE,
    INFINITE_MAX_EXTRA_BONUS_CELLS,
    INFINITE_MAX_EXTRA_EFFICIENCY_PCT,
    INFINITE_PROGRESSION_INTERVAL_STEPS,
    INFINITE_PROGRESSION_NAME,
    INFINITE_PROGRESSION_START_STEPS,
    MAX_BONUS_CELLS_PER_DAY,
    MAX_EFFICIENCY_PCT,
    PERCENT,
    TRAINING_STEPS_PER_XP,
)
from stepscientists.modules.shared.formulas import (
    effective_steps_per_unit,
    floor_percentage_between,
    infinite_milestone_count,
    rounded_percentage,
    units_for_steps,
)
from stepscientists.modules.shared.validators import validate_step_count


# ============================================================================
# TIER RESOLUTION
# ============================================================================


def _apply_tier(bundle: LifetimeAchievement, tier: AchievementTier) -> LifetimeAchievement:
    changes = {
        name: getattr(tier, name)
        for name in (
            "bonus_cells_per_day",
            "discovery_efficiency_pct",
            "training_efficiency_pct",
            "click_power_multiplier",
            "experience_bank_cap",
            "training_roster_slots",
            "release_xp_bonus_pct",
        )
        if getattr(tier, name) is not None
    }
    if tier.unbounded_experience_bank:
        changes["experience_bank_cap"] = None
    return replace(
        bundle,
        unlocked_achievement_ids=bundle.unlocked_achievement_ids | {tier.achievement_id},
        **changes,
    )


def _fold_tiers(tiers: Tuple[AchievementTier, ...]) -> Tuple[Tuple[int, LifetimeAchievement], ...]:
    resolved = []
    bundle = LifetimeAchievement()
    for tier in tiers:
        bundle = _apply_tier(bundle, tier)
        resolved.append((tier.threshold_steps, bundle))
    return tuple(resolved)


_BASELINE = LifetimeAchievement()
_CUMULATIVE_TIERS = _fold_tiers(ACHIEVEMENT_TIERS)


def _named_tier_bundle(total_steps: int) -> LifetimeAchievement:
    for threshold, bundle in reversed(_CUMULATIVE_TIERS):
        if threshold <= total_steps:
            return bundle
    return _BASELINE


# ============================================================================
# LIFETIME BONUSES
# ============================================================================


def calculate_lifetime_bonuses(total_steps: int) -> LifetimeAchievement:
    """
    Derive the full lifetime bonus bundle from lifetime steps.

    Parameters
    ----------
    total_steps : int
        Lifetime step total (non-negative)

    Returns
    -------
    LifetimeAchievement
        Bundle with `last_daily_bonus_claim_at` unset

    Raises
    ------
    InvalidStepCountError
        If total_steps is negative or not an integer

    Notes
    -----
    Above 3,500,000 steps every completed 600,000-step interval adds one
    bonus cell (at most 10 extra) and 2% to both efficiencies (at most 30
    extra). Combined totals are capped at 15 cells and 50%.
    """
    validate_step_count(total_steps, "total_steps")

    bundle = _named_tier_bundle(total_steps)
    milestone_count = infinite_milestone_count(total_steps)
    if milestone_count == 0:
        return bundle

    extra_cells = min(INFINITE_MAX_EXTRA_BONUS_CELLS, milestone_count)
    extra_efficiency = min(
        INFINITE_MAX_EXTRA_EFFICIENCY_PCT,
        milestone_count * INFINITE_EFFICIENCY_PER_MILESTONE,
    )
    return replace(
        bundle,
        bonus_cells_per_day=min(
            MAX_BONUS_CELLS_PER_DAY, bundle.bonus_cells_per_day + extra_cells
        ),
        discovery_efficiency_pct=min(
            MAX_EFFICIENCY_PCT, bundle.discovery_efficiency_pct + extra_efficiency
        ),
        training_efficiency_pct=min(
            MAX_EFFICIENCY_PCT, bundle.training_efficiency_pct + extra_efficiency
        ),
    )


def find_newly_unlocked(
    total_steps: int, already_unlocked: Iterable[str]
) -> List[AchievementTier]:
    """Named tiers reached at `total_steps` whose ids are not in `already_unlocked`."""
    validate_step_count(total_steps, "total_steps")
    known = frozenset(already_unlocked)
    return [
        tier
        for tier in ACHIEVEMENT_TIERS
        if tier.threshold_steps <= total_steps and tier.achievement_id not in known
    ]


# ============================================================================
# CONVERSION
# ============================================================================


def get_conversion_rates(achievement: LifetimeAchievement) -> ConversionRates:
    """
    Effective steps per cell and per XP for a bonus bundle.

    Example
    -------
    >>> get_conversion_rates(LifetimeAchievement(discovery_efficiency_pct=2)).steps_per_cell
    980
    """
    return ConversionRates(
        steps_per_cell=effective_steps_per_unit(
            DISCOVERY_STEPS_PER_CELL, achievement.discovery_efficiency_pct
        ),
        steps_per_xp=effective_steps_per_unit(
            TRAINING_STEPS_PER_XP, achievement.training_efficiency_pct
        ),
    )


def _resources_for(units: int, mode: GameMode) -> Resources:
    if mode is GameMode.DISCOVERY:
        return Resources(cells=units)
    return Resources(experience_points=units)


def compute_resource_gain(
    steps_increment: int, mode: GameMode, achievement: LifetimeAchievement
) -> Resources:
    """
    Resources earned for `steps_increment` steps in `mode`.

    The remainder below one unit is dropped; callers syncing a running
    counter should use `compute_cumulative_gain` instead.

    Raises
    ------
    InvalidStepCountError
        If steps_increment is negative or not an integer
    """
    validate_step_count(steps_increment, "steps_increment")
    rate = get_conversion_rates(achievement).for_mode(mode)
    return _resources_for(units_for_steps(steps_increment, rate), mode)


def compute_cumulative_gain(
    unconverted_steps: int,
    steps_increment: int,
    mode: GameMode,
    achievement: LifetimeAchievement,
) -> Tuple[Resources, int]:
    """
    Convert new steps plus the remainder carried from earlier syncs.

    Parameters
    ----------
    unconverted_steps : int
        In-mode steps left over from previous conversions
    steps_increment : int
        Steps walked since the last sync
    mode : GameMode
        Mode that decides the resource type
    achievement : LifetimeAchievement
        Bonus bundle that decides the rate

    Returns
    -------
    Tuple[Resources, int]
        Resources earned, and the steps still below one unit at the
        current rate (to carry into the next sync)

    Raises
    ------
    InvalidStepCountError
        If either count is negative or not an integer

    Example
    -------
    >>> compute_cumulative_gain(999, 1, GameMode.DISCOVERY, LifetimeAchievement(discovery_efficiency_pct=2))
    (Resources(cells=1, experience_points=0), 20)
    """
    validate_step_count(unconverted_steps, "unconverted_steps")
    validate_step_count(steps_increment, "steps_increment")

    rate = get_conversion_rates(achievement).for_mode(mode)
    units, remainder = divmod(unconverted_steps + steps_increment, rate)
    return _resources_for(units, mode), remainder


# ============================================================================
# MILESTONES
# ============================================================================


def get_next_milestone(
    total_steps: int, milestones: Tuple[Milestone, ...] = MILESTONES
) -> Optional[Milestone]:
    """First milestone with threshold > total_steps, or None past the last one."""
    validate_step_count(total_steps, "total_steps")
    for milestone in milestones:
        if milestone.threshold_steps > total_steps:
            return milestone
    return None


def get_milestone_progress(
    total_steps: int,
    milestone: Optional[Milestone] = None,
    milestones: Tuple[Milestone, ...] = MILESTONES,
) -> int:
    """
    Percentage progress toward a milestone, 0-100.

    Targets `milestone` when given, otherwise the next milestone. Uses
    round-half-up of 100 * total / threshold. 100 is returned only once the
    threshold is reached; just below it the value stops at 99. With no next
    milestone the result is 100.
    """
    validate_step_count(total_steps, "total_steps")
    target = milestone if milestone is not None else get_next_milestone(total_steps, milestones)
    if target is None or total_steps >= target.threshold_steps:
        return PERCENT
    return min(PERCENT - 1, rounded_percentage(total_steps, target.threshold_steps))


# ============================================================================
# ACHIEVEMENT PROGRESS
# ============================================================================


def _infinite_boundary(index: int) -> int:
    return INFINITE_PROGRESSION_START_STEPS + index * INFINITE_PROGRESSION_INTERVAL_STEPS


def get_next_achievement(total_steps: int) -> AchievementTier:
    """
    Next achievement target above `total_steps`.

    Past the last named tier this is a synthetic "Infinite Progression"
    target at the next 600,000-step boundary, so there is always a target.
    """
    validate_step_count(total_steps, "total_steps")
    for tier in ACHIEVEMENT_TIERS:
        if tier.threshold_steps > total_steps:
            return tier
    return AchievementTier(
        _infinite_boundary(infinite_milestone_count(total_steps) + 1),
        INFINITE_PROGRESSION_NAME,
    )


def _previous_achievement_boundary(total_steps: int) -> int:
    if total_steps >= INFINITE_PROGRESSION_START_STEPS:
        return _infinite_boundary(infinite_milestone_count(total_steps))
    reached = [t.threshold_steps for t in ACHIEVEMENT_TIERS if t.threshold_steps <= total_steps]
    return reached[-1] if reached else 0


def get_achievement_progress(total_steps: int) -> int:
    """
    Floor percentage between the previous and the next achievement boundary.

    Example
    -------
    >>> get_achievement_progress(150_000)
    50
    """
    next_tier = get_next_achievement(total_steps)
    return floor_percentage_between(
        total_steps,
        _previous_achievement_boundary(total_steps),
        next_tier.threshold_steps,
    )
