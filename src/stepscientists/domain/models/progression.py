"""
Progression value objects for Step Scientists.

Purpose
-------
Immutable, self-validating records that describe a player's step
progression: totals, resources, conversion rates, milestones, magnifying
glasses, achievement tiers and the lifetime bonus bundle.

Design Notes
------------
- Every record is a frozen dataclass validated in `__post_init__`; bad
  construction raises DomainValidationError.
- Operations return new instances (`dataclasses.replace`), never mutate.
- Percentages are whole-number integers.
- `LifetimeAchievement` is a cache: every field except
  `last_daily_bonus_claim_at` is recomputable from total steps alone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from stepscientists.domain.models.base import (
    DomainValidationError,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
    validate_range,
)
from stepscientists.modules.shared.constants import (
    BASE_BONUS_CELLS_PER_DAY,
    BASE_CLICK_POWER,
    BASE_DISCOVERY_EFFICIENCY_PCT,
    BASE_EXPERIENCE_BANK_CAP,
    BASE_RELEASE_XP_BONUS_PCT,
    BASE_TRAINING_EFFICIENCY_PCT,
    BASE_TRAINING_ROSTER_SLOTS,
    MAX_BONUS_CELLS_PER_DAY,
    MAX_EFFICIENCY_PCT,
)

_WHITESPACE = re.compile(r"\s+")


# ============================================================================
# ENUMERATIONS
# ============================================================================


class GameMode(str, Enum):
    """Active step-conversion mode. Exactly one is active per player."""

    DISCOVERY = "discovery"  # steps -> cells
    TRAINING = "training"  # steps -> experience


class RarityTier(str, Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


# (low, high) percentage roll used when a glass is applied to a stepling.
ADVANCEMENT_RANGES: Dict[RarityTier, Tuple[int, int]] = {
    RarityTier.COMMON: (100, 100),
    RarityTier.UNCOMMON: (99, 100),
    RarityTier.RARE: (98, 100),
    RarityTier.EPIC: (97, 100),
    RarityTier.LEGENDARY: (96, 100),
}


# ============================================================================
# STEPS & RESOURCES
# ============================================================================


@dataclass(frozen=True)
class StepTotals:
    """
    Lifetime and in-mode step counters.

    Attributes
    ----------
    total_steps : int
        Lifetime steps, never decreases
    steps_in_current_mode : int
        Cumulative steps since the last mode switch
    total_steps_in_discovery / total_steps_in_training : int
        Lifetime steps attributed to each mode; they sum to total_steps
    unconverted_steps : int
        In-mode steps not yet paid out as a cell or an XP point
    """

    total_steps: int = 0
    steps_in_current_mode: int = 0
    total_steps_in_discovery: int = 0
    total_steps_in_training: int = 0
    unconverted_steps: int = 0

    def __post_init__(self) -> None:
        validate_non_negative(self.total_steps, "total_steps")
        validate_non_negative(self.steps_in_current_mode, "steps_in_current_mode")
        validate_non_negative(self.total_steps_in_discovery, "total_steps_in_discovery")
        validate_non_negative(self.total_steps_in_training, "total_steps_in_training")
        validate_non_negative(self.unconverted_steps, "unconverted_steps")
        if self.total_steps_in_discovery + self.total_steps_in_training != self.total_steps:
            raise DomainValidationError(
                "per-mode step totals must add up to total_steps",
                field="total_steps",
            )
        if self.unconverted_steps > self.steps_in_current_mode:
            raise DomainValidationError(
                "unconverted steps cannot exceed steps in the current mode",
                field="unconverted_steps",
            )

    def steps_in_mode(self, mode: GameMode) -> int:
        """Lifetime steps attributed to a mode."""
        if mode is GameMode.DISCOVERY:
            return self.total_steps_in_discovery
        return self.total_steps_in_training

    def advance(self, delta: int, mode: GameMode, unconverted_steps: int = 0) -> StepTotals:
        """Return totals with `delta` new steps walked in `mode`."""
        validate_non_negative(delta, "delta")
        return StepTotals(
            total_steps=self.total_steps + delta,
            steps_in_current_mode=self.steps_in_current_mode + delta,
            total_steps_in_discovery=self.total_steps_in_discovery
            + (delta if mode is GameMode.DISCOVERY else 0),
            total_steps_in_training=self.total_steps_in_training
            + (delta if mode is GameMode.TRAINING else 0),
            unconverted_steps=unconverted_steps,
        )

    def reset_mode_counter(self) -> StepTotals:
        return replace(self, steps_in_current_mode=0, unconverted_steps=0)


@dataclass(frozen=True)
class Resources:
    """Cells and experience points. Combine with `+`."""

    cells: int = 0
    experience_points: int = 0

    def __post_init__(self) -> None:
        validate_non_negative(self.cells, "cells")
        validate_non_negative(self.experience_points, "experience_points")

    def __add__(self, other: object) -> Resources:
        if not isinstance(other, Resources):
            return NotImplemented
        return Resources(
            cells=self.cells + other.cells,
            experience_points=self.experience_points + other.experience_points,
        )

    @property
    def is_empty(self) -> bool:
        return self.cells == 0 and self.experience_points == 0


@dataclass(frozen=True)
class ConversionRates:
    """Effective steps needed per cell (discovery) and per XP (training)."""

    steps_per_cell: int
    steps_per_xp: int

    def __post_init__(self) -> None:
        validate_positive(self.steps_per_cell, "steps_per_cell")
        validate_positive(self.steps_per_xp, "steps_per_xp")

    def for_mode(self, mode: GameMode) -> int:
        if mode is GameMode.DISCOVERY:
            return self.steps_per_cell
        return self.steps_per_xp


# ============================================================================
# MILESTONES & MAGNIFYING GLASSES
# ============================================================================


@dataclass(frozen=True)
class Milestone:
    """
    A lifetime-step threshold that grants one magnifying glass when claimed.

    `reached` is set when total steps first cross the threshold;
    `reward_claimed` is set once by a claim and never unset.
    """

    threshold_steps: int
    rarity_tier: RarityTier
    name: str
    reached: bool = False
    reward_claimed: bool = False

    def __post_init__(self) -> None:
        validate_positive(self.threshold_steps, "threshold_steps")
        validate_not_empty(self.name, "name")
        if self.reward_claimed and not self.reached:
            raise DomainValidationError(
                "a claimed milestone must be reached", field="reward_claimed"
            )

    @property
    def is_claimable(self) -> bool:
        return self.reached and not self.reward_claimed

    def mark_reached(self) -> Milestone:
        return replace(self, reached=True)

    def mark_claimed(self) -> Milestone:
        return replace(self, reached=True, reward_claimed=True)


@dataclass(frozen=True)
class MagnifyingGlass:
    """Collectible reward item keyed by rarity tier."""

    tier: RarityTier
    advancement_range: Tuple[int, int]

    def __post_init__(self) -> None:
        low, high = self.advancement_range
        validate_range(low, 0, 100, "advancement_range.low")
        validate_range(high, low, 100, "advancement_range.high")

    @classmethod
    def for_tier(cls, tier: RarityTier) -> MagnifyingGlass:
        return cls(tier=tier, advancement_range=ADVANCEMENT_RANGES[tier])


# ============================================================================
# ACHIEVEMENTS
# ============================================================================


@dataclass(frozen=True)
class AchievementTier:
    """
    A named lifetime-step tier and the bonus fields it sets.

    Only the fields a tier names are set; None means "inherit from the
    previous tier". `unbounded_experience_bank` removes the XP bank cap.
    """

    threshold_steps: int
    name: str
    bonus_cells_per_day: Optional[int] = None
    discovery_efficiency_pct: Optional[int] = None
    training_efficiency_pct: Optional[int] = None
    click_power_multiplier: Optional[int] = None
    experience_bank_cap: Optional[int] = None
    training_roster_slots: Optional[int] = None
    release_xp_bonus_pct: Optional[int] = None
    unbounded_experience_bank: bool = False

    def __post_init__(self) -> None:
        validate_non_negative(self.threshold_steps, "threshold_steps")
        validate_not_empty(self.name, "name")
        if self.unbounded_experience_bank and self.experience_bank_cap is not None:
            raise DomainValidationError(
                "tier cannot set both a bank cap and an unbounded bank",
                field="experience_bank_cap",
            )

    @property
    def achievement_id(self) -> str:
        """Stable id, e.g. "100000_Dedicated_Walker"."""
        slug = _WHITESPACE.sub("_", self.name)
        return f"{self.threshold_steps}_{slug}"


@dataclass(frozen=True)
class LifetimeAchievement:
    """
    Lifetime bonus bundle derived from total steps.

    Attributes
    ----------
    experience_bank_cap : Optional[int]
        None means unbounded
    unlocked_achievement_ids : FrozenSet[str]
        Ids of every named tier reached
    last_daily_bonus_claim_at : Optional[datetime]
        The only field not derived from total steps
    """

    bonus_cells_per_day: int = BASE_BONUS_CELLS_PER_DAY
    discovery_efficiency_pct: int = BASE_DISCOVERY_EFFICIENCY_PCT
    training_efficiency_pct: int = BASE_TRAINING_EFFICIENCY_PCT
    click_power_multiplier: int = BASE_CLICK_POWER
    experience_bank_cap: Optional[int] = BASE_EXPERIENCE_BANK_CAP
    training_roster_slots: int = BASE_TRAINING_ROSTER_SLOTS
    release_xp_bonus_pct: int = BASE_RELEASE_XP_BONUS_PCT
    unlocked_achievement_ids: FrozenSet[str] = field(default_factory=frozenset)
    last_daily_bonus_claim_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_range(self.bonus_cells_per_day, 0, MAX_BONUS_CELLS_PER_DAY, "bonus_cells_per_day")
        validate_range(self.discovery_efficiency_pct, 0, MAX_EFFICIENCY_PCT, "discovery_efficiency_pct")
        validate_range(self.training_efficiency_pct, 0, MAX_EFFICIENCY_PCT, "training_efficiency_pct")
        validate_positive(self.click_power_multiplier, "click_power_multiplier")
        if self.experience_bank_cap is not None:
            validate_positive(self.experience_bank_cap, "experience_bank_cap")
        validate_positive(self.training_roster_slots, "training_roster_slots")
        validate_non_negative(self.release_xp_bonus_pct, "release_xp_bonus_pct")
        if not isinstance(self.unlocked_achievement_ids, frozenset):
            object.__setattr__(
                self, "unlocked_achievement_ids", frozenset(self.unlocked_achievement_ids)
            )

    @property
    def has_unbounded_experience_bank(self) -> bool:
        return self.experience_bank_cap is None

    def efficiency_for(self, mode: GameMode) -> int:
        if mode is GameMode.DISCOVERY:
            return self.discovery_efficiency_pct
        return self.training_efficiency_pct

    def with_daily_bonus_claimed(self, claimed_at: datetime) -> LifetimeAchievement:
        return replace(self, last_daily_bonus_claim_at=claimed_at)


# ============================================================================
# STEP SYNC RESULT
# ============================================================================


@dataclass(frozen=True)
class StepSyncResult:
    """Outcome of applying one step-counter reading to a player."""

    steps_added: int
    resources_gained: Resources
    milestones_reached: Tuple[Milestone, ...] = ()
    achievements_unlocked: Tuple[AchievementTier, ...] = ()

    @property
    def changed(self) -> bool:
        return self.steps_added > 0
