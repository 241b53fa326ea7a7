"""
Player Domain Model for Step Scientists.

Purpose
-------
Rich domain model representing a player's step progression: lifetime and
in-mode step counters, the active game mode, earned resources, milestone
claim state, the magnifying-glass inventory and the cached lifetime bonus
bundle.

This is separate from the database models (PlayerProgress,
LifetimeAchievementRow), which are anemic schemas. The service layer
converts between them with `from_db()` / `to_db_updates()`.

Responsibilities
----------------
- Apply step-counter readings without losing fractional steps
- Enforce mode-switch, milestone-claim and daily-bonus rules
- Keep the lifetime bonus cache consistent with total steps
- Emit domain events for important changes

Non-Responsibilities
--------------------
- Persistence and row locking (handled by ProgressionService)
- Conversion arithmetic (handled by the progression calculator)

Usage Example
-------------
>>> player = Player.new("p-1")
>>> result = player.record_steps(5_200)
>>> result.resources_gained
Resources(cells=5, experience_points=0)
>>> glass = player.claim_milestone_reward(5_000)
>>> glass.tier
<RarityTier.UNCOMMON: 'UNCOMMON'>
>>> events = player.clear_domain_events()
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone, tzinfo
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from stepscientists.domain.models.base import AggregateRoot
from stepscientists.domain.models.progression import (
    AchievementTier,
    ConversionRates,
    GameMode,
    LifetimeAchievement,
    MagnifyingGlass,
    Milestone,
    RarityTier,
    Resources,
    StepSyncResult,
    StepTotals,
)
from stepscientists.modules.progression import calculator
from stepscientists.modules.progression.catalog import MILESTONES
from stepscientists.modules.shared.exceptions import (
    MilestoneAlreadyClaimedError,
    MilestoneNotReachedError,
    NotFoundError,
)
from stepscientists.modules.shared.validators import validate_step_count

if TYPE_CHECKING:
    from stepscientists.database.models.lifetime_achievement import LifetimeAchievementRow
    from stepscientists.database.models.player_progress import PlayerProgress


def _as_utc(moment: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything is stored in UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


# ============================================================================
# PLAYER AGGREGATE ROOT
# ============================================================================


class Player(AggregateRoot):
    """
    Player aggregate root for step progression.

    Business Rules
    --------------
    - total_steps never decreases; per-mode totals always sum to it
    - A step reading at or below the current in-mode count is ignored
    - Switching to a different mode resets steps_in_current_mode only
    - A milestone reward is granted once, after its threshold is reached
    - The daily bonus can be claimed once per calendar day

    Domain Events
    -------------
    - player.steps_recorded
    - player.mode_switched
    - player.milestone_reached
    - player.milestone_claimed
    - player.achievement_unlocked
    - player.daily_bonus_claimed
    - player.magnifying_glass_used
    """

    def __init__(
        self,
        player_id: str,
        steps: Optional[StepTotals] = None,
        mode: GameMode = GameMode.DISCOVERY,
        resources: Optional[Resources] = None,
        milestones: Optional[Iterable[Milestone]] = None,
        magnifying_glasses: Optional[Iterable[MagnifyingGlass]] = None,
        achievement: Optional[LifetimeAchievement] = None,
    ) -> None:
        super().__init__(player_id)

        self._steps = steps or StepTotals()
        self._mode = mode
        self._resources = resources or Resources()

        if milestones is None:
            milestones = (
                m.mark_reached() if self._steps.total_steps >= m.threshold_steps else m
                for m in MILESTONES
            )
        self._milestones: Dict[int, Milestone] = {
            m.threshold_steps: m
            for m in sorted(milestones, key=lambda m: m.threshold_steps)
        }
        self._glasses: List[MagnifyingGlass] = list(magnifying_glasses or [])
        self._achievement = achievement or calculator.calculate_lifetime_bonuses(
            self._steps.total_steps
        )

    @classmethod
    def new(cls, player_id: str) -> Player:
        """Fresh player at signup: zero steps, discovery mode."""
        return cls(player_id)

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def steps(self) -> StepTotals:
        return self._steps

    @property
    def total_steps(self) -> int:
        return self._steps.total_steps

    @property
    def mode(self) -> GameMode:
        return self._mode

    @property
    def resources(self) -> Resources:
        return self._resources

    @property
    def achievement(self) -> LifetimeAchievement:
        return self._achievement

    @property
    def milestones(self) -> Tuple[Milestone, ...]:
        return tuple(self._milestones.values())

    @property
    def magnifying_glasses(self) -> Tuple[MagnifyingGlass, ...]:
        return tuple(self._glasses)

    @property
    def conversion_rates(self) -> ConversionRates:
        return calculator.get_conversion_rates(self._achievement)

    @property
    def next_milestone(self) -> Optional[Milestone]:
        """The next milestone, carrying this player's reached/claimed flags."""
        return calculator.get_next_milestone(self.total_steps, self.milestones)

    @property
    def milestone_progress(self) -> int:
        return calculator.get_milestone_progress(self.total_steps, milestones=self.milestones)

    @property
    def next_achievement(self) -> AchievementTier:
        return calculator.get_next_achievement(self.total_steps)

    @property
    def achievement_progress(self) -> int:
        return calculator.get_achievement_progress(self.total_steps)

    def claimable_milestones(self) -> Tuple[Milestone, ...]:
        return tuple(m for m in self._milestones.values() if m.is_claimable)

    # ========================================================================
    # BUSINESS LOGIC - STEPS
    # ========================================================================

    def record_steps(self, steps_in_mode: int) -> StepSyncResult:
        """
        Apply a cumulative in-mode reading from the step counter.

        Parameters
        ----------
        steps_in_mode : int
            Steps walked since the last mode switch, as reported by the device

        Returns
        -------
        StepSyncResult
            Steps added, resources gained, milestones reached and
            achievements unlocked by this reading

        Raises
        ------
        InvalidStepCountError
            If steps_in_mode is negative or not an integer

        Business Rules
        --------------
        - Readings at or below the current in-mode count change nothing
        - Resources use the bonuses in effect before the reading
        - Steps short of a whole unit carry over to the next reading
        """
        validate_step_count(steps_in_mode, "steps_in_mode")

        previous = self._steps.steps_in_current_mode
        if steps_in_mode <= previous:
            return StepSyncResult(steps_added=0, resources_gained=Resources())

        delta = steps_in_mode - previous
        gained, unconverted = calculator.compute_cumulative_gain(
            self._steps.unconverted_steps, delta, self._mode, self._achievement
        )

        self._steps = self._steps.advance(delta, self._mode, unconverted)
        self._resources = self._resources + gained

        self.add_domain_event(
            "player.steps_recorded",
            {
                "player_id": self.id,
                "mode": self._mode.value,
                "steps_added": delta,
                "total_steps": self._steps.total_steps,
                "cells_gained": gained.cells,
                "experience_gained": gained.experience_points,
            },
        )

        reached = self._mark_reached_milestones()
        unlocked = self.refresh_achievements()

        return StepSyncResult(
            steps_added=delta,
            resources_gained=gained,
            milestones_reached=tuple(reached),
            achievements_unlocked=tuple(unlocked),
        )

    def add_steps(self, steps_increment: int) -> StepSyncResult:
        """Apply `steps_increment` new steps in the current mode."""
        validate_step_count(steps_increment, "steps_increment")
        return self.record_steps(self._steps.steps_in_current_mode + steps_increment)

    def _mark_reached_milestones(self) -> List[Milestone]:
        reached: List[Milestone] = []
        for threshold, milestone in self._milestones.items():
            if milestone.reached or self.total_steps < threshold:
                continue
            updated = milestone.mark_reached()
            self._milestones[threshold] = updated
            reached.append(updated)
            self.add_domain_event(
                "player.milestone_reached",
                {
                    "player_id": self.id,
                    "threshold_steps": threshold,
                    "tier": updated.rarity_tier.value,
                },
            )
        return reached

    # ========================================================================
    # BUSINESS LOGIC - MODE
    # ========================================================================

    def switch_mode(self, new_mode: GameMode) -> bool:
        """
        Make `new_mode` the active mode.

        Returns False (no-op) if it already is. Otherwise resets
        steps_in_current_mode and the unconverted remainder; totals and
        resources are untouched.
        """
        new_mode = GameMode(new_mode)
        if new_mode is self._mode:
            return False

        old_mode = self._mode
        self._mode = new_mode
        self._steps = self._steps.reset_mode_counter()

        self.add_domain_event(
            "player.mode_switched",
            {
                "player_id": self.id,
                "old_mode": old_mode.value,
                "new_mode": new_mode.value,
            },
        )
        return True

    # ========================================================================
    # BUSINESS LOGIC - MILESTONES & GLASSES
    # ========================================================================

    def claim_milestone_reward(self, threshold_steps: int) -> MagnifyingGlass:
        """
        Claim the magnifying glass for a milestone.

        Raises
        ------
        NotFoundError
            If no milestone has this threshold
        MilestoneAlreadyClaimedError
            If the reward was already claimed (inventory unchanged)
        MilestoneNotReachedError
            If total steps are below the threshold
        """
        milestone = self._milestones.get(threshold_steps)
        if milestone is None:
            raise NotFoundError("Milestone", threshold_steps)
        if milestone.reward_claimed:
            raise MilestoneAlreadyClaimedError(threshold_steps)
        if self.total_steps < threshold_steps:
            raise MilestoneNotReachedError(threshold_steps, self.total_steps)

        self._milestones[threshold_steps] = milestone.mark_claimed()
        glass = MagnifyingGlass.for_tier(milestone.rarity_tier)
        self._glasses.append(glass)

        self.add_domain_event(
            "player.milestone_claimed",
            {
                "player_id": self.id,
                "threshold_steps": threshold_steps,
                "tier": glass.tier.value,
                "inventory_size": len(self._glasses),
            },
        )
        return glass

    def use_magnifying_glass(self, tier: RarityTier) -> MagnifyingGlass:
        """
        Remove one glass of `tier` from the inventory and return it.

        Raises
        ------
        NotFoundError
            If the player holds no glass of that tier
        """
        tier = RarityTier(tier)
        for index, glass in enumerate(self._glasses):
            if glass.tier is tier:
                del self._glasses[index]
                self.add_domain_event(
                    "player.magnifying_glass_used",
                    {
                        "player_id": self.id,
                        "tier": tier.value,
                        "remaining_of_tier": sum(1 for g in self._glasses if g.tier is tier),
                    },
                )
                return glass
        raise NotFoundError("MagnifyingGlass", tier.value)

    # ========================================================================
    # BUSINESS LOGIC - ACHIEVEMENTS & DAILY BONUS
    # ========================================================================

    def refresh_achievements(self) -> List[AchievementTier]:
        """
        Recompute the bonus cache from total steps.

        Returns the named tiers unlocked since the last refresh. The daily
        bonus claim timestamp is carried over.
        """
        newly_unlocked = calculator.find_newly_unlocked(
            self.total_steps, self._achievement.unlocked_achievement_ids
        )
        computed = calculator.calculate_lifetime_bonuses(self.total_steps)
        self._achievement = replace(
            computed,
            last_daily_bonus_claim_at=self._achievement.last_daily_bonus_claim_at,
        )

        for tier in newly_unlocked:
            self.add_domain_event(
                "player.achievement_unlocked",
                {
                    "player_id": self.id,
                    "achievement_id": tier.achievement_id,
                    "threshold_steps": tier.threshold_steps,
                },
            )
        return newly_unlocked

    def can_claim_daily_bonus(self, now: datetime, tz: tzinfo = timezone.utc) -> bool:
        """False if a claim already happened on `now`'s calendar day in `tz` (or later)."""
        last = self._achievement.last_daily_bonus_claim_at
        if last is None:
            return True
        return _as_utc(now).astimezone(tz).date() > _as_utc(last).astimezone(tz).date()

    def claim_daily_bonus(self, now: datetime, tz: tzinfo = timezone.utc) -> int:
        """
        Grant today's bonus cells.

        Parameters
        ----------
        now : datetime
            Claim time (naive values are taken as UTC)
        tz : tzinfo
            Zone whose calendar day bounds a claim

        Returns
        -------
        int
            Cells granted; 0 if already claimed on the same calendar day
        """
        now = _as_utc(now)
        if not self.can_claim_daily_bonus(now, tz):
            return 0

        cells = self._achievement.bonus_cells_per_day
        self._resources = self._resources + Resources(cells=cells)
        self._achievement = self._achievement.with_daily_bonus_claimed(now)

        self.add_domain_event(
            "player.daily_bonus_claimed",
            {
                "player_id": self.id,
                "cells": cells,
                "claimed_at": now.isoformat(),
            },
        )
        return cells

    # ========================================================================
    # FACTORY METHODS (CONVERT FROM DATABASE MODELS)
    # ========================================================================

    @classmethod
    def from_db(
        cls,
        progress: PlayerProgress,
        achievement_row: Optional[LifetimeAchievementRow] = None,
    ) -> Player:
        """
        Create a Player domain model from database rows.

        Bonus fields are recomputed from total steps; only the unlocked ids
        and the last daily claim are taken from the achievement row.
        """
        steps = StepTotals(
            total_steps=progress.total_steps,
            steps_in_current_mode=progress.steps_in_current_mode,
            total_steps_in_discovery=progress.total_steps_in_discovery,
            total_steps_in_training=progress.total_steps_in_training,
            unconverted_steps=progress.unconverted_steps,
        )

        states = progress.milestone_states or {}
        milestones = []
        for milestone in MILESTONES:
            state = states.get(str(milestone.threshold_steps), {})
            milestones.append(
                replace(
                    milestone,
                    reached=bool(state.get("reached", False)),
                    reward_claimed=bool(state.get("reward_claimed", False)),
                )
            )

        glasses = [
            MagnifyingGlass.for_tier(RarityTier(tier))
            for tier in (progress.magnifying_glasses or [])
        ]

        achievement = calculator.calculate_lifetime_bonuses(steps.total_steps)
        if achievement_row is not None:
            last_claim = achievement_row.last_daily_bonus_claim
            achievement = replace(
                achievement,
                unlocked_achievement_ids=frozenset(achievement_row.unlocked_achievements or []),
                last_daily_bonus_claim_at=_as_utc(last_claim) if last_claim else None,
            )

        return cls(
            player_id=progress.player_id,
            steps=steps,
            mode=GameMode(progress.current_mode),
            resources=Resources(
                cells=progress.cells,
                experience_points=progress.experience_points,
            ),
            milestones=milestones,
            magnifying_glasses=glasses,
            achievement=achievement,
        )

    # ========================================================================
    # CONVERSION TO DATABASE MODELS
    # ========================================================================

    def to_db_updates(self) -> dict:
        """
        Convert domain state to database update dicts.

        Examples
        --------
        >>> updates = player.to_db_updates()
        >>> for key, value in updates["progress"].items():
        ...     setattr(progress_row, key, value)
        """
        achievement = self._achievement
        return {
            "progress": {
                "current_mode": self._mode.value,
                "total_steps": self._steps.total_steps,
                "steps_in_current_mode": self._steps.steps_in_current_mode,
                "total_steps_in_discovery": self._steps.total_steps_in_discovery,
                "total_steps_in_training": self._steps.total_steps_in_training,
                "unconverted_steps": self._steps.unconverted_steps,
                "cells": self._resources.cells,
                "experience_points": self._resources.experience_points,
                "milestone_states": {
                    str(m.threshold_steps): {
                        "reached": m.reached,
                        "reward_claimed": m.reward_claimed,
                    }
                    for m in self._milestones.values()
                },
                "magnifying_glasses": [g.tier.value for g in self._glasses],
            },
            "achievements": {
                "bonus_cells_per_day": achievement.bonus_cells_per_day,
                "discovery_efficiency": achievement.discovery_efficiency_pct,
                "training_efficiency": achievement.training_efficiency_pct,
                "click_power": achievement.click_power_multiplier,
                "experience_bank_cap": achievement.experience_bank_cap,
                "training_roster_slots": achievement.training_roster_slots,
                "release_xp_bonus": achievement.release_xp_bonus_pct,
                "unlocked_achievements": sorted(achievement.unlocked_achievement_ids),
                "last_daily_bonus_claim": achievement.last_daily_bonus_claim_at,
            },
        }
