"""
Unit Tests for the Progression Calculator
==========================================

Purpose
-------
Pin down the conversion, lifetime bonus and progress rules that every step
sync depends on.

Test Coverage
-------------
- Lifetime bonus bundles at named tiers and in infinite progression
- Conversion rates and resource gain per mode
- Remainder-preserving cumulative gain
- Next milestone / milestone progress
- Next achievement / achievement progress
- Invalid step counts

Testing Strategy
----------------
- Pure functions, no fixtures needed beyond literals
- AAA pattern (Arrange, Act, Assert)
"""

import pytest

from stepscientists.domain.models.progression import GameMode, LifetimeAchievement, Resources
from stepscientists.modules.progression import (
    ACHIEVEMENT_TIERS,
    MILESTONES,
    calculate_lifetime_bonuses,
    compute_cumulative_gain,
    compute_resource_gain,
    find_newly_unlocked,
    get_achievement_progress,
    get_conversion_rates,
    get_milestone_progress,
    get_next_achievement,
    get_next_milestone,
)
from stepscientists.modules.shared.exceptions import InvalidStepCountError


# ============================================================================
# LIFETIME BONUSES
# ============================================================================


@pytest.mark.unit
class TestLifetimeBonuses:
    """Test calculate_lifetime_bonuses across tiers."""

    def test_zero_steps_is_baseline(self):
        """No steps yields the baseline bundle and no unlocked tiers."""
        # Act
        bonuses = calculate_lifetime_bonuses(0)

        # Assert
        assert bonuses == LifetimeAchievement()
        assert bonuses.bonus_cells_per_day == 0
        assert bonuses.discovery_efficiency_pct == 0
        assert bonuses.training_efficiency_pct == 0
        assert bonuses.click_power_multiplier == 1
        assert bonuses.experience_bank_cap == 100
        assert bonuses.training_roster_slots == 10
        assert bonuses.release_xp_bonus_pct == 0
        assert bonuses.unlocked_achievement_ids == frozenset()

    def test_first_steps_only_raises_experience_bank(self):
        """10,000 steps unlocks First Steps: bank 150, everything else baseline."""
        # Act
        bonuses = calculate_lifetime_bonuses(10_000)

        # Assert
        assert bonuses.experience_bank_cap == 150
        assert bonuses.bonus_cells_per_day == 0
        assert bonuses.discovery_efficiency_pct == 0
        assert bonuses.click_power_multiplier == 1
        assert bonuses.unlocked_achievement_ids == frozenset({"10000_First_Steps"})

    def test_one_step_below_tier_keeps_previous_tier(self):
        """9,999 steps has not yet unlocked First Steps."""
        assert calculate_lifetime_bonuses(9_999).experience_bank_cap == 100

    def test_dedicated_walker_bundle(self):
        """100,000 steps: 1 bonus cell, 2% discovery efficiency, bank 300."""
        # Act
        bonuses = calculate_lifetime_bonuses(100_000)

        # Assert
        assert bonuses.bonus_cells_per_day == 1
        assert bonuses.discovery_efficiency_pct == 2
        assert bonuses.training_efficiency_pct == 0
        assert bonuses.experience_bank_cap == 300
        assert bonuses.click_power_multiplier == 1
        assert len(bonuses.unlocked_achievement_ids) == 3

    def test_ultimate_tier_removes_experience_bank_cap(self):
        """3,500,000 steps reaches the final named tier with an unbounded bank."""
        # Act
        bonuses = calculate_lifetime_bonuses(3_500_000)

        # Assert
        assert bonuses.bonus_cells_per_day == 5
        assert bonuses.discovery_efficiency_pct == 20
        assert bonuses.training_efficiency_pct == 20
        assert bonuses.click_power_multiplier == 7
        assert bonuses.training_roster_slots == 16
        assert bonuses.release_xp_bonus_pct == 50
        assert bonuses.experience_bank_cap is None
        assert bonuses.has_unbounded_experience_bank
        assert len(bonuses.unlocked_achievement_ids) == len(ACHIEVEMENT_TIERS)

    def test_infinite_progression_adds_per_interval(self):
        """6,500,000 steps is 5 intervals past 3.5M: +5 cells, +10% efficiency."""
        # Act
        bonuses = calculate_lifetime_bonuses(6_500_000)

        # Assert
        assert bonuses.bonus_cells_per_day == 10
        assert bonuses.discovery_efficiency_pct == 30
        assert bonuses.training_efficiency_pct == 30

    def test_infinite_progression_respects_caps(self):
        """10,000,000 steps: cells hit the 15 cap, efficiency still climbing."""
        # Act
        bonuses = calculate_lifetime_bonuses(10_000_000)

        # Assert
        assert bonuses.bonus_cells_per_day == 15
        assert bonuses.discovery_efficiency_pct == 40
        assert bonuses.training_efficiency_pct == 40

    def test_efficiency_never_exceeds_fifty_percent(self):
        """Far into infinite progression both efficiencies stop at 50%."""
        # Act
        bonuses = calculate_lifetime_bonuses(50_000_000)

        # Assert
        assert bonuses.bonus_cells_per_day == 15
        assert bonuses.discovery_efficiency_pct == 50
        assert bonuses.training_efficiency_pct == 50

    def test_partial_interval_adds_nothing(self):
        """599,999 steps past 3.5M is not yet a full interval."""
        assert calculate_lifetime_bonuses(4_099_999) == calculate_lifetime_bonuses(3_500_000)

    @pytest.mark.parametrize("field", ["bonus_cells_per_day", "discovery_efficiency_pct"])
    def test_bonuses_never_decrease_with_more_steps(self, field):
        """Bonus fields are monotonic in lifetime steps."""
        # Arrange
        checkpoints = sorted(
            {0, 9_999, 20_000, 4_100_000, 8_000_000, 12_000_000}
            | {t.threshold_steps for t in ACHIEVEMENT_TIERS}
            | {t.threshold_steps - 1 for t in ACHIEVEMENT_TIERS}
        )

        # Act
        values = [getattr(calculate_lifetime_bonuses(s), field) for s in checkpoints]

        # Assert
        assert values == sorted(values)

    @pytest.mark.parametrize("bad_value", [-1, 1.5, True, "100", None])
    def test_rejects_invalid_step_counts(self, bad_value):
        """Negative, fractional, boolean and non-numeric totals are rejected."""
        with pytest.raises(InvalidStepCountError) as exc_info:
            calculate_lifetime_bonuses(bad_value)

        assert exc_info.value.error_code == "INVALID_STEP_COUNT"

    def test_find_newly_unlocked_skips_known_ids(self):
        """Only tiers reached and not already recorded are reported."""
        # Act
        tiers = find_newly_unlocked(100_000, {"10000_First_Steps"})

        # Assert
        assert [t.threshold_steps for t in tiers] == [50_000, 100_000]


# ============================================================================
# CONVERSION
# ============================================================================


@pytest.mark.unit
class TestConversion:
    """Test conversion rates and resource gain."""

    @pytest.mark.parametrize(
        "bonuses, expected_cell_rate, expected_xp_rate",
        [
            (LifetimeAchievement(), 1000, 10),
            (LifetimeAchievement(discovery_efficiency_pct=2), 980, 10),
            (LifetimeAchievement(training_efficiency_pct=5), 1000, 9),
            (LifetimeAchievement(training_efficiency_pct=20), 1000, 8),
            (LifetimeAchievement(discovery_efficiency_pct=50, training_efficiency_pct=50), 500, 5),
        ],
    )
    def test_conversion_rates(self, bonuses, expected_cell_rate, expected_xp_rate):
        """Efficiency reduces steps per unit with a floor."""
        # Act
        rates = get_conversion_rates(bonuses)

        # Assert
        assert rates.steps_per_cell == expected_cell_rate
        assert rates.steps_per_xp == expected_xp_rate

    def test_baseline_discovery_gain(self):
        """1,000 discovery steps at baseline earn exactly one cell."""
        # Act
        gained = compute_resource_gain(1_000, GameMode.DISCOVERY, LifetimeAchievement())

        # Assert
        assert gained == Resources(cells=1, experience_points=0)

    @pytest.mark.parametrize("steps, expected_cells", [(799, 0), (1_000, 1), (1_600, 2)])
    def test_discovery_gain_with_efficiency(self, steps, expected_cells):
        """At 20% efficiency a cell costs 800 steps."""
        # Arrange
        bonuses = LifetimeAchievement(discovery_efficiency_pct=20)

        # Act
        gained = compute_resource_gain(steps, GameMode.DISCOVERY, bonuses)

        # Assert
        assert gained.cells == expected_cells
        assert gained.experience_points == 0

    def test_training_gain_yields_experience_only(self):
        """Training mode converts steps to XP, never cells."""
        # Act
        gained = compute_resource_gain(25, GameMode.TRAINING, LifetimeAchievement())

        # Assert
        assert gained == Resources(cells=0, experience_points=2)

    def test_zero_steps_gain_nothing(self):
        """A zero increment is valid and earns nothing."""
        assert compute_resource_gain(0, GameMode.DISCOVERY, LifetimeAchievement()).is_empty

    def test_negative_increment_rejected(self):
        """Negative increments raise InvalidStepCountError."""
        with pytest.raises(InvalidStepCountError):
            compute_resource_gain(-1, GameMode.DISCOVERY, LifetimeAchievement())

    def test_cumulative_gain_keeps_remainders(self):
        """Four 400-step syncs at 800 steps/cell earn the same as one 1,600-step sync."""
        # Arrange
        bonuses = LifetimeAchievement(discovery_efficiency_pct=20)
        unconverted = 0

        # Act
        total = Resources()
        for _ in range(4):
            gained, unconverted = compute_cumulative_gain(
                unconverted, 400, GameMode.DISCOVERY, bonuses
            )
            total = total + gained

        # Assert
        assert total.cells == 2
        assert unconverted == 0
        assert total == compute_resource_gain(1_600, GameMode.DISCOVERY, bonuses)

    def test_carried_steps_paid_at_new_rate(self):
        """Steps carried from a slower tier count toward the next unit at the faster rate."""
        # Arrange
        before = calculate_lifetime_bonuses(99_999)
        after = calculate_lifetime_bonuses(100_000)

        # Act
        first, unconverted = compute_cumulative_gain(0, 999, GameMode.DISCOVERY, before)
        second, unconverted = compute_cumulative_gain(unconverted, 1, GameMode.DISCOVERY, after)

        # Assert
        assert first.is_empty
        assert second.cells == 1
        assert unconverted == 1_000 - 980

    def test_cumulative_gain_zero_increment_keeps_remainder(self):
        """No new steps earns nothing and leaves the remainder alone."""
        gained, unconverted = compute_cumulative_gain(
            500, 0, GameMode.DISCOVERY, LifetimeAchievement()
        )

        assert gained.is_empty
        assert unconverted == 500


# ============================================================================
# MILESTONES
# ============================================================================


@pytest.mark.unit
class TestMilestones:
    """Test next milestone lookup and milestone progress."""

    def test_next_milestone_from_zero(self):
        """A new player works toward the 5,000-step milestone."""
        # Act
        milestone = get_next_milestone(0)

        # Assert
        assert milestone is not None
        assert milestone.threshold_steps == 5_000

    def test_next_milestone_skips_reached_thresholds(self):
        """Exactly on a threshold, the next milestone is the following one."""
        assert get_next_milestone(5_000).threshold_steps == 10_000

    def test_no_next_milestone_after_last(self):
        """Past the last threshold there is no next milestone."""
        assert get_next_milestone(MILESTONES[-1].threshold_steps) is None

    @pytest.mark.parametrize(
        "total_steps, expected",
        [(0, 0), (1_250, 25), (2_500, 50), (4_974, 99), (4_999, 99)],
    )
    def test_progress_toward_first_milestone(self, total_steps, expected):
        """Progress rounds half up but never shows 100 before the threshold."""
        assert get_milestone_progress(total_steps) == expected

    def test_progress_is_100_at_threshold(self):
        """Targeting a milestone exactly at its threshold reports 100."""
        assert get_milestone_progress(5_000, milestone=MILESTONES[0]) == 100

    def test_progress_is_100_with_no_next_milestone(self):
        """After the last milestone progress stays at 100."""
        assert get_milestone_progress(250_000) == 100

    def test_progress_monotonic_toward_fixed_milestone(self):
        """Progress toward one milestone never decreases as steps grow."""
        # Arrange
        target = MILESTONES[1]

        # Act
        values = [
            get_milestone_progress(steps, milestone=target)
            for steps in range(0, 12_001, 250)
        ]

        # Assert
        assert values == sorted(values)
        assert values[-1] == 100


# ============================================================================
# ACHIEVEMENT PROGRESS
# ============================================================================


@pytest.mark.unit
class TestAchievementProgress:
    """Test next achievement lookup and progress between boundaries."""

    def test_next_achievement_named_tier(self):
        """Below 3.5M the next target is the next named tier."""
        # Act
        tier = get_next_achievement(120_000)

        # Assert
        assert tier.name == "Consistent Mover"
        assert tier.threshold_steps == 200_000

    @pytest.mark.parametrize(
        "total_steps, expected_threshold",
        [(3_500_000, 4_100_000), (4_100_000, 4_700_000), (4_200_000, 4_700_000)],
    )
    def test_next_achievement_infinite(self, total_steps, expected_threshold):
        """At or above 3.5M the target is the next 600,000-step boundary."""
        # Act
        tier = get_next_achievement(total_steps)

        # Assert
        assert tier.name == "Infinite Progression"
        assert tier.threshold_steps == expected_threshold

    @pytest.mark.parametrize(
        "total_steps, expected",
        [(0, 0), (5_000, 50), (150_000, 50), (199_999, 99), (3_800_000, 50)],
    )
    def test_achievement_progress(self, total_steps, expected):
        """Floor percentage between previous and next boundary."""
        assert get_achievement_progress(total_steps) == expected
