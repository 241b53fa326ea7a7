"""
Unit tests for progression value objects.

Covers construction invariants and the small operations the aggregate
relies on.
"""

import pytest

from stepscientists.domain.models import (
    AchievementTier,
    ConversionRates,
    DomainValidationError,
    GameMode,
    LifetimeAchievement,
    MagnifyingGlass,
    Milestone,
    RarityTier,
    Resources,
    StepSyncResult,
    StepTotals,
)
from stepscientists.modules.progression.catalog import ACHIEVEMENT_TIERS


@pytest.mark.unit
@pytest.mark.domain
class TestStepTotals:
    """Test StepTotals invariants."""

    def test_per_mode_totals_must_sum(self):
        """Totals that do not add up are rejected."""
        with pytest.raises(DomainValidationError) as exc_info:
            StepTotals(total_steps=10, total_steps_in_discovery=4, total_steps_in_training=5)

        assert exc_info.value.field == "total_steps"

    def test_advance_attributes_steps_to_mode(self):
        """advance() adds to the lifetime, in-mode and per-mode counters."""
        # Arrange
        totals = StepTotals(total_steps=100, steps_in_current_mode=40, total_steps_in_discovery=100)

        # Act
        advanced = totals.advance(25, GameMode.TRAINING)

        # Assert
        assert advanced.total_steps == 125
        assert advanced.steps_in_current_mode == 65
        assert advanced.total_steps_in_training == 25
        assert advanced.steps_in_mode(GameMode.DISCOVERY) == 100

    def test_negative_counters_rejected(self):
        """Counters cannot be negative."""
        with pytest.raises(DomainValidationError):
            StepTotals(steps_in_current_mode=-1)

    def test_unconverted_steps_bounded_by_mode_counter(self):
        """The carried remainder never exceeds the in-mode steps."""
        with pytest.raises(DomainValidationError) as exc_info:
            StepTotals(
                total_steps=10,
                steps_in_current_mode=10,
                total_steps_in_discovery=10,
                unconverted_steps=11,
            )

        assert exc_info.value.field == "unconverted_steps"

    def test_reset_mode_counter_drops_remainder(self):
        totals = StepTotals(
            total_steps=700,
            steps_in_current_mode=700,
            total_steps_in_discovery=700,
            unconverted_steps=700,
        )

        reset = totals.reset_mode_counter()

        assert reset.steps_in_current_mode == 0
        assert reset.unconverted_steps == 0
        assert reset.total_steps == 700


@pytest.mark.unit
@pytest.mark.domain
class TestResourcesAndRates:
    """Test Resources and ConversionRates."""

    def test_resources_add(self):
        """Resources combine field by field."""
        total = Resources(cells=2) + Resources(cells=1, experience_points=7)
        assert total == Resources(cells=3, experience_points=7)

    def test_resources_reject_negative(self):
        """Negative resource amounts are invalid."""
        with pytest.raises(DomainValidationError):
            Resources(cells=-1)

    def test_rates_must_be_positive(self):
        """A conversion rate of zero would divide by zero."""
        with pytest.raises(DomainValidationError):
            ConversionRates(steps_per_cell=0, steps_per_xp=10)

    def test_rate_for_mode(self):
        rates = ConversionRates(steps_per_cell=800, steps_per_xp=8)
        assert rates.for_mode(GameMode.DISCOVERY) == 800
        assert rates.for_mode(GameMode.TRAINING) == 8


@pytest.mark.unit
@pytest.mark.domain
class TestMilestoneAndGlass:
    """Test Milestone and MagnifyingGlass."""

    def test_claimed_requires_reached(self):
        """A milestone cannot be claimed without being reached."""
        with pytest.raises(DomainValidationError):
            Milestone(5_000, RarityTier.UNCOMMON, "Uncommon Magnifying Glass", reward_claimed=True)

    def test_claimable_only_between_reach_and_claim(self):
        """is_claimable is True only after reach and before claim."""
        # Arrange
        milestone = Milestone(5_000, RarityTier.UNCOMMON, "Uncommon Magnifying Glass")

        # Act
        reached = milestone.mark_reached()
        claimed = reached.mark_claimed()

        # Assert
        assert not milestone.is_claimable
        assert reached.is_claimable
        assert not claimed.is_claimable

    @pytest.mark.parametrize(
        "tier, expected_range",
        [
            (RarityTier.COMMON, (100, 100)),
            (RarityTier.RARE, (98, 100)),
            (RarityTier.LEGENDARY, (96, 100)),
        ],
    )
    def test_glass_advancement_range(self, tier, expected_range):
        """Each tier carries its advancement roll range."""
        assert MagnifyingGlass.for_tier(tier).advancement_range == expected_range

    def test_glass_range_bounds_validated(self):
        """A range with low above high is rejected."""
        with pytest.raises(DomainValidationError):
            MagnifyingGlass(RarityTier.RARE, (100, 90))


@pytest.mark.unit
@pytest.mark.domain
class TestAchievementRecords:
    """Test AchievementTier and LifetimeAchievement."""

    def test_achievement_id_replaces_whitespace(self):
        """Ids join the threshold and the name with underscores."""
        tier = AchievementTier(3_500_000, "Ultimate Step Scientist")
        assert tier.achievement_id == "3500000_Ultimate_Step_Scientist"

    def test_catalog_achievement_id(self):
        """Catalog tiers produce the ids stored in unlocked_achievements."""
        tier = next(t for t in ACHIEVEMENT_TIERS if t.threshold_steps == 100_000)
        assert tier.achievement_id == "100000_Dedicated_Walker"

    def test_achievement_id_collapses_whitespace_runs(self):
        tier = AchievementTier(42, "Night \t Owl")
        assert tier.achievement_id == "42_Night_Owl"

    def test_tier_cannot_cap_and_unbound_bank(self):
        """A tier cannot both set a bank cap and remove it."""
        with pytest.raises(DomainValidationError):
            AchievementTier(1, "Broken", experience_bank_cap=10, unbounded_experience_bank=True)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"bonus_cells_per_day": 16},
            {"discovery_efficiency_pct": 51},
            {"training_efficiency_pct": -1},
            {"click_power_multiplier": 0},
        ],
    )
    def test_bonus_bundle_ranges(self, overrides):
        """Bonus fields outside their caps are rejected."""
        with pytest.raises(DomainValidationError):
            LifetimeAchievement(**overrides)

    def test_unlocked_ids_coerced_to_frozenset(self):
        """Any iterable of ids is stored as a frozenset."""
        bundle = LifetimeAchievement(unlocked_achievement_ids=["a", "b", "a"])
        assert bundle.unlocked_achievement_ids == frozenset({"a", "b"})

    def test_sync_result_changed_flag(self):
        """A result with no steps added is unchanged."""
        assert not StepSyncResult(steps_added=0, resources_gained=Resources()).changed
        assert StepSyncResult(steps_added=1, resources_gained=Resources()).changed
