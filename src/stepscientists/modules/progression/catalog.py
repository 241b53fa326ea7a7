"""
Static progression tables: named lifetime achievement tiers and
magnifying-glass milestones.

Both tables are immutable tuples sorted by ascending threshold. Each
achievement tier sets only the bonus fields it changes; everything else is
inherited from the tiers below it.
"""

from __future__ import annotations

from typing import Optional, Tuple

from stepscientists.domain.models.progression import (
    AchievementTier,
    Milestone,
    RarityTier,
)

ACHIEVEMENT_TIERS: Tuple[AchievementTier, ...] = (
    AchievementTier(10_000, "First Steps", experience_bank_cap=150),
    AchievementTier(50_000, "Getting Active", experience_bank_cap=200),
    AchievementTier(
        100_000,
        "Dedicated Walker",
        bonus_cells_per_day=1,
        discovery_efficiency_pct=2,
        experience_bank_cap=300,
    ),
    AchievementTier(
        200_000, "Consistent Mover", training_efficiency_pct=5, experience_bank_cap=400
    ),
    AchievementTier(
        300_000, "Fitness Enthusiast", training_roster_slots=12, experience_bank_cap=500
    ),
    AchievementTier(
        600_000,
        "Marathon Mindset",
        bonus_cells_per_day=2,
        discovery_efficiency_pct=4,
        experience_bank_cap=650,
    ),
    AchievementTier(
        900_000,
        "Endurance Expert",
        click_power_multiplier=3,
        training_efficiency_pct=10,
        experience_bank_cap=800,
    ),
    AchievementTier(
        1_200_000,
        "Distance Devotee",
        bonus_cells_per_day=3,
        discovery_efficiency_pct=6,
        experience_bank_cap=1000,
    ),
    AchievementTier(
        1_800_000,
        "Fitness Warrior",
        training_roster_slots=14,
        training_efficiency_pct=15,
        experience_bank_cap=1500,
    ),
    AchievementTier(
        2_400_000,
        "Walking Legend",
        bonus_cells_per_day=4,
        discovery_efficiency_pct=8,
        click_power_multiplier=4,
        experience_bank_cap=2000,
    ),
    AchievementTier(
        3_000_000,
        "Fitness Master",
        training_efficiency_pct=20,
        release_xp_bonus_pct=50,
        experience_bank_cap=3000,
    ),
    AchievementTier(
        3_500_000,
        "Ultimate Step Scientist",
        bonus_cells_per_day=5,
        discovery_efficiency_pct=20,
        training_roster_slots=16,
        click_power_multiplier=7,
        unbounded_experience_bank=True,
    ),
)

MILESTONES: Tuple[Milestone, ...] = (
    Milestone(5_000, RarityTier.UNCOMMON, "Uncommon Magnifying Glass"),
    Milestone(10_000, RarityTier.RARE, "Rare Magnifying Glass"),
    Milestone(50_000, RarityTier.EPIC, "Epic Magnifying Glass"),
    Milestone(100_000, RarityTier.LEGENDARY, "Legendary Magnifying Glass"),
)


def find_milestone(
    threshold_steps: int, milestones: Tuple[Milestone, ...] = MILESTONES
) -> Optional[Milestone]:
    for milestone in milestones:
        if milestone.threshold_steps == threshold_steps:
            return milestone
    return None


def find_achievement_tier(achievement_id: str) -> Optional[AchievementTier]:
    for tier in ACHIEVEMENT_TIERS:
        if tier.achievement_id == achievement_id:
            return tier
    return None
