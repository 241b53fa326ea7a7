"""
Progression feature: static tier/milestone catalog, the pure progression
calculator, and the async ProgressionService.

The service depends on the Player aggregate, which depends on the
calculator; import it from its own module:

    from stepscientists.modules.progression.service import ProgressionService
"""

from .calculator import (
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
from .catalog import ACHIEVEMENT_TIERS, MILESTONES, find_achievement_tier, find_milestone

__all__ = [
    "ACHIEVEMENT_TIERS",
    "MILESTONES",
    "find_milestone",
    "find_achievement_tier",
    "calculate_lifetime_bonuses",
    "compute_resource_gain",
    "compute_cumulative_gain",
    "get_conversion_rates",
    "get_next_milestone",
    "get_milestone_progress",
    "get_next_achievement",
    "get_achievement_progress",
    "find_newly_unlocked",
]
