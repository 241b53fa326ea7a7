"""
ORM models (schema only). Importing this package registers every table on
stepscientists.core.database.base.Base.metadata.
"""

from .lifetime_achievement import LifetimeAchievementRow
from .player_progress import PlayerProgress

__all__ = [
    "PlayerProgress",
    "LifetimeAchievementRow",
]
