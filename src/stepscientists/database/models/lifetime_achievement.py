"""
LifetimeAchievementRow: cached lifetime bonus bundle per player.
Pure schema only; every bonus column is recomputable from total steps.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stepscientists.core.database.base import Base, IdMixin, JSONType, TimestampMixin


class LifetimeAchievementRow(Base, IdMixin, TimestampMixin):
    """
    Lifetime achievement cache row.

    Schema-only:
    - player_id (FK to player_progress, unique)
    - bonus_cells_per_day, discovery_efficiency, training_efficiency
    - click_power, experience_bank_cap (NULL = unbounded)
    - training_roster_slots, release_xp_bonus
    - unlocked_achievements (JSON list of achievement ids)
    - last_daily_bonus_claim (UTC, NULL until first claim)
    """

    __tablename__ = "lifetime_achievements"

    player_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("player_progress.player_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    bonus_cells_per_day: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    discovery_efficiency: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    training_efficiency: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    click_power: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    experience_bank_cap: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, default=100, doc="NULL means unbounded"
    )
    training_roster_slots: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    release_xp_bonus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    unlocked_achievements: Mapped[List[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )

    last_daily_bonus_claim: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
