"""
PlayerProgress: one row per player holding step counters, resources,
milestone claim state and the magnifying-glass inventory.
Pure schema only.
"""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import BigInteger, CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stepscientists.core.database.base import Base, JSONType, TimestampMixin


class PlayerProgress(Base, TimestampMixin):
    """
    Player step progression row.

    Schema-only:
    - player_id (primary key, account identifier)
    - current_mode ("discovery" | "training")
    - total_steps / steps_in_current_mode
    - total_steps_in_discovery / total_steps_in_training
    - unconverted_steps (in-mode remainder below one cell or XP point)
    - cells / experience_points
    - milestone_states (JSON: {"5000": {"reached": true, "reward_claimed": false}})
    - magnifying_glasses (JSON list of rarity tier names)
    - created_at / updated_at (from TimestampMixin)
    """

    __tablename__ = "player_progress"
    __table_args__ = (
        CheckConstraint("total_steps >= 0", name="total_steps_non_negative"),
        CheckConstraint("steps_in_current_mode >= 0", name="mode_steps_non_negative"),
        CheckConstraint("unconverted_steps >= 0", name="unconverted_steps_non_negative"),
        CheckConstraint("cells >= 0", name="cells_non_negative"),
        CheckConstraint("experience_points >= 0", name="xp_non_negative"),
        Index("ix_player_progress_total_steps", "total_steps"),
    )

    player_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    current_mode: Mapped[str] = mapped_column(
        String(16), nullable=False, default="discovery"
    )

    total_steps: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    steps_in_current_mode: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    total_steps_in_discovery: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    total_steps_in_training: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    unconverted_steps: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    cells: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    experience_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    milestone_states: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )
    magnifying_glasses: Mapped[List[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
