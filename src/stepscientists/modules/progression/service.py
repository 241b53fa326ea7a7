"""
Progression Service

Purpose
-------
Async orchestration of the Player aggregate over the database. Every write
runs inside one `DatabaseService.get_transaction()` holding the player's
row lock (SELECT ... FOR UPDATE), so concurrent step syncs and claims for
the same player are serialized and summed, never overwritten.

Responsibilities
----------------
- Validate service input (player id, mode, tier)
- Load rows with a pessimistic lock, build the aggregate, apply one
  operation, write `to_db_updates()` back
- Create progress rows on first contact, reloading them when a concurrent
  request inserted them first
- Log domain events and domain errors with player/operation context

Non-Responsibilities
--------------------
- Game rules (Player aggregate and progression calculator)
- Transport (REST, background sync)

Usage
-----
>>> service = ProgressionService()
>>> result = await service.sync_steps("player-1", steps_in_mode=5_200)
>>> glass = await service.claim_milestone_reward("player-1", 5_000)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple, TypeVar

from sqlalchemy.exc import IntegrityError

from stepscientists.core.database.service import DatabaseService
from stepscientists.core.logging.logger import LogContext, get_logger
from stepscientists.database.models import LifetimeAchievementRow, PlayerProgress
from stepscientists.domain.models.player import Player
from stepscientists.domain.models.progression import (
    GameMode,
    MagnifyingGlass,
    RarityTier,
    StepSyncResult,
)
from stepscientists.modules.progression.catalog import find_achievement_tier
from stepscientists.modules.progression.repository import (
    LifetimeAchievementRepository,
    PlayerProgressRepository,
)
from stepscientists.modules.shared.base_service import BaseService
from stepscientists.modules.shared.exceptions import (
    NotFoundError,
    StepDomainException,
    ValidationError,
)
from stepscientists.modules.shared.validators import validate_player_id, validate_step_count

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

R = TypeVar("R")


class ProgressionService(BaseService):
    """
    Player progression operations, one transaction per call.

    Public API
    ----------
    - get_or_create_player(player_id)
    - sync_steps(player_id, steps_in_mode)
    - switch_mode(player_id, mode)
    - claim_milestone_reward(player_id, threshold_steps)
    - claim_daily_bonus(player_id, now=None)
    - use_magnifying_glass(player_id, tier)
    - get_progress_summary(player_id, now=None)  (read-only)
    """

    def __init__(self, logger=None, config: Optional[Any] = None) -> None:
        super().__init__(logger or get_logger(__name__), config)
        self._progress_repo = PlayerProgressRepository(self.log)
        self._achievement_repo = LifetimeAchievementRepository(self.log)

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def get_or_create_player(self, player_id: str) -> Player:
        """Load the player, creating zeroed progress rows on first contact."""
        return await self._mutate(player_id, "get_or_create_player", lambda player: player)

    async def sync_steps(self, player_id: str, steps_in_mode: int) -> StepSyncResult:
        """
        Apply a cumulative in-mode step reading.

        Raises
        ------
        InvalidStepCountError
            If steps_in_mode is negative or not an integer
        """
        validate_step_count(steps_in_mode, "steps_in_mode")
        return await self._mutate(
            player_id,
            "sync_steps",
            lambda player: player.record_steps(steps_in_mode),
            steps_in_mode=steps_in_mode,
        )

    async def switch_mode(self, player_id: str, mode: Any) -> bool:
        """Switch game mode. Returns False when already in that mode."""
        new_mode = self._parse_mode(mode)
        return await self._mutate(
            player_id,
            "switch_mode",
            lambda player: player.switch_mode(new_mode),
            mode=new_mode.value,
        )

    async def claim_milestone_reward(
        self, player_id: str, threshold_steps: int
    ) -> MagnifyingGlass:
        """
        Claim a milestone's magnifying glass.

        Raises
        ------
        MilestoneAlreadyClaimedError, MilestoneNotReachedError, NotFoundError
        """
        self.validate_non_negative_int(threshold_steps, "threshold_steps")
        return await self._mutate(
            player_id,
            "claim_milestone_reward",
            lambda player: player.claim_milestone_reward(threshold_steps),
            threshold_steps=threshold_steps,
        )

    async def claim_daily_bonus(
        self, player_id: str, now: Optional[datetime] = None
    ) -> int:
        """Grant today's bonus cells; 0 if already claimed today."""
        claimed_at = now or datetime.now(timezone.utc)
        zone = self._config.daily_bonus_zone()
        return await self._mutate(
            player_id,
            "claim_daily_bonus",
            lambda player: player.claim_daily_bonus(claimed_at, zone),
        )

    async def use_magnifying_glass(self, player_id: str, tier: Any) -> MagnifyingGlass:
        """Consume one glass of `tier`. NotFoundError if none is held."""
        rarity = self._parse_tier(tier)
        return await self._mutate(
            player_id,
            "use_magnifying_glass",
            lambda player: player.use_magnifying_glass(rarity),
            tier=rarity.value,
        )

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_progress_summary(
        self, player_id: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Read-only snapshot of a player's progression.

        Raises
        ------
        NotFoundError
            If the player has no progress row
        """
        validate_player_id(player_id)

        async with LogContext(player_id=player_id, operation="get_progress_summary"):
            async with DatabaseService.get_session() as session:
                progress = await self._progress_repo.get(session, player_id)
                if progress is None:
                    raise NotFoundError("Player", player_id)
                achievement_row = await self._achievement_repo.find_by_player(
                    session, player_id
                )
                player = Player.from_db(progress, achievement_row)

        return self._summarize(player, now or datetime.now(timezone.utc))

    # ========================================================================
    # Internals
    # ========================================================================

    async def _mutate(
        self,
        player_id: str,
        operation: str,
        apply: Callable[[Player], R],
        **context: Any,
    ) -> R:
        validate_player_id(player_id)

        async with LogContext(player_id=player_id, operation=operation):
            self.log_operation(operation, **context)
            try:
                async with DatabaseService.get_transaction() as session:
                    progress, achievement_row = await self._load_for_update(
                        session, player_id
                    )
                    player = Player.from_db(progress, achievement_row)
                    result = apply(player)
                    self._write_back(player, progress, achievement_row)
                    events = player.clear_domain_events()
            except StepDomainException as exc:
                self.log_domain_error(operation, exc, **context)
                raise
            except Exception as exc:
                self.log_error(operation, exc, **context)
                raise

            self.log_domain_events(events)
            return result

    async def _load_for_update(
        self, session: AsyncSession, player_id: str
    ) -> Tuple[PlayerProgress, LifetimeAchievementRow]:
        progress = await self._progress_repo.get_for_update(session, player_id)
        if progress is not None:
            return progress, await self._achievement_row_for_update(session, player_id)

        fresh = Player.new(player_id).to_db_updates()
        progress = self._progress_repo.add(
            session, PlayerProgress(player_id=player_id, **fresh["progress"])
        )
        achievement_row = self._achievement_repo.add(
            session,
            LifetimeAchievementRow(player_id=player_id, **fresh["achievements"]),
        )
        try:
            await self._progress_repo.flush(session)
        except IntegrityError:
            # Another request created this player's rows after our lookup.
            await session.rollback()
            self.log.info("Progress rows created concurrently; reloading")
            progress = await self._progress_repo.get_for_update(session, player_id)
            if progress is None:
                raise
            return progress, await self._achievement_row_for_update(session, player_id)

        self.log.info("Created progress rows for new player")
        return progress, achievement_row

    async def _achievement_row_for_update(
        self, session: AsyncSession, player_id: str
    ) -> LifetimeAchievementRow:
        achievement_row = await self._achievement_repo.find_by_player(
            session, player_id, for_update=True
        )
        if achievement_row is None:
            achievement_row = self._achievement_repo.add(
                session, LifetimeAchievementRow(player_id=player_id)
            )
        return achievement_row

    @staticmethod
    def _write_back(
        player: Player,
        progress: PlayerProgress,
        achievement_row: LifetimeAchievementRow,
    ) -> None:
        updates = player.to_db_updates()
        for key, value in updates["progress"].items():
            setattr(progress, key, value)
        for key, value in updates["achievements"].items():
            setattr(achievement_row, key, value)

    @staticmethod
    def _parse_mode(mode: Any) -> GameMode:
        try:
            return GameMode(mode)
        except ValueError:
            raise ValidationError(
                "mode", f"must be one of {[m.value for m in GameMode]}, got {mode!r}"
            ) from None

    @staticmethod
    def _parse_tier(tier: Any) -> RarityTier:
        try:
            return RarityTier(tier)
        except ValueError:
            raise ValidationError(
                "tier", f"must be one of {[t.value for t in RarityTier]}, got {tier!r}"
            ) from None

    def _summarize(self, player: Player, now: datetime) -> Dict[str, Any]:
        achievement = player.achievement
        rates = player.conversion_rates
        next_milestone = player.next_milestone
        next_achievement = player.next_achievement

        glass_counts: Dict[str, int] = {}
        for glass in player.magnifying_glasses:
            glass_counts[glass.tier.value] = glass_counts.get(glass.tier.value, 0) + 1

        unlocked_tiers = filter(
            None, map(find_achievement_tier, achievement.unlocked_achievement_ids)
        )
        unlocked = [
            tier.name for tier in sorted(unlocked_tiers, key=lambda t: t.threshold_steps)
        ]

        return {
            "player_id": player.id,
            "mode": player.mode.value,
            "steps": {
                "total": player.steps.total_steps,
                "in_current_mode": player.steps.steps_in_current_mode,
                "discovery": player.steps.total_steps_in_discovery,
                "training": player.steps.total_steps_in_training,
            },
            "resources": {
                "cells": player.resources.cells,
                "experience_points": player.resources.experience_points,
            },
            "conversion_rates": {
                "steps_per_cell": rates.steps_per_cell,
                "steps_per_xp": rates.steps_per_xp,
            },
            "bonuses": {
                "bonus_cells_per_day": achievement.bonus_cells_per_day,
                "discovery_efficiency_pct": achievement.discovery_efficiency_pct,
                "training_efficiency_pct": achievement.training_efficiency_pct,
                "click_power_multiplier": achievement.click_power_multiplier,
                "experience_bank_cap": achievement.experience_bank_cap,
                "training_roster_slots": achievement.training_roster_slots,
                "release_xp_bonus_pct": achievement.release_xp_bonus_pct,
            },
            "unlocked_achievements": unlocked,
            "next_achievement": {
                "name": next_achievement.name,
                "threshold_steps": next_achievement.threshold_steps,
                "progress_pct": player.achievement_progress,
            },
            "next_milestone": None
            if next_milestone is None
            else {
                "name": next_milestone.name,
                "threshold_steps": next_milestone.threshold_steps,
                "tier": next_milestone.rarity_tier.value,
                "progress_pct": player.milestone_progress,
            },
            "claimable_milestones": [m.threshold_steps for m in player.claimable_milestones()],
            "magnifying_glasses": glass_counts,
            "daily_bonus_available": player.can_claim_daily_bonus(
                now, self._config.daily_bonus_zone()
            ),
        }
