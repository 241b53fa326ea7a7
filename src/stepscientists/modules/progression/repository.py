"""
Repositories for the progression tables.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from stepscientists.database.models import LifetimeAchievementRow, PlayerProgress
from stepscientists.modules.shared.base_repository import BaseRepository

if TYPE_CHECKING:
    from logging import Logger
    from sqlalchemy.ext.asyncio import AsyncSession


class PlayerProgressRepository(BaseRepository[PlayerProgress]):
    def __init__(self, logger: Logger) -> None:
        super().__init__(PlayerProgress, logger, pk_attr="player_id")


class LifetimeAchievementRepository(BaseRepository[LifetimeAchievementRow]):
    def __init__(self, logger: Logger) -> None:
        super().__init__(LifetimeAchievementRow, logger)

    async def find_by_player(
        self, session: AsyncSession, player_id: str, for_update: bool = False
    ) -> Optional[LifetimeAchievementRow]:
        return await self.find_one_where(
            session,
            LifetimeAchievementRow.player_id == player_id,
            for_update=for_update,
        )
