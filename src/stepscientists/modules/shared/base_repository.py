"""
Base Repository Pattern

Purpose
-------
Type-safe, generic repository abstraction for database operations following
SQLAlchemy 2.0 async patterns. Repositories encapsulate data access and give
services a consistent interface for lookups, locking and inserts.

Design Notes
------------
This base repository provides:
- Primary-key lookups with and without pessimistic locking
- Condition-based lookups (optionally SELECT FOR UPDATE)
- Existence checks
- Structured debug logging for every call

What this class does NOT do:
- Manage transactions (DatabaseService.get_transaction() does)
- Contain business logic
- Perform validation beyond type safety

Usage
-----
    class LifetimeAchievementRepository(BaseRepository[LifetimeAchievementRow]):
        async def find_by_player(self, session, player_id, for_update=False):
            return await self.find_one_where(
                session,
                LifetimeAchievementRow.player_id == player_id,
                for_update=for_update,
            )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select

if TYPE_CHECKING:
    from logging import Logger
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository for type-safe database operations.

    Type Parameters:
        T: The SQLAlchemy model class this repository manages
    """

    def __init__(
        self, model_class: Type[T], logger: Logger, pk_attr: str = "id"
    ) -> None:
        """
        Args:
            model_class: The SQLAlchemy model class
            logger: Structured logger instance
            pk_attr: Name of the primary-key attribute on the model
        """
        self.model_class = model_class
        self.log = logger
        self._pk = getattr(model_class, pk_attr)

    async def get(self, session: AsyncSession, id_value: Any) -> Optional[T]:
        """Get a single record by primary key (no lock)."""
        return await self._get_by_pk(session, id_value, for_update=False)

    async def get_for_update(
        self, session: AsyncSession, id_value: Any
    ) -> Optional[T]:
        """Get a single record by primary key with SELECT FOR UPDATE lock."""
        return await self._get_by_pk(session, id_value, for_update=True)

    async def _get_by_pk(
        self, session: AsyncSession, id_value: Any, for_update: bool
    ) -> Optional[T]:
        stmt = select(self.model_class).where(self._pk == id_value)
        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.get: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": id_value,
                "found": instance is not None,
                "locked": for_update,
            },
        )

        return instance

    async def find_one_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        for_update: bool = False,
    ) -> Optional[T]:
        """
        Find a single record matching conditions.

        Args:
            session: Database session
            *conditions: SQLAlchemy filter conditions
            for_update: If True, use SELECT FOR UPDATE

        Returns:
            Model instance or None if not found
        """
        stmt = select(self.model_class).where(*conditions)

        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        instance = result.scalar_one_or_none()

        self.log.debug(
            f"Repository.find_one_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found": instance is not None,
                "locked": for_update,
            },
        )

        return instance

    async def exists(
        self, session: AsyncSession, *conditions: ColumnElement[bool]
    ) -> bool:
        """True if at least one record matches conditions."""
        stmt = select(func.count()).select_from(self.model_class).where(*conditions)
        result = await session.execute(stmt)
        count = result.scalar_one()

        self.log.debug(
            f"Repository.exists: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "exists": count > 0,
            },
        )

        return count > 0

    def add(self, session: AsyncSession, instance: T) -> T:
        """Add a new instance to the session."""
        session.add(instance)

        self.log.debug(
            f"Repository.add: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__},
        )

        return instance

    async def flush(self, session: AsyncSession) -> None:
        """Flush pending changes to the database."""
        await session.flush()

        self.log.debug(
            f"Repository.flush: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__},
        )
