"""
Integration Tests for DatabaseService
======================================

Test Coverage
-------------
- Initialization guard and health check
- Transaction commit and rollback
- Pessimistic lock helper and repository lookups
"""

import logging

import pytest
from sqlalchemy import text

from stepscientists.core.database import DatabaseNotInitializedError, DatabaseService
from stepscientists.database.models import PlayerProgress
from stepscientists.modules.progression.repository import PlayerProgressRepository


def _progress(player_id: str) -> PlayerProgress:
    return PlayerProgress(
        player_id=player_id,
        current_mode="discovery",
        total_steps=0,
        steps_in_current_mode=0,
        total_steps_in_discovery=0,
        total_steps_in_training=0,
        cells=0,
        experience_points=0,
        milestone_states={},
        magnifying_glasses=[],
    )


@pytest.mark.integration
@pytest.mark.database
class TestDatabaseLifecycle:
    """Test initialization state handling."""

    async def test_session_before_initialize_raises(self):
        assert not DatabaseService.is_initialized()

        with pytest.raises(DatabaseNotInitializedError):
            async with DatabaseService.get_session():
                pass

    async def test_health_check_uninitialized_is_false(self):
        assert await DatabaseService.health_check() is False

    async def test_health_check_after_initialize(self, database):
        assert database.is_initialized()
        assert await database.health_check() is True


@pytest.mark.integration
@pytest.mark.database
class TestTransactions:
    """Test commit and rollback semantics."""

    async def test_transaction_commits(self, database):
        # Act
        async with database.get_transaction() as session:
            session.add(_progress("walker-1"))

        # Assert
        async with database.get_session() as session:
            count = (await session.execute(text("SELECT COUNT(*) FROM player_progress"))).scalar_one()
        assert count == 1

    async def test_transaction_rolls_back_on_error(self, database):
        # Act
        with pytest.raises(RuntimeError):
            async with database.get_transaction() as session:
                session.add(_progress("walker-1"))
                await session.flush()
                raise RuntimeError("abort")

        # Assert
        async with database.get_session() as session:
            assert await session.get(PlayerProgress, "walker-1") is None

    async def test_locked_entity_and_repository_lookups(self, database):
        # Arrange
        repo = PlayerProgressRepository(logging.getLogger("test"))
        async with database.get_transaction() as session:
            repo.add(session, _progress("walker-1"))

        # Act
        async with database.get_transaction() as session:
            locked = await database.get_locked_entity(session, PlayerProgress, "walker-1")
            exists = await repo.exists(session, PlayerProgress.player_id == "walker-1")
            missing = await repo.get_for_update(session, "nobody")

        # Assert
        assert locked is not None
        assert locked.player_id == "walker-1"
        assert exists is True
        assert missing is None
