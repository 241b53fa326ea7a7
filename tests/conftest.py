"""
Pytest Configuration and Fixtures for Step Scientists Tests
============================================================

Purpose
-------
Centralized test fixtures and configuration for the Step Scientists test
suite. Provides reusable fixtures for the database, services and domain
models.

Responsibilities
----------------
- Pin the process environment to "testing" before the package is imported
- In-memory aiosqlite database with the schema created per test
- Domain model factories for test data

Architecture Notes
------------------
- Unit tests use plain domain objects (fast, isolated)
- Integration tests use a fresh in-memory sqlite database per test
- Fixtures follow scope hierarchy: session > module > function
"""

from __future__ import annotations

import os

# Config reads the environment at import time.
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["DAILY_BONUS_TIMEZONE"] = "UTC"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from stepscientists.core.config import Config
from stepscientists.core.database import DatabaseService
from stepscientists.domain.models.player import Player
from stepscientists.modules.progression.service import ProgressionService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Register markers used across the suite."""
    config.addinivalue_line("markers", "database: tests that need DatabaseService")


# ============================================================================
# DATABASE FIXTURES (Integration Tests)
# ============================================================================


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[type[DatabaseService], None]:
    """
    Initialize DatabaseService against a fresh in-memory sqlite database.

    Scope: function (every test starts from empty tables)
    """
    await DatabaseService.initialize(TEST_DATABASE_URL)
    await DatabaseService.create_schema()

    yield DatabaseService

    await DatabaseService.shutdown()


@pytest.fixture
def progression_service(database) -> ProgressionService:
    """ProgressionService bound to the test database."""
    return ProgressionService(config=Config)


# ============================================================================
# DOMAIN MODEL FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def player() -> Player:
    """A fresh player in discovery mode with no steps."""
    return Player.new("player-1")


@pytest.fixture
def seasoned_player() -> Player:
    """A player who has walked 120,000 steps in discovery mode."""
    player = Player.new("player-2")
    player.record_steps(120_000)
    player.clear_domain_events()
    return player


@pytest.fixture
def noon_utc() -> datetime:
    return datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)
