"""
Database infrastructure: declarative base, column mixins and the async
DatabaseService (engine, sessions, transactions, row locking).
"""

from stepscientists.core.database.base import Base, IdMixin, JSONType, TimestampMixin
from stepscientists.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    "Base",
    "IdMixin",
    "TimestampMixin",
    "JSONType",
    "DatabaseService",
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
]
