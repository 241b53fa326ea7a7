"""
Domain models package for Step Scientists.

Purpose
-------
Rich domain models with business logic. These models encapsulate game
rules, validation and state transitions.

Design Notes
------------
Domain models are separate from database models:
- Database models (stepscientists/database/models/): anemic SQLAlchemy schemas
- Domain models (stepscientists/domain/models/): rich objects with business logic

The Player aggregate depends on the progression calculator, which in turn
depends on the value objects exported here. Import it from its own module:

    from stepscientists.domain.models.player import Player
"""

from .base import (
    AggregateRoot,
    DomainEvent,
    DomainValidationError,
    Entity,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
    validate_range,
)

from .progression import (
    ADVANCEMENT_RANGES,
    AchievementTier,
    ConversionRates,
    GameMode,
    LifetimeAchievement,
    MagnifyingGlass,
    Milestone,
    RarityTier,
    Resources,
    StepSyncResult,
    StepTotals,
)

__all__ = [
    # Base classes
    "Entity",
    "AggregateRoot",
    "DomainEvent",
    "DomainValidationError",
    # Validators
    "validate_positive",
    "validate_non_negative",
    "validate_range",
    "validate_not_empty",
    # Value objects
    "GameMode",
    "RarityTier",
    "ADVANCEMENT_RANGES",
    "StepTotals",
    "Resources",
    "ConversionRates",
    "Milestone",
    "MagnifyingGlass",
    "AchievementTier",
    "LifetimeAchievement",
    "StepSyncResult",
]
