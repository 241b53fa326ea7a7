"""
Base domain model classes for Step Scientists.

Purpose
-------
Foundational abstractions for rich domain models that encapsulate business
logic, validation and state transitions.

Responsibilities
----------------
- Define base Entity class with identity and equality semantics
- Define base AggregateRoot class for consistency boundaries
- Provide validation helpers for value-object invariants
- Track domain events for state changes

Non-Responsibilities
--------------------
- Persistence (handled by repositories)
- Database schema (handled by SQLAlchemy models)
- Service orchestration (handled by the service layer)

Design Patterns
---------------
- **Entity**: Objects with identity that persist over time
- **Value Object**: Immutable frozen dataclasses, self-validating in
  `__post_init__`
- **Aggregate Root**: Consistency boundary for domain operations
- **Domain Events**: Record state changes for the service layer to log

Usage Example
-------------
>>> class Player(AggregateRoot):
...     def __init__(self, player_id: str, total_steps: int):
...         super().__init__(player_id)
...         self.total_steps = total_steps
...
...     def add_steps(self, steps: int) -> None:
...         self.total_steps += steps
...         self.add_domain_event("player.steps_recorded", {
...             "player_id": self.id,
...             "steps": steps,
...         })
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, List, Optional


# ============================================================================
# DOMAIN EVENTS
# ============================================================================


@dataclass
class DomainEvent:
    """
    Represents a domain event that has occurred.

    Attributes
    ----------
    event_name : str
        Event name (e.g., "player.milestone_claimed")
    payload : Dict[str, Any]
        Event payload with relevant data
    occurred_at : datetime
        When the event occurred (UTC)
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ============================================================================
# ENTITY
# ============================================================================


class Entity(ABC):
    """
    Base class for entities with identity.

    Two entities with the same ID are the same entity, even if their
    attributes differ. Entities record domain events for significant state
    transitions; the service layer drains them after persisting.
    """

    def __init__(self, entity_id: Hashable) -> None:
        self._id = entity_id
        self._domain_events: List[DomainEvent] = []

    @property
    def id(self) -> Any:
        """Get entity ID (immutable)."""
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def add_domain_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        """
        Record a domain event.

        Examples
        --------
        >>> self.add_domain_event("player.mode_switched", {
        ...     "player_id": self.id,
        ...     "old_mode": "discovery",
        ...     "new_mode": "training",
        ... })
        """
        self._domain_events.append(DomainEvent(event_name=event_name, payload=payload))

    def clear_domain_events(self) -> List[DomainEvent]:
        """
        Clear and return all domain events.

        Called by the service after persisting the entity.
        """
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    def get_pending_events(self) -> List[DomainEvent]:
        """Get domain events without clearing them."""
        return self._domain_events.copy()


# ============================================================================
# AGGREGATE ROOT
# ============================================================================


class AggregateRoot(Entity):
    """
    Base class for aggregate roots.

    An aggregate is a cluster of domain objects treated as a single unit for
    data changes. All changes go through the root's business methods, which
    maintain the aggregate's invariants and emit domain events.
    """

    pass


# ============================================================================
# DOMAIN MODEL VALIDATION
# ============================================================================


class DomainValidationError(Exception):
    """
    Exception raised when domain model validation fails.

    Parameters
    ----------
    message : str
        Human-readable error message
    field : Optional[str]
        Field name that failed validation (if applicable)
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_positive(value: int, field_name: str) -> None:
    """Raise DomainValidationError unless value > 0."""
    if value <= 0:
        raise DomainValidationError(
            f"{field_name} must be positive, got {value}",
            field=field_name,
        )


def validate_non_negative(value: int, field_name: str) -> None:
    """Raise DomainValidationError unless value >= 0."""
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}",
            field=field_name,
        )


def validate_range(value: int, min_val: int, max_val: int, field_name: str) -> None:
    """
    Validate that a value is within a range (inclusive).

    Raises
    ------
    DomainValidationError
        If value is outside the range
    """
    if not (min_val <= value <= max_val):
        raise DomainValidationError(
            f"{field_name} must be between {min_val} and {max_val}, got {value}",
            field=field_name,
        )


def validate_not_empty(value: str, field_name: str) -> None:
    """Raise DomainValidationError if value is empty or whitespace-only."""
    if not value or not value.strip():
        raise DomainValidationError(
            f"{field_name} cannot be empty",
            field=field_name,
        )
