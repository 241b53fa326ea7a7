"""Domain layer: value objects, the Player aggregate and domain events."""
