"""Domain layer: entities and services for dfood."""
