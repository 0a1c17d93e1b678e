"""Domain entities for dfood."""

from dfood.domain.entities.user import User

__all__ = ["User"]
