"""Repositories for dfood database operations."""

from dfood.infrastructure.persistence.repositories.user_repository import (
    UserAlreadyExistsError,
    UserRepository,
)

__all__ = ["UserAlreadyExistsError", "UserRepository"]
