"""SQLAlchemy models for dfood tables.

All models inherit from the Base class defined in database.py.
"""

from dfood.infrastructure.persistence.models.user import UserModel

__all__ = ["UserModel"]
