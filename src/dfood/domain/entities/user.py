"""User entity exposed by the authentication layer.

The entity never carries the password hash: it is what the service layer
hands back to callers once credentials have been checked.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """A registered dfood user.

    Attributes:
        id: Opaque unique identifier, immutable after creation.
        email: Login key, unique across all users.
        first_name: Given name.
        last_name: Family name.
        phone_number: Contact number (optional).
        profile_image_url: Avatar location (optional).
        bio: Free-form profile text (optional).
        first_time_login: True until the user completes onboarding.
        email_verified: Whether the email address has been confirmed.
        created_at: Timestamp when the user was created.
        updated_at: Timestamp when the user was last updated.
    """

    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    phone_number: str | None = None
    profile_image_url: str | None = None
    bio: str | None = None
    first_time_login: bool = True
    email_verified: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("User ID is required")
        if not self.email:
            raise ValueError("Email is required")

    @classmethod
    def from_model(cls, model: Any) -> "User":
        """Build the entity from a persistence model, dropping the password hash."""
        return cls(
            id=model.id,
            email=model.email,
            first_name=model.first_name,
            last_name=model.last_name,
            phone_number=model.phone_number,
            profile_image_url=model.profile_image_url,
            bio=model.bio,
            first_time_login=model.first_time_login,
            email_verified=model.email_verified,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
