"""User repository for database operations.

This is the credential store behind authentication: lookups by email and
id, the registration existence check, insert, password-hash update and
delete.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dfood.infrastructure.persistence.models import UserModel


class UserAlreadyExistsError(Exception):
    """Raised when an insert violates the unique email (or id) constraint."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"A user with email {email!r} already exists")


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Insert a new user.

        Args:
            user: User model to create.

        Returns:
            Created user model.

        Raises:
            UserAlreadyExistsError: If the email (or id) is already taken.
                The session must be rolled back by the caller.
        """
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise UserAlreadyExistsError(user.email) from e
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        """Get a user by ID.

        Args:
            user_id: User ID.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> UserModel | None:
        """Get a user by email address.

        Args:
            email: User's email address.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check if an email is already registered.

        Args:
            email: Email to check.

        Returns:
            True if email exists, False otherwise.
        """
        result = await self.session.execute(
            select(UserModel.id).where(UserModel.email == email).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def update_password_hash(self, email: str, password_hash: str) -> bool:
        """Replace a user's password hash.

        Args:
            email: Email of the user to update.
            password_hash: The new Argon2 hash.

        Returns:
            True if a row was updated, False if no such user.
        """
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.email == email)
            .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
        )
        await self.session.flush()
        return result.rowcount > 0

    async def delete_by_email(self, email: str) -> bool:
        """Delete a user.

        Args:
            email: Email of the user to delete.

        Returns:
            True if a row was deleted, False if no such user.
        """
        result = await self.session.execute(
            delete(UserModel).where(UserModel.email == email)
        )
        await self.session.flush()
        return result.rowcount > 0
