"""Authentication service.

Registration, login, password change, logout and account deletion. Each
operation either returns its payload or raises an ``AuthServiceError``
whose ``kind`` the HTTP layer maps to a status code.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dfood.core.logging import get_logger
from dfood.domain.entities.user import User
from dfood.domain.services.id_generator import generate_user_id
from dfood.infrastructure.auth.jwt_service import JWTError, JWTService
from dfood.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    verify_password,
)
from dfood.infrastructure.auth.token_types import TokenKind
from dfood.infrastructure.persistence.models import UserModel
from dfood.infrastructure.persistence.repositories import (
    UserAlreadyExistsError,
    UserRepository,
)

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def normalize_email(email: str) -> str:
    """Canonical form used for storage, lookup and token subjects."""
    return (email or "").strip().lower()


class AuthErrorKind(str, Enum):
    """Failure categories of the authentication operations."""

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class AuthServiceError(Exception):
    """Base exception for authentication failures."""

    kind: AuthErrorKind = AuthErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(AuthServiceError):
    """Missing or invalid input."""

    kind = AuthErrorKind.BAD_REQUEST


class UnauthorizedError(AuthServiceError):
    """Bad credentials, or an invalid, expired or revoked token."""

    kind = AuthErrorKind.UNAUTHORIZED


class ForbiddenError(AuthServiceError):
    """The token belongs to someone else."""

    kind = AuthErrorKind.FORBIDDEN


class ConflictError(AuthServiceError):
    """The email is already registered."""

    kind = AuthErrorKind.CONFLICT


class NotFoundError(AuthServiceError):
    """No such user."""

    kind = AuthErrorKind.NOT_FOUND


class InternalError(AuthServiceError):
    """Store or signing failure."""

    kind = AuthErrorKind.INTERNAL


@dataclass
class LoginResult:
    """A successful login: the user plus a fresh token pair."""

    user: User
    access_token: str
    refresh_token: str
    expires_in: int


class AuthService:
    """Service for account and session lifecycle."""

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        jwt_service: JWTService,
    ) -> None:
        """Initialize the auth service.

        Args:
            session: SQLAlchemy async session, committed after each mutation.
            user_repo: Credential store.
            jwt_service: Token issuer/verifier owning the revocation set.
        """
        self.session = session
        self.user_repo = user_repo
        self.jwt_service = jwt_service

    async def register(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
        phone_number: str | None = None,
        user_id: str | None = None,
    ) -> User:
        """Create a new account.

        Args:
            email: Login email, must not be registered yet.
            password: Plaintext password; only its hash is stored.
            first_name: Given name.
            last_name: Family name.
            phone_number: Optional contact number.
            user_id: Use this ID instead of generating one.

        Returns:
            The created user (without password hash).

        Raises:
            BadRequestError: If email or password is missing or invalid.
            ConflictError: If the email is already registered.
            InternalError: If the store fails.
        """
        email = normalize_email(email)
        if not email or "@" not in email:
            raise BadRequestError("A valid email is required")
        if not password:
            raise BadRequestError("Password is required")

        try:
            # Fast path only; the unique constraint on insert is authoritative.
            if await self.user_repo.email_exists(email):
                logger.info("Registration failed: email exists", email=email)
                raise ConflictError("User already exists")

            now = datetime.now(timezone.utc)
            user = UserModel(
                id=user_id or generate_user_id(),
                email=email,
                first_name=first_name,
                last_name=last_name,
                phone_number=phone_number,
                password_hash=hash_password(password),
                first_time_login=True,
                email_verified=False,
                created_at=now,
                updated_at=now,
            )
            await self.user_repo.create(user)
            await self.session.commit()
        except UserAlreadyExistsError as e:
            await self.session.rollback()
            logger.info("Registration failed: concurrent insert won", email=email)
            raise ConflictError("User already exists") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Registration failed: store error", email=email, error=str(e))
            raise InternalError("Failed to register user") from e

        logger.info("User registered", user_id=user.id, email=email)
        return User.from_model(user)

    async def login(self, email: str, password: str) -> LoginResult:
        """Check credentials and issue an access and refresh token.

        Unknown email and wrong password fail identically, and an unknown
        email still pays for one Argon2 verification.

        Raises:
            UnauthorizedError: If the credentials are wrong.
            InternalError: If the store or token signing fails.
        """
        email = normalize_email(email)
        user = await self._get_user(email)

        if user is None:
            verify_password(password or "", DUMMY_PASSWORD_HASH)
            logger.info("Login failed: unknown email", email=email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not verify_password(password or "", user.password_hash):
            logger.info("Login failed: invalid password", user_id=user.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        try:
            access_token = self.jwt_service.issue(user.email, TokenKind.ACCESS)
            refresh_token = self.jwt_service.issue(user.email, TokenKind.REFRESH)
        except JWTError as e:
            logger.error("Login failed: token signing", user_id=user.id, error=str(e))
            raise InternalError("Failed to generate tokens") from e

        logger.info("User logged in", user_id=user.id, email=user.email)
        return LoginResult(
            user=User.from_model(user),
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.jwt_service.get_expires_in(TokenKind.ACCESS),
        )

    async def update_password(
        self, email: str, current_password: str, new_password: str
    ) -> None:
        """Change a user's password.

        Raises:
            BadRequestError: If the new password is empty or equals the current one.
            NotFoundError: If there is no such user.
            UnauthorizedError: If the current password is wrong.
            InternalError: If the store fails.
        """
        if not new_password:
            raise BadRequestError("New password is required")

        email = normalize_email(email)
        user = await self._get_user(email)
        if user is None:
            raise NotFoundError("User not found")
        # Rollback expires the instance; its attributes must not be read afterwards.
        user_id = user.id

        if not verify_password(current_password or "", user.password_hash):
            logger.info("Password update failed: invalid current password", user_id=user_id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if verify_password(new_password, user.password_hash):
            raise BadRequestError("New password must be different from the current password")

        try:
            await self.user_repo.update_password_hash(email, hash_password(new_password))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Password update failed: store error", user_id=user_id, error=str(e))
            raise InternalError("Failed to update password") from e

        logger.info("Password updated", user_id=user_id)

    async def logout(self, token: str) -> None:
        """Revoke the presented token.

        Raises:
            UnauthorizedError: If the token does not verify.
        """
        try:
            claims = self.jwt_service.verify(token)
            self.jwt_service.revoke(token)
        except JWTError as e:
            logger.info("Logout failed: invalid token", error=str(e))
            raise UnauthorizedError("Invalid token") from e

        logger.info("User logged out", email=claims.subject)

    async def delete_account(self, email: str, token: str) -> None:
        """Delete the account that owns the presented access token.

        Tokens are revoked only once the delete is committed, so a store
        failure leaves both the account and the session intact.

        Raises:
            UnauthorizedError: If the token does not verify or is not an access token.
            ForbiddenError: If the token was issued to a different email.
            NotFoundError: If there is no such user.
            InternalError: If the store fails.
        """
        email = normalize_email(email)
        try:
            claims = self.jwt_service.verify(token, expected_kind=TokenKind.ACCESS)
        except JWTError as e:
            logger.info("Account deletion failed: invalid token", error=str(e))
            raise UnauthorizedError("Invalid token") from e

        if claims.subject != email:
            logger.warning("Account deletion refused: token subject mismatch", email=email)
            raise ForbiddenError("Token does not belong to this user")

        user = await self._get_user(email)
        if user is None:
            raise NotFoundError("User not found")
        user_id = user.id

        try:
            await self.user_repo.delete_by_email(email)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Account deletion failed: store error", user_id=user_id, error=str(e))
            raise InternalError("Failed to delete account") from e

        try:
            self.jwt_service.revoke(token)
        except JWTError as e:
            # The account is gone; the token can no longer reach a user.
            logger.warning("Token revocation after deletion failed", user_id=user_id, error=str(e))
        revoked = self.jwt_service.revoke_all_for_subject(email)

        logger.info("Account deleted", user_id=user_id, email=email, revoked_tokens=revoked)

    async def get_current_user(self, email: str) -> User:
        """Look up the user behind an authenticated request.

        Raises:
            NotFoundError: If the account no longer exists.
        """
        user = await self._get_user(normalize_email(email))
        if user is None:
            raise NotFoundError("User not found")
        return User.from_model(user)

    async def _get_user(self, email: str) -> UserModel | None:
        try:
            return await self.user_repo.get_by_email(email)
        except SQLAlchemyError as e:
            logger.error("User lookup failed", error=str(e))
            raise InternalError("Failed to fetch user") from e
