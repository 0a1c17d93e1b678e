"""JWT token service.

Issues and verifies the signed, time-limited session tokens used by the
dfood API, and tracks tokens revoked before their natural expiry.
Access tokens are short-lived, refresh tokens long-lived.
"""

import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from dfood.core.config import get_settings
from dfood.core.logging import get_logger
from dfood.infrastructure.auth.revocation_store import InMemoryRevocationStore, RevocationStore
from dfood.infrastructure.auth.token_types import TokenClaims, TokenKind

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token cannot be trusted."""

    pass


class MalformedTokenError(InvalidTokenError):
    """Raised when a token cannot be parsed or lacks required claims."""

    pass


class InvalidSignatureError(InvalidTokenError):
    """Raised when a token's signature does not match the current secret."""

    pass


class WrongTokenTypeError(MalformedTokenError):
    """Raised when a refresh token is presented where an access token is required, or vice versa."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class TokenRevokedError(JWTError):
    """Raised when a token has been revoked."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JWTService:
    """Service for issuing, verifying and revoking session tokens.

    One instance owns the signing secret and the revocation store for the
    whole process. It is built once at application start and handed to the
    auth service and the request gate; tests build their own instances.
    """

    ALGORITHM = "HS256"
    ISSUER = "dfood"
    REQUIRED_CLAIMS = ["exp", "sub", "type", "jti"]

    def __init__(
        self,
        secret_key: str | None = None,
        revocation_store: RevocationStore | None = None,
        clock: Clock | None = None,
        access_token_lifetime: timedelta | None = None,
        refresh_token_lifetime: timedelta | None = None,
    ) -> None:
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens. Defaults to the configured secret.
            revocation_store: Where revoked tokens are kept. Defaults to a fresh in-memory store.
            clock: Returns the current UTC time. Injected by tests.
            access_token_lifetime: Defaults to ``access_token_expire_minutes``.
            refresh_token_lifetime: Defaults to ``refresh_token_expire_days``.
        """
        settings = get_settings()
        self._secret_key = secret_key or settings.secret_key
        self._revocations = revocation_store or InMemoryRevocationStore()
        self._clock = clock or _utcnow
        self.access_token_lifetime = access_token_lifetime or timedelta(
            minutes=settings.access_token_expire_minutes
        )
        self.refresh_token_lifetime = refresh_token_lifetime or timedelta(
            days=settings.refresh_token_expire_days
        )
        # Guards the secret together with the revocation set so that
        # rotate_secret cannot interleave with a verify or revoke.
        self._lock = threading.RLock()

    @property
    def revocation_store(self) -> RevocationStore:
        return self._revocations

    def now(self) -> datetime:
        """Current time according to the injected clock."""
        return self._clock()

    def lifetime_for(self, kind: TokenKind) -> timedelta:
        if kind is TokenKind.REFRESH:
            return self.refresh_token_lifetime
        return self.access_token_lifetime

    def issue(self, subject: str, kind: TokenKind) -> str:
        """Issue a signed token for a subject.

        Args:
            subject: The user's email address.
            kind: Access (short-lived) or refresh (long-lived).

        Returns:
            Encoded JWT.

        Raises:
            ValueError: If the subject is empty.
            JWTError: If signing fails.
        """
        if not subject:
            raise ValueError("Token subject is required")

        kind = TokenKind(kind)
        now = self.now()
        payload = {
            "iss": self.ISSUER,
            "sub": subject,
            "iat": now,
            "exp": now + self.lifetime_for(kind),
            "jti": str(uuid.uuid4()),
            "type": kind.value,
        }

        with self._lock:
            secret = self._secret_key
        try:
            return jwt.encode(payload, secret, algorithm=self.ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise JWTError("Failed to sign token") from e

    def create_access_token(self, subject: str) -> str:
        return self.issue(subject, TokenKind.ACCESS)

    def create_refresh_token(self, subject: str) -> str:
        return self.issue(subject, TokenKind.REFRESH)

    def verify(self, token: str, expected_kind: TokenKind | None = None) -> TokenClaims:
        """Verify a token and return its claims.

        Checks, in order: revocation, signature and structure, expiry, and
        (when ``expected_kind`` is given) the token kind.

        Args:
            token: The encoded JWT.
            expected_kind: Require an access or refresh token.

        Returns:
            The decoded claims.

        Raises:
            TokenRevokedError: If the token was revoked.
            InvalidSignatureError: If the signature does not match the current secret.
            MalformedTokenError: If the token cannot be parsed or is of the wrong kind.
            TokenExpiredError: If the token's expiry has passed.
        """
        with self._lock:
            if self._revocations.is_revoked(token):
                raise TokenRevokedError("Token has been revoked")
            payload = self._decode(token, self._secret_key)

        claims = self._claims_from_payload(payload)

        # The signature says nothing about freshness; expiry is checked here
        # against the injected clock rather than by PyJWT.
        if claims.expires_at < self.now():
            raise TokenExpiredError("Token has expired")

        if expected_kind is not None and claims.kind is not TokenKind(expected_kind):
            raise WrongTokenTypeError(f"Token type must be '{TokenKind(expected_kind).value}'")

        return claims

    def revoke(self, token: str) -> None:
        """Revoke a token.

        Revoking an already-revoked token is a no-op.

        Raises:
            InvalidTokenError: If the token is malformed or badly signed.
            TokenExpiredError: If the token has already expired.
        """
        with self._lock:
            if self._revocations.is_revoked(token):
                return
            claims = self.verify(token)
            self._revocations.revoke(token, claims.subject, claims.expires_at)

        logger.info("Token revoked", subject=claims.subject, token_id=claims.token_id)

    def revoke_all_for_subject(self, subject: str) -> int:
        """Best-effort revocation of every known token of a subject.

        Issued tokens are not recorded, so the only tokens known here are
        those already in the revocation store; tokens that were never passed
        through :meth:`revoke` stay valid until they expire. Use
        :meth:`rotate_secret` to invalidate everything at once.

        Returns:
            Number of the subject's tokens known to be revoked.
        """
        with self._lock:
            entries = self._revocations.entries_for_subject(subject)

        logger.info("Revoked known tokens for subject", subject=subject, count=len(entries))
        return len(entries)

    def rotate_secret(self, new_secret: str) -> None:
        """Replace the signing secret.

        Every token issued under the old secret now fails verification with
        :class:`InvalidSignatureError`, so the revocation set is cleared.

        Raises:
            ValueError: If the new secret is empty.
        """
        if not new_secret:
            raise ValueError("Signing secret must not be empty")

        with self._lock:
            self._secret_key = new_secret
            self._revocations.clear()

        logger.warning("Signing secret rotated; all previously issued tokens are invalid")

    def get_expires_in(self, kind: TokenKind = TokenKind.ACCESS) -> int:
        """Get the lifetime of a token kind in seconds."""
        return int(self.lifetime_for(kind).total_seconds())

    def _decode(self, token: str, secret: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self.ALGORITHM],
                issuer=self.ISSUER,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": self.REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError("Token signature is invalid") from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError("Malformed token") from e

    @staticmethod
    def _claims_from_payload(payload: dict[str, Any]) -> TokenClaims:
        subject = payload.get("sub")
        exp = payload.get("exp")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("Token subject is missing")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise MalformedTokenError("Token expiry is invalid")
        try:
            kind = TokenKind(payload.get("type"))
        except ValueError as e:
            raise MalformedTokenError("Unknown token type") from e

        return TokenClaims(
            subject=subject,
            kind=kind,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
            token_id=str(payload.get("jti")),
        )
