"""Token types and decoded claim models for dfood session tokens."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TokenKind(str, Enum):
    """Kinds of session token issued by dfood."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Claims recovered from a verified session token.

    Attributes:
        subject: Email of the authenticated user.
        kind: Whether this is an access or refresh token.
        expires_at: Absolute expiry (UTC).
        token_id: Unique ``jti`` of the token.
    """

    subject: str
    kind: TokenKind
    expires_at: datetime
    token_id: str


@dataclass
class AuthenticatedUser:
    """The caller admitted by the request gate."""

    email: str
    token: str
    expires_at: datetime
