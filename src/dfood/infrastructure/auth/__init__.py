"""Authentication infrastructure components.

This module provides password hashing, the JWT token service and the
revocation store used for session trust.
"""

from dfood.infrastructure.auth.jwt_service import (
    InvalidSignatureError,
    InvalidTokenError,
    JWTError,
    JWTService,
    MalformedTokenError,
    TokenExpiredError,
    TokenRevokedError,
    WrongTokenTypeError,
)
from dfood.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    verify_password,
)
from dfood.infrastructure.auth.revocation_store import (
    InMemoryRevocationStore,
    RevocationEntry,
    RevocationStore,
    run_revocation_sweeper,
)
from dfood.infrastructure.auth.token_types import AuthenticatedUser, TokenClaims, TokenKind

__all__ = [
    "AuthenticatedUser",
    "DUMMY_PASSWORD_HASH",
    "InMemoryRevocationStore",
    "InvalidSignatureError",
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "MalformedTokenError",
    "RevocationEntry",
    "RevocationStore",
    "TokenClaims",
    "TokenExpiredError",
    "TokenKind",
    "TokenRevokedError",
    "WrongTokenTypeError",
    "hash_password",
    "run_revocation_sweeper",
    "verify_password",
]
