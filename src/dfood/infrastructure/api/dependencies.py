"""FastAPI dependencies for authentication.

Holds the request gate: it pulls the bearer token out of the
``Authorization`` header, verifies it with the application's JWT service
and rejects the request with 401 before any handler runs.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from dfood.core.logging import get_logger
from dfood.domain.services import AuthService
from dfood.infrastructure.auth import (
    AuthenticatedUser,
    InvalidTokenError,
    JWTService,
    TokenExpiredError,
    TokenKind,
    TokenRevokedError,
)
from dfood.infrastructure.persistence.database import get_db_session
from dfood.infrastructure.persistence.repositories import UserRepository

logger = get_logger(__name__)


def get_jwt_service(request: Request) -> JWTService:
    """Get the process-wide JWT service from app state."""
    return request.app.state.jwt_service


def get_auth_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
) -> AuthService:
    """Build the auth service for one request."""
    return AuthService(session=session, user_repo=UserRepository(session), jwt_service=jwt_service)


def extract_token(authorization: str | None) -> str | None:
    """Get the token from an Authorization header value.

    Accepts ``Bearer <token>`` as well as the bare token.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    if len(parts) == 1:
        return parts[0]
    return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Return the raw token from the Authorization header or reject with 401."""
    if authorization is None:
        logger.info("Authentication failed: missing Authorization header")
        raise _unauthorized("No authorization token provided")

    token = extract_token(authorization)
    if token is None:
        logger.info("Authentication failed: invalid Authorization header format")
        raise _unauthorized("Invalid authorization token")
    return token


async def get_current_user(
    token: Annotated[str, Depends(require_token)],
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
) -> AuthenticatedUser:
    """Admit the request only if it carries a valid access token.

    Raises:
        HTTPException: 401 if the token is missing, malformed, badly signed,
            expired, revoked, or a refresh token.
    """
    try:
        claims = jwt_service.verify(token, expected_kind=TokenKind.ACCESS)
    except TokenExpiredError:
        logger.info("Authentication failed: token expired")
        raise _unauthorized("Token has expired")
    except TokenRevokedError:
        logger.info("Authentication failed: token revoked")
        raise _unauthorized("Token has been revoked")
    except InvalidTokenError as e:
        logger.info("Authentication failed: invalid token", error=str(e))
        raise _unauthorized("Invalid authorization token")

    return AuthenticatedUser(email=claims.subject, token=token, expires_at=claims.expires_at)


# Type aliases for dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
BearerToken = Annotated[str, Depends(require_token)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
