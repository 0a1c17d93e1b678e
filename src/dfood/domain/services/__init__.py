"""Domain services for dfood."""

from dfood.domain.services.auth_service import (
    AuthErrorKind,
    AuthService,
    AuthServiceError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InternalError,
    LoginResult,
    NotFoundError,
    UnauthorizedError,
)
from dfood.domain.services.id_generator import IdGenerator, generate_user_id

__all__ = [
    "AuthErrorKind",
    "AuthService",
    "AuthServiceError",
    "BadRequestError",
    "ConflictError",
    "ForbiddenError",
    "IdGenerator",
    "InternalError",
    "LoginResult",
    "NotFoundError",
    "UnauthorizedError",
    "generate_user_id",
]
