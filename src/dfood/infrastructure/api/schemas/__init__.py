"""Pydantic schemas for API requests and responses."""

from dfood.infrastructure.api.schemas.auth_schemas import (
    DeleteAccountRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UpdatePasswordRequest,
    UserResponse,
)

__all__ = [
    "DeleteAccountRequest",
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RegisterRequest",
    "UpdatePasswordRequest",
    "UserResponse",
]
