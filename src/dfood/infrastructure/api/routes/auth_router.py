"""Authentication API routes.

Provides endpoints for registration, login, logout, password change,
account deletion and the current-user lookup. Failures raised by the auth
service are turned into JSON error responses by the application's
exception handler.
"""

from fastapi import APIRouter, status

from dfood.infrastructure.api.dependencies import AuthServiceDep, BearerToken, CurrentUser
from dfood.infrastructure.api.schemas import (
    DeleteAccountRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UpdatePasswordRequest,
    UserResponse,
)

router = APIRouter()


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        409: {"model": ErrorResponse, "description": "Conflict - email already exists"},
    },
)
async def register(request: RegisterRequest, auth_service: AuthServiceDep) -> UserResponse:
    """Register a new user.

    The password is hashed before storage and never returned.
    """
    user = await auth_service.register(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        phone_number=request.phone_number,
        user_id=request.id,
    )
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def login(request: LoginRequest, auth_service: AuthServiceDep) -> LoginResponse:
    """Authenticate a user and return an access and refresh token.

    Unknown email and wrong password return the same 401 body.
    """
    result = await auth_service.login(request.email, request.password)
    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
        user=UserResponse.model_validate(result.user),
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid token"}},
)
async def logout(token: BearerToken, auth_service: AuthServiceDep) -> MessageResponse:
    """Revoke the token presented in the Authorization header."""
    await auth_service.logout(token)
    return MessageResponse(message="Logged out")


@router.delete(
    "/delete-account",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid token"},
        403: {"model": ErrorResponse, "description": "Token belongs to another user"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def delete_account(
    request: DeleteAccountRequest,
    token: BearerToken,
    auth_service: AuthServiceDep,
) -> MessageResponse:
    """Delete the account identified by ``email``.

    The bearer token must have been issued to that same email.
    """
    await auth_service.delete_account(request.email, token)
    return MessageResponse(message="Account deleted")


@router.post(
    "/password/update",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "New password equals current password"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def update_password(
    request: UpdatePasswordRequest, auth_service: AuthServiceDep
) -> MessageResponse:
    """Change a user's password after checking the current one."""
    await auth_service.update_password(
        request.email, request.current_password, request.new_password
    )
    return MessageResponse(message="Password updated")


@router.get(
    "/current-user",
    response_model=UserResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid token"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def current_user(user: CurrentUser, auth_service: AuthServiceDep) -> UserResponse:
    """Return the user the access token was issued to."""
    return UserResponse.model_validate(await auth_service.get_current_user(user.email))
