"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request body for user registration."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
    first_name: str = Field("", max_length=100, description="Given name")
    last_name: str = Field("", max_length=100, description="Family name")
    phone_number: str | None = Field(None, max_length=32, description="Contact number")
    id: str | None = Field(
        None,
        max_length=64,
        description="Client-chosen user ID (generated if not provided)",
    )


class LoginRequest(BaseModel):
    """Request body for login."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class UpdatePasswordRequest(BaseModel):
    """Request body for changing a password."""

    email: EmailStr = Field(..., description="User's email address")
    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=1, description="New password")


class DeleteAccountRequest(BaseModel):
    """Request body for account deletion; the token comes from the Authorization header."""

    email: EmailStr = Field(..., description="Email of the account to delete")


class UserResponse(BaseModel):
    """User information in auth responses. Never includes the password hash."""

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")
    first_name: str = Field("", description="Given name")
    last_name: str = Field("", description="Family name")
    phone_number: str | None = Field(None, description="Contact number")
    profile_image_url: str | None = Field(None, description="Avatar URL")
    bio: str | None = Field(None, description="Profile text")
    first_time_login: bool = Field(..., description="Whether onboarding is pending")
    email_verified: bool = Field(..., description="Whether the email is confirmed")
    created_at: datetime = Field(..., description="When the user was created")
    updated_at: datetime = Field(..., description="When the user was last updated")

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """Response for a successful login."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field("bearer", description="Authorization scheme")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserResponse = Field(..., description="User information")


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str = Field(..., description="Human-readable result")


class ErrorResponse(BaseModel):
    """Error body for all failed auth operations."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
