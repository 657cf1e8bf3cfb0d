"""Pydantic schemas for authentication API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request for account registration.

    Length policy is enforced by the credential store so it follows the
    configured minimum.
    """

    username: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=1024)


class LoginRequest(BaseModel):
    """Request for login."""

    username: str = ""
    password: str = ""


class AccountResponse(BaseModel):
    """Public view of an account. The password hash is never included."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    created_at: datetime


class AuthResponse(BaseModel):
    """Response with a session token."""

    token: str
    user: AccountResponse
    message: str


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
