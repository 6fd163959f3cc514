"""
Auth request/response schemas.
"""
from uuid import UUID

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    """Payload for POST /api/auth/register and POST /api/auth/login.

    Fields are optional here so that missing values reach the service layer
    and get its validation messages.
    """

    username: str | None = None
    password: str | None = None


class RegisterResponse(BaseModel):
    """Returned after a successful registration."""

    id: UUID
    username: str
    message: str = "User registered successfully"


class LoginResponse(BaseModel):
    """Returned after a successful login."""

    token: str
    username: str
    user_id: UUID
    message: str = "Login successful"
