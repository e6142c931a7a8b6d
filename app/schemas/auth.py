from datetime import datetime

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    id: str
    name: str


class RegisterRequest(BaseModel):
    """Length rules are enforced by the identity service."""

    name: str = Field(..., max_length=32)
    secret: str = Field(..., max_length=128)


class LoginRequest(BaseModel):
    name: str
    secret: str


class SessionResponse(BaseModel):
    """A session credential bound to a user."""

    token: str
    user_id: str
    name: str
    expires_at: datetime
