from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class SessionIdentity(BaseModel):
    id: str
    email: EmailStr
    full_name: str | None = None
    tier: str
    is_admin: bool


class AdminStatus(BaseModel):
    is_admin: bool
