"""Signup and login schemas."""

import uuid
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from api.schemas.profiles import ProfileResponse


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72, description="bcrypt uses at most 72 bytes")
    full_name: Optional[str] = Field(None, max_length=200)

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_full_name(cls, v: Optional[str]) -> Optional[str]:
        """Blank names fall back to the provisioning default."""
        if isinstance(v, str):
            return v.strip() or None
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Lifetime in seconds")
    identity_id: uuid.UUID


class SignupResponse(TokenResponse):
    profile: ProfileResponse


class MeResponse(BaseModel):
    identity_id: uuid.UUID
    email: EmailStr
    profile: ProfileResponse
