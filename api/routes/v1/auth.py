"""
Authentication endpoints.

Provides:
- Email/password signup (the profile is provisioned automatically)
- Login issuing a bearer token
- The current caller's identity and profile
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db, require_caller
from api.schemas.auth import (
    LoginRequest,
    MeResponse,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from api.schemas.profiles import ProfileResponse
from api.services import auth as auth_service
from core.middleware.authorization import Caller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Create an account. A job seeker profile is created with it.",
)
async def signup(payload: SignupRequest, db: AsyncSession = Depends(get_db)):
    identity, profile = await auth_service.signup(
        db,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
    )
    token, expires_in = auth_service.issue_token(identity)
    logger.info(f"New identity {identity.id} signed up")
    return SignupResponse(
        access_token=token,
        expires_in=expires_in,
        identity_id=identity.id,
        profile=ProfileResponse.model_validate(profile),
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log In",
    description="Exchange email and password for a bearer token.",
)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    identity = await auth_service.login(db, payload.email, payload.password)
    token, expires_in = auth_service.issue_token(identity)
    return TokenResponse(
        access_token=token,
        expires_in=expires_in,
        identity_id=identity.id,
    )


@router.get("/me", response_model=MeResponse, summary="Current Caller")
async def me(
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    """Identity and profile behind the bearer token."""
    identity, profile = await auth_service.get_identity_with_profile(db, caller)
    return MeResponse(
        identity_id=identity.id,
        email=identity.email,
        profile=ProfileResponse.model_validate(profile),
    )
