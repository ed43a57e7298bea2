"""
Profile endpoints.

Profiles are readable by anyone; each caller can only edit their own and
upload their own resume.
"""

import uuid

from fastapi import APIRouter, Depends, File, Path, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_caller, get_db, get_resume_storage, require_caller
from api.schemas.profiles import ProfileResponse, ProfileUpdate, ResumeUploadResponse
from api.services import profiles as profile_service
from core.middleware.authorization import Caller
from core.storage.base import ResumeStorage

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("/me", response_model=ProfileResponse, summary="Get My Profile")
async def get_my_profile(
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.get_profile(db, caller, caller.identity_id)
    return ProfileResponse.model_validate(profile)


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update My Profile",
    description="Change profile fields. Role may switch between job_seeker and recruiter.",
)
async def update_my_profile(
    payload: ProfileUpdate,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    profile = await profile_service.update_profile(db, caller, changes)
    return ProfileResponse.model_validate(profile)


@router.put(
    "/me/resume",
    response_model=ResumeUploadResponse,
    summary="Upload Resume",
    description="Upload or replace the caller's resume (max 5 MB).",
)
async def upload_resume(
    file: UploadFile = File(..., description="Resume document"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
    storage: ResumeStorage = Depends(get_resume_storage),
):
    data = await file.read()
    profile, key = await profile_service.upload_resume(
        db,
        caller,
        storage,
        filename=file.filename or "resume",
        data=data,
        content_type=file.content_type,
    )
    return ResumeUploadResponse(
        resume_url=profile.resume_url,
        key=key,
        size_bytes=len(data),
    )


@router.get("/{profile_id}", response_model=ProfileResponse, summary="Get Profile")
async def get_profile(
    profile_id: uuid.UUID = Path(..., description="Profile (identity) ID"),
    caller: Caller | None = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.get_profile(db, caller, profile_id)
    return ProfileResponse.model_validate(profile)
