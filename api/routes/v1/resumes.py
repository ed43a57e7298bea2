"""Resume downloads. Profile and application ``resume_url`` values point here."""

from fastapi import APIRouter, Depends, Path
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db, get_resume_storage, require_caller
from api.services import profiles as profile_service
from core.middleware.authorization import Caller
from core.storage.base import ResumeStorage

router = APIRouter(prefix="/resumes", tags=["Resumes"])


@router.get(
    "/{key:path}",
    summary="Download Resume",
    description="Readable by the owner and by recruiters the owner applied to.",
    response_class=Response,
)
async def download_resume(
    key: str = Path(..., description="Storage key, {identity_id}/resume.{ext}"),
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
    storage: ResumeStorage = Depends(get_resume_storage),
):
    data, media_type = await profile_service.download_resume(db, caller, storage, key)
    filename = key.rsplit("/", 1)[-1]
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
