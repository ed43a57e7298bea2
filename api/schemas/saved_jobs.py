"""Saved job schemas."""

import uuid
from datetime import datetime

from api.schemas.common import ORMModel
from api.schemas.jobs import JobResponse


class SavedJobResponse(ORMModel):
    id: uuid.UUID
    job_id: uuid.UUID
    user_id: uuid.UUID
    saved_at: datetime


class SavedJobWithJob(SavedJobResponse):
    job: JobResponse
