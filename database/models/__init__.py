from database.models.identities import Identity
from database.models.profiles import Profile, UserRole
from database.models.jobs import Job, JobStatus
from database.models.applications import Application, ApplicationStatus
from database.models.saved_jobs import SavedJob

__all__ = [
    "Identity",
    "Profile",
    "UserRole",
    "Job",
    "JobStatus",
    "Application",
    "ApplicationStatus",
    "SavedJob",
]

# Row hooks (provisioning, timestamps, counters) register on import
from database import triggers  # noqa: E402,F401
