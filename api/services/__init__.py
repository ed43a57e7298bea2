"""
API Services Layer.

Database operations behind the API endpoints. Every function takes the
session and the caller, and checks access through the entity policies.
"""

from api.services.auth import (
    signup,
    login,
    get_identity_with_profile,
)

from api.services.profiles import (
    get_profile,
    update_profile,
    upload_resume,
    download_resume,
)

from api.services.jobs import (
    list_jobs,
    list_recruiter_jobs,
    get_job,
    create_job,
    update_job,
    delete_job,
)

from api.services.applications import (
    apply_to_job,
    list_my_applications,
    list_received_applications,
    get_application,
    update_application_status,
)

from api.services.saved_jobs import (
    list_saved_jobs,
    save_job,
    unsave_job,
)

from api.services.analytics import (
    dashboard,
    recruiter_analytics,
)

__all__ = [
    # Auth
    "signup",
    "login",
    "get_identity_with_profile",
    # Profiles
    "get_profile",
    "update_profile",
    "upload_resume",
    "download_resume",
    # Jobs
    "list_jobs",
    "list_recruiter_jobs",
    "get_job",
    "create_job",
    "update_job",
    "delete_job",
    # Applications
    "apply_to_job",
    "list_my_applications",
    "list_received_applications",
    "get_application",
    "update_application_status",
    # Saved jobs
    "list_saved_jobs",
    "save_job",
    "unsave_job",
    # Analytics
    "dashboard",
    "recruiter_analytics",
]
