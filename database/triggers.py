"""
Row hooks that run inside the flush that writes the row.

- Provisioning: inserting an Identity inserts its Profile on the same
  connection, so both rows commit or roll back together. The insert goes
  straight to the table and never passes through the policy layer.
- Timestamps: any ORM update of Profile, Job or Application stamps
  ``updated_at`` with the current time, replacing whatever the caller set.
- Counters: inserting an Application bumps the job's ``applications_count``
  with a single ``SET n = n + 1`` statement.
"""

import logging

from sqlalchemy import event, insert, update

from core.config import settings
from core.utils.datetime import now
from database.models.identities import Identity
from database.models.profiles import Profile, UserRole
from database.models.jobs import Job
from database.models.applications import Application

logger = logging.getLogger(__name__)

DEFAULT_FULL_NAME = "User"


def profile_values_for(identity: Identity) -> dict:
    """Column values for the profile provisioned from ``identity``."""
    meta = identity.raw_user_meta_data or {}
    full_name = meta.get("full_name")
    if full_name is None:
        full_name = DEFAULT_FULL_NAME
    stamp = now()
    return {
        "id": identity.id,
        "email": identity.email,
        "full_name": full_name,
        "role": UserRole.JOB_SEEKER,
        "created_at": stamp,
        "updated_at": stamp,
    }


@event.listens_for(Identity, "after_insert")
def provision_profile(mapper, connection, target: Identity) -> None:
    connection.execute(insert(Profile.__table__).values(**profile_values_for(target)))
    logger.info("Provisioned profile for identity %s", target.id)


@event.listens_for(Profile, "before_update")
@event.listens_for(Job, "before_update")
@event.listens_for(Application, "before_update")
def stamp_updated_at(mapper, connection, target) -> None:
    target.updated_at = now()


@event.listens_for(Application, "after_insert")
def count_application(mapper, connection, target: Application) -> None:
    if not settings.maintain_job_counters:
        return
    jobs = Job.__table__
    connection.execute(
        update(jobs)
        .where(jobs.c.id == target.job_id)
        # counter bumps leave the job's own updated_at alone
        .values(
            applications_count=jobs.c.applications_count + 1,
            updated_at=jobs.c.updated_at,
        )
    )
