"""
Authorization layer: row-level access policies.

Every read and write goes through a policy table keyed by entity type. Each
entry holds:

1. One predicate per operation (READ, CREATE, UPDATE, DELETE) deciding
   whether a caller may perform it on a given row. An operation with no
   predicate is denied.
2. A visibility clause for the caller, added to every SELECT so rows the
   caller may not read behave exactly like rows that do not exist.

Writes load their target through the visibility clause (missing means not
found), then run the operation predicate before anything is flushed.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy import select, exists, or_, true, false
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from database.errors import RecordNotFound
from database.models.profiles import Profile, UserRole
from database.models.jobs import Job, JobStatus
from database.models.applications import Application
from database.models.saved_jobs import SavedJob
from core.security import AuditAction, ResourceType, log_audit_event
from core.storage.base import resume_key_owner

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    """Operations a policy can allow."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Caller:
    """The authenticated identity behind a request."""

    identity_id: uuid.UUID
    role: UserRole
    email: Optional[str] = None

    @property
    def is_recruiter(self) -> bool:
        return self.role == UserRole.RECRUITER

    @property
    def is_job_seeker(self) -> bool:
        return self.role == UserRole.JOB_SEEKER


@dataclass(frozen=True)
class ResumeObject:
    """A stored resume at ``{identity_id}/resume.{ext}``. Malformed keys have no owner."""

    key: str

    @property
    def owner_id(self) -> Optional[uuid.UUID]:
        return resume_key_owner(self.key)


class AuthorizationError(Exception):
    """Raised when a policy rejects an operation."""

    status_code = 403
    code = "ACCESS_DENIED"
    default_message = "You don't have permission to perform this action"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AccessDenied(AuthorizationError):
    """Raised when the caller lacks the relationship a row policy requires."""
    pass


class RoleRequired(AuthorizationError):
    """Raised when an endpoint is limited to a profile role the caller lacks."""

    code = "ROLE_REQUIRED"


Predicate = Callable[[AsyncSession, Optional[Caller], Any], Awaitable[bool]]
Visibility = Callable[[Optional[Caller]], ColumnElement[bool]]


@dataclass
class EntityPolicy:
    resource_type: ResourceType
    rules: dict[Operation, Predicate]
    visibility: Visibility


# ==================== Shared checks ===================== #

async def _owns_job(db: AsyncSession, caller: Caller, job_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(
            exists().where(Job.id == job_id, Job.recruiter_id == caller.identity_id)
        )
    )
    return bool(result.scalar())


def _jobs_owned_by(caller: Caller):
    return select(Job.id).where(Job.recruiter_id == caller.identity_id)


# ==================== Profile ===================== #

async def _profile_read(db, caller, row: Profile) -> bool:
    return True


async def _profile_write(db, caller, row: Profile) -> bool:
    return caller is not None and row.id == caller.identity_id


def _profile_visibility(caller):
    return true()


# ==================== Job ===================== #

async def _job_read(db, caller, row: Job) -> bool:
    if row.status == JobStatus.OPEN:
        return True
    return caller is not None and row.recruiter_id == caller.identity_id


async def _job_create(db, caller, row: Job) -> bool:
    return (
        caller is not None
        and row.recruiter_id == caller.identity_id
        and caller.is_recruiter
    )


async def _job_owner(db, caller, row: Job) -> bool:
    return caller is not None and row.recruiter_id == caller.identity_id


def _job_visibility(caller):
    if caller is None:
        return Job.status == JobStatus.OPEN
    return or_(Job.status == JobStatus.OPEN, Job.recruiter_id == caller.identity_id)


# ==================== Application ===================== #

async def _application_read(db, caller, row: Application) -> bool:
    if caller is None:
        return False
    if row.applicant_id == caller.identity_id:
        return True
    return await _owns_job(db, caller, row.job_id)


async def _application_create(db, caller, row: Application) -> bool:
    return (
        caller is not None
        and row.applicant_id == caller.identity_id
        and caller.is_job_seeker
    )


async def _application_update(db, caller, row: Application) -> bool:
    # applicants cannot edit an application once submitted
    return caller is not None and await _owns_job(db, caller, row.job_id)


def _application_visibility(caller):
    if caller is None:
        return false()
    return or_(
        Application.applicant_id == caller.identity_id,
        Application.job_id.in_(_jobs_owned_by(caller)),
    )


# ==================== SavedJob ===================== #

async def _saved_job_owner(db, caller, row: SavedJob) -> bool:
    return caller is not None and row.user_id == caller.identity_id


def _saved_job_visibility(caller):
    if caller is None:
        return false()
    return SavedJob.user_id == caller.identity_id


# ==================== Resume objects ===================== #

async def _resume_owner(db, caller, row: ResumeObject) -> bool:
    return caller is not None and row.owner_id == caller.identity_id


async def _resume_read(db, caller, row: ResumeObject) -> bool:
    if caller is None or row.owner_id is None:
        return False
    if row.owner_id == caller.identity_id:
        return True
    if not caller.is_recruiter:
        return False
    result = await db.execute(
        select(
            exists().where(
                Application.applicant_id == row.owner_id,
                Application.job_id.in_(_jobs_owned_by(caller)),
            )
        )
    )
    return bool(result.scalar())


POLICIES: dict[type, EntityPolicy] = {
    Profile: EntityPolicy(
        resource_type=ResourceType.PROFILE,
        rules={
            Operation.READ: _profile_read,
            Operation.CREATE: _profile_write,
            Operation.UPDATE: _profile_write,
        },
        visibility=_profile_visibility,
    ),
    Job: EntityPolicy(
        resource_type=ResourceType.JOB,
        rules={
            Operation.READ: _job_read,
            Operation.CREATE: _job_create,
            Operation.UPDATE: _job_owner,
            Operation.DELETE: _job_owner,
        },
        visibility=_job_visibility,
    ),
    Application: EntityPolicy(
        resource_type=ResourceType.APPLICATION,
        rules={
            Operation.READ: _application_read,
            Operation.CREATE: _application_create,
            Operation.UPDATE: _application_update,
        },
        visibility=_application_visibility,
    ),
    SavedJob: EntityPolicy(
        resource_type=ResourceType.SAVED_JOB,
        rules={
            Operation.READ: _saved_job_owner,
            Operation.CREATE: _saved_job_owner,
            Operation.DELETE: _saved_job_owner,
        },
        visibility=_saved_job_visibility,
    ),
    ResumeObject: EntityPolicy(
        resource_type=ResourceType.RESUME,
        rules={
            Operation.READ: _resume_read,
            Operation.CREATE: _resume_owner,
            Operation.UPDATE: _resume_owner,
            Operation.DELETE: _resume_owner,
        },
        visibility=lambda caller: false(),
    ),
}


def policy_for(entity: type) -> EntityPolicy:
    try:
        return POLICIES[entity]
    except KeyError:
        raise LookupError(f"No access policy registered for {entity.__name__}")


def visible(caller: Optional[Caller], entity: type) -> ColumnElement[bool]:
    """WHERE clause restricting ``entity`` to rows ``caller`` may read."""
    return policy_for(entity).visibility(caller)


async def is_allowed(
    db: AsyncSession,
    caller: Optional[Caller],
    operation: Operation,
    row: Any,
) -> bool:
    """Evaluate the policy predicate for ``operation`` on ``row``."""
    rule = policy_for(type(row)).rules.get(operation)
    if rule is None:
        return False
    return await rule(db, caller, row)


async def authorize(
    db: AsyncSession,
    caller: Optional[Caller],
    operation: Operation,
    row: Any,
) -> None:
    """
    Raise ``AccessDenied`` unless the policy allows ``operation`` on ``row``.

    Denials are written to the audit log.
    """
    if await is_allowed(db, caller, operation, row):
        return

    policy = policy_for(type(row))
    resource_id = getattr(row, "id", None) or getattr(row, "key", None)
    logger.warning(
        f"Policy denied {operation.value} on {policy.resource_type.value} "
        f"{resource_id} for {caller.identity_id if caller else 'anonymous'}"
    )
    await log_audit_event(
        action=AuditAction.ACCESS_DENIED,
        resource_type=policy.resource_type,
        resource_id=resource_id,
        identity_id=caller.identity_id if caller else None,
        details={"operation": operation.value},
    )
    raise AccessDenied()


async def load_authorized(
    db: AsyncSession,
    caller: Optional[Caller],
    entity: type,
    row_id: Any,
    operation: Operation = Operation.READ,
    options: tuple = (),
):
    """
    Load one row through the caller's visibility clause and authorize
    ``operation`` on it.

    Raises:
        RecordNotFound: the row does not exist or the caller cannot see it
        AccessDenied: the caller can see the row but not perform ``operation``
    """
    query = (
        select(entity)
        .where(entity.id == row_id, visible(caller, entity))
        .options(*options)
    )
    row = (await db.execute(query)).scalar_one_or_none()
    if row is None:
        raise RecordNotFound(f"{entity.__name__} not found")
    if operation != Operation.READ:
        await authorize(db, caller, operation, row)
    return row


