"""
Identity service: signup, login and token issuing.

Signup only inserts the identity. Its profile is created by the
provisioning hook in the same flush, so a failed signup never leaves a
half-provisioned account behind.
"""

from typing import Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.middleware.authentication import InvalidCredentialsError
from core.middleware.authorization import Caller
from core.security import (
    AuditAction,
    ResourceType,
    create_access_token,
    hash_password,
    log_audit_event,
    verify_password,
)
from database.errors import UniqueViolation, RecordNotFound, classify_integrity_error
from database.models.identities import Identity
from database.models.profiles import Profile

logger = logging.getLogger(__name__)


class EmailTakenError(UniqueViolation):
    code = "EMAIL_TAKEN"
    default_message = "An account with this email already exists"


def issue_token(identity: Identity) -> tuple[str, int]:
    """Access token for ``identity`` and its lifetime in seconds."""
    token = create_access_token(identity.id, identity.email)
    return token, settings.access_token_expire_minutes * 60


async def signup(
    db: AsyncSession,
    email: str,
    password: str,
    full_name: Optional[str] = None,
) -> tuple[Identity, Profile]:
    """
    Create an identity and return it with its provisioned profile.

    Raises:
        EmailTakenError: the email already belongs to an identity
    """
    identity = Identity(
        email=email.lower(),
        password_hash=hash_password(password),
        raw_user_meta_data={} if full_name is None else {"full_name": full_name},
    )
    db.add(identity)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        violation = classify_integrity_error(exc)
        if isinstance(violation, UniqueViolation):
            raise EmailTakenError() from exc
        raise violation from exc

    profile = await db.get(Profile, identity.id)
    await log_audit_event(
        action=AuditAction.SIGNUP,
        resource_type=ResourceType.IDENTITY,
        resource_id=identity.id,
        identity_id=identity.id,
    )
    return identity, profile


async def login(db: AsyncSession, email: str, password: str) -> Identity:
    """
    Check credentials.

    Raises:
        InvalidCredentialsError: unknown email or wrong password; the two
            cases are indistinguishable to the caller
    """
    result = await db.execute(
        select(Identity).where(func.lower(Identity.email) == email.lower())
    )
    identity = result.scalar_one_or_none()

    if identity is None or not verify_password(password, identity.password_hash):
        await log_audit_event(
            action=AuditAction.LOGIN_FAILED,
            resource_type=ResourceType.IDENTITY,
            resource_id=identity.id if identity else None,
            details={"email": email},
            contains_pii=True,
        )
        raise InvalidCredentialsError()

    await log_audit_event(
        action=AuditAction.LOGIN,
        resource_type=ResourceType.IDENTITY,
        resource_id=identity.id,
        identity_id=identity.id,
    )
    return identity


async def get_identity_with_profile(
    db: AsyncSession, caller: Caller
) -> tuple[Identity, Profile]:
    identity = await db.get(Identity, caller.identity_id)
    profile = await db.get(Profile, caller.identity_id)
    if identity is None or profile is None:
        raise RecordNotFound("Identity not found")
    return identity, profile
