"""
Security utilities.

Password hashing, access tokens, PII masking and audit logging for the
job board API.
"""

import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Set, TypedDict
from enum import Enum

import bcrypt
import jwt

from core.config import settings

logger = logging.getLogger("security.audit")


class AuditAction(str, Enum):
    """Audit log action types."""
    # Write operations
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    # Status changes
    STATUS_CHANGE = "STATUS_CHANGE"

    # Identity
    SIGNUP = "SIGNUP"
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"

    # Policy layer
    ACCESS_DENIED = "ACCESS_DENIED"


class ResourceType(str, Enum):
    """Resource types for audit logging."""
    IDENTITY = "IDENTITY"
    PROFILE = "PROFILE"
    JOB = "JOB"
    APPLICATION = "APPLICATION"
    SAVED_JOB = "SAVED_JOB"
    RESUME = "RESUME"


# PII fields that should be masked in logs
PII_FIELDS: Set[str] = {
    "email", "phone", "full_name", "name",
    "location", "bio", "cover_letter",
    "salary_min", "salary_max",
}


class JWTPayload(TypedDict, total=False):
    sub: str
    email: str
    type: str
    iat: int
    exp: int
    jti: str


# ==================== Passwords ===================== #

def hash_password(password: str) -> str:
    """Hash a password with bcrypt (a fresh salt every call)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed hash
        return False


# ==================== Tokens ===================== #

def create_access_token(
    identity_id: uuid.UUID | str,
    email: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed access token for an identity.

    The ``sub`` claim carries the identity id; the authentication middleware
    resolves the caller from it.
    """
    issued = datetime.now(timezone.utc)
    expires = issued + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": str(identity_id),
        "email": email,
        "type": "access",
        "iat": issued,
        "exp": expires,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(
        payload,
        secret_key or settings.jwt_secret_key,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def verify_jwt_token(
    token: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> JWTPayload:
    """
    Decode and verify an access token.

    Raises:
        jwt.ExpiredSignatureError: token is past its ``exp``
        jwt.InvalidTokenError: anything else wrong with it
    """
    payload = jwt.decode(
        token,
        secret_key or settings.jwt_secret_key,
        algorithms=[algorithm or settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Not an access token")
    return payload


# ==================== Audit ===================== #

def mask_pii(data: Any, depth: int = 0) -> Any:
    """
    Recursively mask PII fields in data structures.

    Args:
        data: Data to mask (dict, list, or primitive)
        depth: Current recursion depth (max 10)

    Returns:
        Data with PII fields masked
    """
    if depth > 10:
        return "[MAX_DEPTH]"

    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if key.lower() in PII_FIELDS:
                if isinstance(value, str) and len(value) > 0:
                    # Partial masking: show first char and length indicator
                    masked[key] = f"{value[0]}***[{len(value)}]"
                else:
                    masked[key] = "[MASKED]"
            else:
                masked[key] = mask_pii(value, depth + 1)
        return masked
    elif isinstance(data, list):
        return [mask_pii(item, depth + 1) for item in data[:5]]  # Limit list items
    else:
        return data


async def log_audit_event(
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: Optional[Any] = None,
    identity_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
    contains_pii: bool = False,
):
    """
    Log an audit event.

    Emitted as one JSON document per line on the ``security.audit`` logger.
    """
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": "AUDIT",
        "action": action.value,
        "resource_type": resource_type.value,
        "resource_id": str(resource_id) if resource_id else None,
        "identity_id": str(identity_id) if identity_id else None,
        "contains_pii": contains_pii,
        "details": mask_pii(details) if details and contains_pii else details,
    }

    logger.info(json.dumps(event, default=str))
