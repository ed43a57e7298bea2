"""
Authentication middleware resolving the caller behind each request.

This middleware:
1. Reads an optional ``Authorization: Bearer <jwt>`` header
2. Verifies the token and resolves its ``sub`` claim to an identity
3. Loads that identity's profile role
4. Places a ``Caller`` (or ``None`` for anonymous requests) in the request
   scope under ``"caller"``

Anonymous requests are let through; endpoints that need a caller depend on
``require_caller``. A token that is present but bad is rejected here.
"""

import logging
import uuid
from typing import Callable, Optional
from datetime import datetime, timezone
import jwt
from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import select

from database.engine import AsyncSessionLocal
from database.models.profiles import Profile, UserRole
from core.security import verify_jwt_token
from core.middleware.authorization import Caller, RoleRequired

logger = logging.getLogger(__name__)

# Paths that never look at the Authorization header
PUBLIC_ENDPOINTS = [
    "/",
    "/health",
    "/ready",
    "/api/v1/auth/login",
    "/api/v1/auth/signup",
    "/docs",
    "/redoc",
    "/openapi.json",
]


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_REQUIRED"
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""

    code = "TOKEN_EXPIRED"
    default_message = "Authentication token has expired. Please log in again."


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid."""

    code = "TOKEN_INVALID"
    default_message = "Invalid authentication token."


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not match an identity."""

    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class AuthenticationMiddleware:
    """
    Pure ASGI middleware so the caller lands in the shared scope before the
    logging middleware writes its completion line.
    """

    def __init__(
        self,
        app: Callable,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
    ):
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification
            jwt_algorithm: JWT signing algorithm
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        scope["caller"] = None

        if self._is_public_endpoint(request.url.path):
            await self.app(scope, receive, send)
            return

        token = self._extract_token(request)
        if token is not None:
            try:
                scope["caller"] = await self._resolve_caller(token)
            except AuthenticationError as exc:
                logger.warning(f"Rejected token on {request.method} {request.url.path}: {exc.code}")
                await self._send_error_response(scope, receive, send, exc)
                return

        await self.app(scope, receive, send)

    def _is_public_endpoint(self, path: str) -> bool:
        if path in PUBLIC_ENDPOINTS:
            return True
        public_prefixes = ["/docs", "/redoc", "/openapi"]
        return any(path.startswith(prefix) for prefix in public_prefixes)

    def _extract_token(self, request: Request) -> Optional[str]:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:]
        return None

    async def _resolve_caller(self, token: str) -> Caller:
        """
        Verify ``token`` and build the caller from the identity's profile.

        Raises:
            TokenExpiredError: token is past its expiry
            TokenInvalidError: bad signature, malformed claims, or no profile
        """
        try:
            payload = verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}")

        try:
            identity_id = uuid.UUID(payload["sub"])
        except (KeyError, ValueError):
            raise TokenInvalidError("Token subject is not an identity id")

        async with AsyncSessionLocal() as db:
            result = await db.execute(
                select(Profile.role, Profile.email).where(Profile.id == identity_id)
            )
            row = result.one_or_none()

        if row is None:
            # identity was deleted after the token was issued
            raise TokenInvalidError("Token subject no longer exists")

        return Caller(identity_id=identity_id, role=row.role, email=row.email)

    async def _send_error_response(
        self,
        scope: dict,
        receive: Callable,
        send: Callable,
        exc: AuthenticationError,
    ) -> None:
        response = JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.default_message,
                    "path": scope.get("path"),
                    "method": scope.get("method"),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            },
            headers={"WWW-Authenticate": "Bearer"},
        )
        await response(scope, receive, send)


def get_caller(request: Request) -> Optional[Caller]:
    """Caller resolved by the middleware, or ``None`` when anonymous."""
    return request.scope.get("caller")


def require_caller(request: Request) -> Caller:
    """
    Dependency for endpoints that need an authenticated caller.

    Raises:
        AuthenticationError: request carried no token
    """
    caller = get_caller(request)
    if caller is None:
        raise AuthenticationError()
    return caller


def require_role(*roles: UserRole) -> Callable:
    """
    Dependency limiting an endpoint to callers with one of ``roles``.

    Usage:
        @router.get("/analytics")
        async def analytics(caller: Caller = Depends(require_role(UserRole.RECRUITER))):
            ...
    """
    async def dependency(caller: Caller = Depends(require_caller)) -> Caller:
        if caller.role not in roles:
            logger.warning(
                f"Identity {caller.identity_id} with role {caller.role.value} "
                f"denied; requires {', '.join(r.value for r in roles)}"
            )
            raise RoleRequired(
                f"This action requires the {' or '.join(r.value for r in roles)} role"
            )
        return caller

    return dependency
