"""
Core middleware package.

- Error handling with sensitive data sanitization
- Structured logging with PII masking
- Redis-based rate limiting
- Bearer-token authentication resolving the caller
- Row-level access policies
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

from core.middleware.rate_limiting import (
    RateLimitMiddleware,
    RateLimitRule,
    RateLimitStrategy,
    RateLimitWindow,
    SlidingWindowRateLimiter,
    default_rules,
)

from core.middleware.authentication import (
    AuthenticationMiddleware,
    AuthenticationError,
    get_caller,
    require_caller,
    require_role,
)

from core.middleware.authorization import (
    Caller,
    Operation,
    AuthorizationError,
    AccessDenied,
    RoleRequired,
    authorize,
    load_authorized,
    visible,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    # Rate limiting
    "RateLimitMiddleware",
    "RateLimitRule",
    "RateLimitStrategy",
    "RateLimitWindow",
    "SlidingWindowRateLimiter",
    "default_rules",
    # Authentication
    "AuthenticationMiddleware",
    "AuthenticationError",
    "get_caller",
    "require_caller",
    "require_role",
    # Authorization
    "Caller",
    "Operation",
    "AuthorizationError",
    "AccessDenied",
    "RoleRequired",
    "authorize",
    "load_authorized",
    "visible",
]
