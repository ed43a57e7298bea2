"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from database.engine import init_db, close_db
from api.routes import health
from api.routes.v1 import (
    applications,
    auth,
    dashboard,
    jobs,
    profiles,
    resumes,
    saved_jobs,
)

# Import middleware components
from core.middleware import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    StructuredLoggingMiddleware,
    setup_logging,
    RateLimitMiddleware,
    default_rules,
    AuthenticationMiddleware,
)

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    await init_db()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Job board API: postings, applications, saved jobs and resumes",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Domain exceptions raised inside routes become JSON error envelopes
setup_error_handlers(app)

# add_middleware prepends, so the last one added runs outermost.
# Request order: error handling -> logging -> authentication -> rate limit -> CORS

# 5. CORS middleware (innermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 4. Rate limiting (needs the caller for identity-keyed rules)
if settings.rate_limit_enabled:
    app.add_middleware(
        RateLimitMiddleware,
        redis_url=str(settings.redis_url),
        rules=default_rules(
            settings.api_v1_prefix,
            per_second=settings.rate_limit_per_second,
            per_minute=settings.rate_limit_per_minute,
            per_hour=settings.rate_limit_per_hour,
        ),
        key_prefix="jobboard:ratelimit",
        enable_headers=True,
    )

# 3. Authentication (resolves the bearer token into a Caller)
app.add_middleware(
    AuthenticationMiddleware,
    jwt_secret=settings.jwt_secret_key,
    jwt_algorithm=settings.jwt_algorithm,
)

# 2. Structured logging middleware (logs all requests/responses)
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    max_body_size=settings.log_max_body_size,
)

# 1. Error handling middleware (outermost - catches all errors)
app.add_middleware(
    ErrorHandlingMiddleware,
    debug=settings.debug,
)

# Health check routes
app.include_router(health.router, tags=["Health"])

# API v1 routes
for router in (
    auth.router,
    profiles.router,
    resumes.router,
    jobs.router,
    applications.router,
    saved_jobs.router,
    dashboard.router,
):
    app.include_router(router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
