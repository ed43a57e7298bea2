"""
Redis-based rate limiting middleware.

Sliding-window limits keyed by client IP or by caller identity. When Redis is
unreachable the limiter fails open and lets requests through.
"""

import logging
import re
import time
import uuid
from typing import Callable, Optional, List, Dict, Any
from enum import Enum
from dataclasses import dataclass
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from core.middleware.logging import get_client_ip

logger = logging.getLogger(__name__)


class RateLimitStrategy(str, Enum):
    """What a limit is counted against."""
    IP_ADDRESS = "ip"
    IDENTITY = "identity"  # falls back to IP for anonymous callers


class RateLimitWindow(str, Enum):
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"


WINDOW_SECONDS = {
    RateLimitWindow.SECOND: 1,
    RateLimitWindow.MINUTE: 60,
    RateLimitWindow.HOUR: 3600,
}


@dataclass
class RateLimitRule:
    """
    One limit. ``path_pattern`` is a regex matched against the request path;
    a rule without one applies everywhere.
    """
    strategy: RateLimitStrategy
    window: RateLimitWindow
    max_requests: int
    path_pattern: Optional[str] = None
    methods: Optional[List[str]] = None
    name: str = "default"

    def matches(self, request: Request) -> bool:
        if self.methods and request.method not in self.methods:
            return False
        if self.path_pattern and not re.fullmatch(self.path_pattern, request.url.path):
            return False
        return True


class SlidingWindowRateLimiter:
    """
    Sliding window limiter over Redis sorted sets: one member per request,
    scored by its timestamp.
    """

    def __init__(self, redis_client: Redis):
        self.redis = redis_client

    async def is_allowed(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
    ) -> tuple[bool, Dict[str, Any]]:
        """
        Record a request against ``key`` and report whether it fits the window.

        Returns:
            Tuple of (is_allowed, metadata) where metadata has limit,
            remaining, reset and retry_after
        """
        now = time.time()
        window_start = now - window_seconds
        member = f"{now}:{uuid.uuid4().hex[:8]}"

        try:
            pipe = self.redis.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.zadd(key, {member: now})
            pipe.expire(key, window_seconds + 60)
            results = await pipe.execute()

            current_count = results[1]
            allowed = current_count + 1 <= max_requests
            retry_after = 0

            if not allowed:
                oldest = await self.redis.zrange(key, 0, 0, withscores=True)
                if oldest:
                    retry_after = int(oldest[0][1] + window_seconds - now) + 1
                else:
                    retry_after = window_seconds
                # rejected requests do not consume the window
                await self.redis.zrem(key, member)

            return allowed, {
                'limit': max_requests,
                'remaining': max(0, max_requests - current_count - 1),
                'reset': int(now + window_seconds),
                'retry_after': max(0, retry_after),
            }

        except RedisError as e:
            logger.error(f"Redis error in rate limiter, failing open: {e}")
            return True, {
                'limit': max_requests,
                'remaining': max_requests,
                'reset': int(now + window_seconds),
                'retry_after': 0,
                'error': 'redis_unavailable',
            }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies every matching rule to each request; the most restrictive one
    decides the response headers.

    Must sit inside ``AuthenticationMiddleware`` so identity-keyed rules can
    see the caller.
    """

    def __init__(
        self,
        app: ASGIApp,
        redis_url: str,
        rules: List[RateLimitRule],
        key_prefix: str = "ratelimit",
        enable_headers: bool = True,
        redis_client: Optional[Redis] = None,
    ):
        super().__init__(app)
        self.redis_url = redis_url
        self.redis_client = redis_client
        self.limiter = SlidingWindowRateLimiter(redis_client) if redis_client else None
        self.rules = rules
        self.key_prefix = key_prefix
        self.enable_headers = enable_headers

    def _get_limiter(self) -> SlidingWindowRateLimiter:
        if self.limiter is None:
            # from_url does not connect; failures surface per call as RedisError
            self.redis_client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
            )
            self.limiter = SlidingWindowRateLimiter(self.redis_client)
        return self.limiter

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in ('/health', '/ready'):
            return await call_next(request)

        result = await self._check_rate_limits(request)

        if not result['allowed']:
            logger.warning(
                f"Rate limit '{result['rule']}' exceeded: {request.method} {request.url.path}"
            )
            response = JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    'error': {
                        'code': 'RATE_LIMIT_EXCEEDED',
                        'message': 'Too many requests. Please try again later.',
                        'path': request.url.path,
                        'method': request.method,
                        'retry_after': result['retry_after'],
                    }
                },
            )
        else:
            response = await call_next(request)

        if self.enable_headers and result['limit']:
            self._add_rate_limit_headers(response, result)
        return response

    async def _check_rate_limits(self, request: Request) -> Dict[str, Any]:
        results = {
            'allowed': True,
            'limit': 0,
            'remaining': 0,
            'reset': 0,
            'retry_after': 0,
            'rule': None,
        }
        limiter = self._get_limiter()

        for rule in self.rules:
            if not rule.matches(request):
                continue

            allowed, metadata = await limiter.is_allowed(
                key=self._generate_key(request, rule),
                max_requests=rule.max_requests,
                window_seconds=WINDOW_SECONDS[rule.window],
            )

            if not allowed:
                results['allowed'] = False
                results['retry_after'] = max(results['retry_after'], metadata['retry_after'])
                results['rule'] = results['rule'] or rule.name

            if results['limit'] == 0 or metadata['remaining'] < results['remaining']:
                results['limit'] = metadata['limit']
                results['remaining'] = metadata['remaining']
                results['reset'] = metadata['reset']

        return results

    def _generate_key(self, request: Request, rule: RateLimitRule) -> str:
        parts = [self.key_prefix, rule.name, rule.window.value]
        caller = request.scope.get('caller')

        if rule.strategy == RateLimitStrategy.IDENTITY and caller is not None:
            parts.append(f"id:{caller.identity_id}")
        else:
            parts.append(f"ip:{get_client_ip(request)}")

        return ":".join(parts)

    def _add_rate_limit_headers(self, response: Response, result: Dict[str, Any]):
        response.headers['X-RateLimit-Limit'] = str(result['limit'])
        response.headers['X-RateLimit-Remaining'] = str(result['remaining'])
        response.headers['X-RateLimit-Reset'] = str(result['reset'])
        if not result['allowed']:
            response.headers['Retry-After'] = str(result['retry_after'])


def default_rules(api_prefix: str, per_second: int, per_minute: int, per_hour: int) -> List[RateLimitRule]:
    """Rules the API runs with: strict auth and apply limits plus general ceilings."""
    prefix = re.escape(api_prefix)
    return [
        RateLimitRule(
            name="auth",
            strategy=RateLimitStrategy.IP_ADDRESS,
            window=RateLimitWindow.MINUTE,
            max_requests=5,
            path_pattern=rf"{prefix}/auth/(login|signup)",
            methods=['POST'],
        ),
        RateLimitRule(
            name="apply",
            strategy=RateLimitStrategy.IDENTITY,
            window=RateLimitWindow.MINUTE,
            max_requests=10,
            path_pattern=rf"{prefix}/jobs/[^/]+/apply",
            methods=['POST'],
        ),
        RateLimitRule(
            name="burst",
            strategy=RateLimitStrategy.IDENTITY,
            window=RateLimitWindow.SECOND,
            max_requests=per_second,
        ),
        RateLimitRule(
            name="sustained",
            strategy=RateLimitStrategy.IDENTITY,
            window=RateLimitWindow.MINUTE,
            max_requests=per_minute,
        ),
        RateLimitRule(
            name="hourly",
            strategy=RateLimitStrategy.IDENTITY,
            window=RateLimitWindow.HOUR,
            max_requests=per_hour,
        ),
    ]
