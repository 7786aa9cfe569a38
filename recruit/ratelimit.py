"""Fixed-window rate limiting backed by Redis INCR/EXPIRE.

One counter per ``<prefix>:<client-ip>`` key. The first hit in a window sets
the expiry; hits beyond ``max_requests`` are rejected until the key expires.
The limiter fails open: with Redis unconfigured or unreachable, or when no
client IP can be determined, requests pass through.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from .cache import get_redis
from .config import RateLimitRule, settings

logger = logging.getLogger(__name__)


class RateLimitExceeded(Exception):
    """Raised when a client exceeds its request budget."""

    def __init__(self, *, key_prefix: str, max_requests: int, window_seconds: int, retry_after: int):
        self.key_prefix = key_prefix
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.retry_after = retry_after
        super().__init__(
            f"Too Many Requests. You have exceeded the limit of {max_requests} requests "
            f"in {window_seconds} seconds. Please try again later."
        )


@dataclass
class RateLimitResult:
    """Outcome of a single counted request."""
    allowed: bool
    count: int
    retry_after: int | None = None


def client_ip(request: Request) -> str | None:
    """First ``X-Forwarded-For`` hop, else the socket peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return None


class FixedWindowRateLimiter:
    """Counts requests per key within a fixed window.

    Instances are FastAPI dependencies:

        signin_limiter = FixedWindowRateLimiter(window_seconds=60, max_requests=5, key_prefix="login_attempt")

        @app.post("/auth/initiate-signin", dependencies=[Depends(signin_limiter)])
        ...
    """

    def __init__(self, *, window_seconds: int, max_requests: int, key_prefix: str):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.key_prefix = key_prefix

    @classmethod
    def from_rule(cls, rule: RateLimitRule) -> FixedWindowRateLimiter:
        return cls(
            window_seconds=rule.window_seconds,
            max_requests=rule.max_requests,
            key_prefix=rule.key_prefix,
        )

    def key_for(self, identifier: str) -> str:
        return f"{self.key_prefix}:{identifier}"

    async def hit(self, client: aioredis.Redis | None, identifier: str) -> RateLimitResult:
        """Count one request for ``identifier`` and decide whether it may proceed."""
        if client is None:
            logger.warning(f"Rate limiter {self.key_prefix}: Redis not configured, passing request")
            return RateLimitResult(allowed=True, count=0)

        key = self.key_for(identifier)
        try:
            count = await client.incr(key)
            if count == 1:
                await client.expire(key, self.window_seconds)

            if count > self.max_requests:
                ttl = await client.ttl(key)
                retry_after = ttl if ttl > 0 else self.window_seconds
                return RateLimitResult(allowed=False, count=count, retry_after=retry_after)

            return RateLimitResult(allowed=True, count=count)

        except (RedisError, OSError) as e:
            logger.error(f"Rate limiter: error interacting with Redis for key {key!r}: {e}")
            return RateLimitResult(allowed=True, count=0)

    async def __call__(
        self,
        request: Request,
        redis: aioredis.Redis | None = Depends(get_redis),
    ) -> None:
        if not settings.rate_limit.enabled:
            return

        ip = client_ip(request)
        if not ip:
            logger.warning(f"Rate limiter {self.key_prefix}: could not determine client IP, passing request")
            return

        result = await self.hit(redis, ip)
        if not result.allowed:
            logger.warning(f"Rate limit exceeded for {self.key_prefix} from IP {ip} (count={result.count})")
            raise RateLimitExceeded(
                key_prefix=self.key_prefix,
                max_requests=self.max_requests,
                window_seconds=self.window_seconds,
                retry_after=result.retry_after or self.window_seconds,
            )


signin_limiter = FixedWindowRateLimiter.from_rule(settings.rate_limit.signin)
search_limiter = FixedWindowRateLimiter.from_rule(settings.rate_limit.search)
gdpr_export_limiter = FixedWindowRateLimiter.from_rule(settings.rate_limit.gdpr_export)
gdpr_delete_limiter = FixedWindowRateLimiter.from_rule(settings.rate_limit.gdpr_delete)
