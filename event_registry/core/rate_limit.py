import logging
from dataclasses import dataclass

import redis
from fastapi import HTTPException, Request, Response, status

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class RateLimiter:
    """Fixed-window request counter stored in Redis.

    Counters are shared through Redis, so every API process enforces the
    same window for a client.
    """

    def __init__(
        self,
        client: redis.Redis,
        *,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        key_prefix: str = "rate_limit",
    ) -> None:
        self.client = client
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.key_prefix = key_prefix

    def hit(self, identity: str) -> RateLimitResult:
        key = f"{self.key_prefix}:{identity}"
        pipe = self.client.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        if ttl is None or ttl < 0:
            # First hit in this window (or the key lost its expiry)
            self.client.expire(key, self.window_seconds)
            ttl = self.window_seconds

        return RateLimitResult(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=int(ttl),
        )

    def reset(self, identity: str) -> None:
        self.client.delete(f"{self.key_prefix}:{identity}")


def enforce_rate_limit(request: Request, response: Response) -> None:
    """Router dependency that counts the request against the client's window."""
    limiter: RateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return

    identity = request.client.host if request.client else "anonymous"
    try:
        result = limiter.hit(identity)
    except redis.exceptions.RedisError:
        logger.warning("Rate limiter unavailable, allowing request from %s", identity, exc_info=True)
        return

    headers = {
        "RateLimit-Limit": str(result.limit),
        "RateLimit-Remaining": str(result.remaining),
        "RateLimit-Reset": str(result.reset_after),
    }
    if not result.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=RATE_LIMIT_MESSAGE,
            headers={**headers, "Retry-After": str(result.reset_after)},
        )
    response.headers.update(headers)
