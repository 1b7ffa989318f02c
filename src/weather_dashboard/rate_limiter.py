"""Sliding-window rate limiting per client."""

import logging
import time
import uuid
from typing import Optional

import redis.asyncio as redis

from weather_dashboard.config import (
    REDIS_URL,
    RATE_LIMIT_REQUESTS_PER_SECOND,
    RATE_LIMIT_REDIS_KEY_PREFIX
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Rate limiter using one Redis sorted set per client.

    Every upstream weather call spends the shared API key, so each client
    gets its own window. Requests are allowed when Redis is unavailable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        window_size: float = 1.0
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Requests allowed per client within one window
            window_size: Window length in seconds
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.max_requests = max_requests
        self.window_size = window_size
        self.key_prefix = RATE_LIMIT_REDIS_KEY_PREFIX

    def key_for(self, client_id: str) -> str:
        return f"{self.key_prefix}:{client_id}"

    async def is_allowed(self, client_id: str) -> tuple[bool, int]:
        """Check if a client's request is allowed under the rate limit.

        Args:
            client_id: Identifier of the calling client, usually its address

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        key = self.key_for(client_id)
        try:
            now = time.time()
            window_start = now - self.window_size

            pipe = self.redis_client.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zadd(key, {f"{now}:{uuid.uuid4().hex}": now})
            pipe.zcard(key)
            pipe.expire(key, max(1, int(self.window_size * 2)))
            _, _, request_count, _ = await pipe.execute()

        except Exception as e:
            logger.error(f"Rate limiter error: {e}")
            return True, 0

        if request_count > self.max_requests:
            retry_after = max(1, int(self.window_size))
            logger.debug(f"Rate limited {client_id}: count={request_count}, max={self.max_requests}")
            return False, retry_after

        logger.debug(f"Not rate limited {client_id}: count={request_count}, max={self.max_requests}")
        return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
