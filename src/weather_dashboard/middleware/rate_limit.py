"""Rate limiting middleware."""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from weather_dashboard.config import RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS_PER_SECOND
from weather_dashboard.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Limits weather requests per client address.

    Only paths under ``/weather/`` reach the OpenWeather API; the page,
    its assets and the service endpoints are never limited.
    """

    LIMITED_PREFIX = "/weather/"
    BYPASS_PATHS = {
        "/weather/health",
        "/weather/info",
    }

    def __init__(
        self,
        app,
        calls: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        enabled: bool = RATE_LIMIT_ENABLED,
        rate_limiter: Optional[RateLimiter] = None
    ):
        """Initialize rate limit middleware.

        Args:
            app: FastAPI application instance
            calls: Maximum requests per second per client
            enabled: Whether limiting is active
            rate_limiter: Limiter to use (creates a Redis-backed one if None)
        """
        super().__init__(app)
        self.enabled = enabled
        if enabled and rate_limiter is None:
            rate_limiter = RateLimiter(max_requests=calls)
        self.rate_limiter = rate_limiter
        logger.info(f"Rate limit enabled: {self.enabled}, limit: {calls} req/sec per client")

    def should_limit(self, path: str) -> bool:
        if path != self.LIMITED_PREFIX.rstrip("/") and not path.startswith(self.LIMITED_PREFIX):
            return False
        return path.rstrip("/") not in self.BYPASS_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request through rate limiting check.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/endpoint in chain

        Returns:
            HTTP response (either rate limit error or continued response)
        """
        if not self.enabled or not self.should_limit(request.url.path):
            return await call_next(request)

        client_id = request.client.host if request.client else "unknown"
        is_allowed, retry_after = await self.rate_limiter.is_allowed(client_id)

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {client_id} accessing {request.method} {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded. Please try again later.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.rate_limiter.max_requests)
        response.headers["X-RateLimit-Window"] = str(self.rate_limiter.window_size)
        return response
