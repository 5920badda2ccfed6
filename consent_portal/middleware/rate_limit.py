"""Rate limiting middleware for write-heavy and bulk endpoints.

Limits consent toggles and the consent export per client IP. Uses
in-memory fixed-window storage, so limits are per worker process.
"""

import logging
import re
import time
from collections import defaultdict
from dataclasses import dataclass, field

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"


@dataclass
class RateLimitConfig:
    """Configuration for a rate limit rule."""

    requests: int  # Number of allowed requests
    window_seconds: int  # Time window in seconds


@dataclass
class RateLimitEntry:
    """Tracking entry for rate limit state."""

    count: int = 0
    window_start: float = field(default_factory=time.time)


# Default rate limits by endpoint pattern
DEFAULT_RATE_LIMITS: dict[tuple[str, str], RateLimitConfig] = {
    # Consent toggles
    ("PUT", "/api/v1/consent/projects/{id}"): RateLimitConfig(
        requests=30, window_seconds=60
    ),
    # Bulk export
    ("GET", "/api/v1/admin/consent-export"): RateLimitConfig(
        requests=10, window_seconds=3600  # 10 per hour
    ),
}


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request.

    Handles X-Forwarded-For header for reverse proxy scenarios.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def normalize_path(path: str) -> str:
    """Normalize path by replacing UUIDs with placeholders."""
    return re.sub(UUID_PATTERN, "{id}", path, flags=re.IGNORECASE)


class InMemoryRateLimitStorage:
    """In-memory rate limit storage for a single worker."""

    def __init__(self) -> None:
        self._storage: dict[str, RateLimitEntry] = defaultdict(RateLimitEntry)
        self._last_cleanup = time.time()
        self._cleanup_interval = 300  # 5 minutes

    def _cleanup_expired(self, max_window: int = 3600) -> None:
        """Remove expired entries to prevent memory growth."""
        now = time.time()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        expired_keys = [
            key
            for key, entry in self._storage.items()
            if now - entry.window_start > max_window
        ]

        for key in expired_keys:
            del self._storage[key]

        self._last_cleanup = now

    def check_and_increment(
        self, key: str, limit: int, window_seconds: int
    ) -> tuple[bool, int, int]:
        """Check rate limit and increment counter.

        Returns:
            Tuple of (is_allowed, remaining_requests, reset_seconds)
        """
        self._cleanup_expired()

        now = time.time()
        entry = self._storage[key]

        # Window expired (or fresh entry)
        if entry.count == 0 or now - entry.window_start > window_seconds:
            entry.count = 1
            entry.window_start = now
            return True, limit - 1, window_seconds

        if entry.count < limit:
            entry.count += 1
            remaining = limit - entry.count
            reset = int(window_seconds - (now - entry.window_start))
            return True, remaining, reset

        reset = int(window_seconds - (now - entry.window_start))
        return False, 0, reset


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware for FastAPI.

    Applies rate limits to configured endpoints based on client IP.
    Returns 429 Too Many Requests when limits are exceeded.
    """

    def __init__(
        self,
        app,
        rate_limits: dict[tuple[str, str], RateLimitConfig] | None = None,
        storage=None,
        enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self.rate_limits = rate_limits or DEFAULT_RATE_LIMITS
        self.storage = storage or InMemoryRateLimitStorage()
        self.enabled = enabled

    def _get_rate_limit_config(
        self, method: str, path: str
    ) -> RateLimitConfig | None:
        """Get rate limit configuration for a method/path combination."""
        key = (method, path)
        if key in self.rate_limits:
            return self.rate_limits[key]

        key = (method, normalize_path(path))
        return self.rate_limits.get(key)

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and apply rate limiting."""
        if not self.enabled:
            return await call_next(request)

        method = request.method
        path = request.url.path

        config = self._get_rate_limit_config(method, path)

        if not config:
            return await call_next(request)

        client_ip = get_client_ip(request)
        key = f"{method}:{normalize_path(path)}:{client_ip}"

        is_allowed, remaining, reset = self.storage.check_and_increment(
            key, config.requests, config.window_seconds
        )

        if not is_allowed:
            logger.warning(
                f"Rate limit exceeded: {method} {path} from {client_ip}"
            )

            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Too many requests. Please try again later.",
                    "retry_after": reset,
                },
                headers={
                    "Retry-After": str(reset),
                    "X-RateLimit-Limit": str(config.requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                },
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(config.requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(reset)

        return response
