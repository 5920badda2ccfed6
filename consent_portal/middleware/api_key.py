"""Public API key gate for the /api/v1 surface.

Every API request must present the project's public key in the ``apikey``
header, the way a hosted store gateway expects it. The key identifies the
client application only; callers are still authenticated by their bearer
token.
"""

import hmac
import logging
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

API_KEY_HEADER = "apikey"

API_PREFIX = "/api/v1"

# Endpoints reachable without the API key
PUBLIC_ENDPOINTS = {
    "/api/v1/health",
    "/api/v1/health/ready",
}


def requires_api_key(path: str) -> bool:
    """Whether a request path is behind the API key gate."""
    if path in PUBLIC_ENDPOINTS:
        return False
    return path == API_PREFIX or path.startswith(f"{API_PREFIX}/")


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Rejects API requests that do not carry the public API key."""

    def __init__(self, app: ASGIApp, api_key: str) -> None:
        super().__init__(app)
        self.api_key = api_key

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        """Process request and enforce the API key."""
        path = request.url.path

        if not requires_api_key(path):
            return await call_next(request)

        presented = request.headers.get(API_KEY_HEADER)
        if not presented:
            return Response(
                content='{"detail":"API key required"}',
                status_code=401,
                media_type="application/json",
            )

        if not hmac.compare_digest(presented.encode(), self.api_key.encode()):
            logger.warning(f"Invalid API key: {request.method} {path}")
            return Response(
                content='{"detail":"Invalid API key"}',
                status_code=401,
                media_type="application/json",
            )

        return await call_next(request)
