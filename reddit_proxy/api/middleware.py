"""Inbound rate limiting middleware."""

import math

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from reddit_proxy.api.errors import error_response
from reddit_proxy.core.rate_limiter import FixedWindowRateLimiter


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects clients that exceed the per-address request budget with a 429."""

    def __init__(self, app: ASGIApp, limiter: FixedWindowRateLimiter, exempt_paths=("/health",)):
        super().__init__(app)
        self.limiter = limiter
        self.exempt_paths = set(exempt_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        key = request.client.host if request.client else "unknown"
        decision = self.limiter.hit(key)
        headers = {
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(math.ceil(decision.reset_in)),
        }

        if not decision.allowed:
            response = error_response(429, "Too many requests, please try again later.")
            response.headers.update(headers)
            response.headers["Retry-After"] = str(math.ceil(decision.reset_in))
            return response

        response = await call_next(request)
        response.headers.update(headers)
        return response
