"""Gateway middleware: security headers and per-client rate limiting."""

import math
import time
from collections import defaultdict, deque
from collections.abc import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from nonce_chat.dto import ErrorResponse
from nonce_chat.utils import utc_now_iso

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net https://fonts.googleapis.com; "
        "font-src 'self' https://fonts.gstatic.com; "
        "img-src 'self' data: https:; "
        "connect-src 'self' https://cdn.jsdelivr.net"
    ),
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add hardening headers to every response unless a route already set them."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window rate limit per client address.

    Only paths under ``prefix`` count. Requests over the limit get a 429
    with ``Retry-After``; allowed requests carry ``RateLimit-*`` headers.
    """

    # Sweep idle clients once the table grows past this size
    MAX_TRACKED_CLIENTS = 10_000

    def __init__(
        self,
        app: ASGIApp,
        limit: int,
        window: int,
        prefix: str = "/api/",
        trust_proxy: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(app)
        self._limit = limit
        self._window = window
        self._prefix = prefix
        self._trust_proxy = trust_proxy
        self._clock = clock
        self._requests: dict[str, deque[float]] = defaultdict(deque)

    def client_key(self, request: Request) -> str:
        """Identify the caller, honouring X-Forwarded-For behind a trusted proxy."""
        if self._trust_proxy:
            forwarded = request.headers.get("x-forwarded-for")
            if forwarded:
                return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _sweep(self, now: float) -> None:
        idle = [key for key, hits in self._requests.items() if not hits or now - hits[-1] >= self._window]
        for key in idle:
            del self._requests[key]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS" or not request.url.path.startswith(self._prefix):
            return await call_next(request)

        now = self._clock()
        if len(self._requests) > self.MAX_TRACKED_CLIENTS:
            self._sweep(now)

        hits = self._requests[self.client_key(request)]
        while hits and now - hits[0] >= self._window:
            hits.popleft()

        if len(hits) >= self._limit:
            retry_after = max(1, math.ceil(self._window - (now - hits[0])))
            body = ErrorResponse(error=RATE_LIMIT_MESSAGE, timestamp=utc_now_iso())
            return JSONResponse(
                status_code=429,
                content=body.model_dump(exclude_none=True),
                headers={
                    "Retry-After": str(retry_after),
                    "RateLimit-Limit": str(self._limit),
                    "RateLimit-Remaining": "0",
                    "RateLimit-Reset": str(retry_after),
                },
            )

        hits.append(now)
        response = await call_next(request)
        response.headers["RateLimit-Limit"] = str(self._limit)
        response.headers["RateLimit-Remaining"] = str(max(0, self._limit - len(hits)))
        response.headers["RateLimit-Reset"] = str(max(0, math.ceil(self._window - (now - hits[0]))))
        return response
