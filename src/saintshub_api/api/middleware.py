"""HTTP middleware: CORS, security headers, body size cap, rate limiting, access log.

Registered by ``saintshub_api.api.router.setup_middleware``.  Responses
produced here (413, 429) use the same ``{status, message}`` envelope as
the error translator, since they never reach the route handlers.
"""

import time
from collections import defaultdict, deque
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from saintshub_api.core.config import Settings

_DEFAULT_TRUSTED_HEADERS = ["CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP"]

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
BODY_TOO_LARGE_MESSAGE = "Request body is too large."


def get_client_ip(request: Request, trusted_headers: list[str] | None = None) -> str:
    """Extract the real client IP from proxy headers or direct connection.

    Checks headers in priority order.  For X-Forwarded-For, uses the
    leftmost (client-supplied) IP.  Falls back to request.client.host.

    Args:
        request: The incoming Starlette request.
        trusted_headers: Ordered list of header names to check.

    Returns:
        The client IP address string, or "unknown" if not determinable.
    """
    headers = trusted_headers if trusted_headers is not None else _DEFAULT_TRUSTED_HEADERS

    for header in headers:
        value = request.headers.get(header, "").strip()
        if not value:
            continue
        if header.lower() == "x-forwarded-for":
            return value.split(",")[0].strip()
        return value

    if request.client:
        return request.client.host
    return "unknown"


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured origins (list and/or regex) with credentials."""
    kwargs: dict[str, Any] = {
        "allow_credentials": True,
        "allow_methods": ["GET", "HEAD", "POST", "PATCH", "PUT", "DELETE"],
        "allow_headers": ["*"],
    }
    if settings.cors_origin_list:
        kwargs["allow_origins"] = settings.cors_origin_list
    if settings.cors_origin_regex.strip():
        kwargs["allow_origin_regex"] = settings.cors_origin_regex.strip()
    app.add_middleware(CORSMiddleware, **kwargs)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers on every response."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
        "Referrer-Policy": "no-referrer",
        "Cross-Origin-Resource-Policy": "same-origin",
    }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject oversized non-multipart bodies by their declared ``Content-Length``.

    Multipart requests carry image files and are exempt; JSON and form
    bodies describe records and stay small.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = 10 * 1024) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        content_type = request.headers.get("content-type", "")
        declared = request.headers.get("content-length", "")
        if not content_type.startswith("multipart/") and declared.isdecimal() and int(declared) > self.max_bytes:
            return JSONResponse(status_code=413, content={"status": "fail", "message": BODY_TOO_LARGE_MESSAGE})
        return await call_next(request)


class SlidingWindowLimiter:
    """Per-key request counter over a sliding time window.

    Args:
        limit: Requests allowed per key within the window.
        window_seconds: Window length.
    """

    def __init__(self, limit: int, window_seconds: float) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._next_sweep = 0.0

    def hit(self, key: str, now: float) -> float | None:
        """Record a request for ``key``.

        Returns:
            None if the request is allowed, otherwise the seconds until the
            oldest counted request leaves the window.
        """
        if now >= self._next_sweep:
            self._sweep(now)
        hits = self._hits[key]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        if len(hits) >= self.limit:
            return hits[0] + self.window_seconds - now
        hits.append(now)
        return None

    def _sweep(self, now: float) -> None:
        """Forget keys with no hit inside the window."""
        cutoff = now - self.window_seconds
        for key in [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]
        self._next_sweep = now + self.window_seconds

    def __len__(self) -> int:
        return len(self._hits)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory per-IP rate limiting.

    Counters live in process memory, so each worker limits independently.
    """

    def __init__(
        self,
        app: ASGIApp,
        requests: int = 100,
        window_seconds: float = 15 * 60,
        trusted_proxy_headers: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.limiter = SlidingWindowLimiter(requests, window_seconds)
        self.trusted_proxy_headers = trusted_proxy_headers

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_ip = get_client_ip(request, self.trusted_proxy_headers)
        retry_after = self.limiter.hit(client_ip, time.time())
        if retry_after is not None:
            logger.warning("Rate limit exceeded for {} on {} {}", client_ip, request.method, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"status": "fail", "message": RATE_LIMIT_MESSAGE},
                headers={"Retry-After": str(max(1, int(retry_after) + 1))},
            )
        return await call_next(request)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One log line per request with status and duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "{} {} -> {} ({:.1f} ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
