"""
webinspect/middleware/rate_limit.py — Sliding-window per-IP rate limiter.
Only applies to the POST analyze/scan endpoints. Limit configurable via .env
RATE_LIMIT_PER_MINUTE; X-Forwarded-For is honoured only with
TRUST_FORWARDED_FOR=true (i.e. behind a reverse proxy that sets it).
"""
import time
from collections import defaultdict, deque
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from webinspect.config import get_settings

_log: dict[str, deque] = defaultdict(deque)
_last_sweep = 0.0
WINDOW = 60
LIMITED = {
    "/api/security/analyze",
    "/api/performance/analyze",
    "/api/seo/analyze",
    "/api/accessibility",
    "/api/accessibility/analyze",
    "/api/scan",
}


def _ip(request: Request, trust_forwarded: bool) -> str:
    if trust_forwarded:
        fwd = request.headers.get("X-Forwarded-For")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _prune(q: deque, now: float) -> None:
    while q and now - q[0] > WINDOW:
        q.popleft()


def sweep(now: float) -> None:
    """Drop IPs with no request inside the window."""
    global _last_sweep
    for ip in list(_log):
        _prune(_log[ip], now)
        if not _log[ip]:
            del _log[ip]
    _last_sweep = now


def reset() -> None:
    global _last_sweep
    _log.clear()
    _last_sweep = 0.0


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "POST" and request.url.path.rstrip("/") in LIMITED:
            settings = get_settings()
            limit = settings.rate_limit_per_minute
            ip = _ip(request, settings.trust_forwarded_for)
            now = time.monotonic()
            if now - _last_sweep > WINDOW:
                sweep(now)
            q = _log[ip]
            _prune(q, now)
            if len(q) >= limit:
                retry = int(WINDOW - (now - q[0])) + 1
                return JSONResponse(
                    status_code=429,
                    content={"error": f"Rate limit exceeded. Max {limit}/min per IP.", "retryAfterSeconds": retry},
                    headers={"Retry-After": str(retry)},
                )
            q.append(now)
        return await call_next(request)
