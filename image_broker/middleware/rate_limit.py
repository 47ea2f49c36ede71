# FILE: image_broker/middleware/rate_limit.py
"""
Rate limiting middleware (simple in-memory, per client address)
"""
import logging
import time
from collections import deque
from typing import Deque, Dict
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window of at most `rpm` requests per client"""

    def __init__(self, app, rpm: int = 60, exempt_paths=("/health",)):
        super().__init__(app)
        self.rpm = rpm
        self.exempt_paths = set(exempt_paths)
        self.requests: Dict[str, Deque[float]] = {}
        self._last_sweep = time.monotonic()

    def evict_idle(self, now: float) -> int:
        """Drop clients with no request inside the window; returns how many were dropped"""
        idle = [key for key, window in self.requests.items() if not window or now - window[-1] >= WINDOW_SECONDS]
        for key in idle:
            del self.requests[key]
        self._last_sweep = now
        if idle:
            logger.debug(f"Evicted {len(idle)} idle rate-limit windows")
        return len(idle)

    def allow(self, client_key: str, now: float) -> bool:
        """Record a hit for client_key unless its window is already full"""
        if now - self._last_sweep >= WINDOW_SECONDS:
            self.evict_idle(now)

        window = self.requests.get(client_key)
        if window is not None:
            while window and now - window[0] >= WINDOW_SECONDS:
                window.popleft()
            if len(window) >= self.rpm:
                return False
        else:
            window = self.requests[client_key] = deque()

        window.append(now)
        return True

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        client_key = request.client.host if request.client else "unknown"
        if not self.allow(client_key, time.monotonic()):
            logger.warning(f"Rate limit exceeded for {client_key}")
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded"}
            )

        return await call_next(request)
