"""
Rate Limiting

In-memory sliding-window limiter keyed by client address, applied to every
request as ASGI middleware.

DESIGN RULES:
- Process-local; each worker counts on its own
- Rejected requests get a 429 JSON body and a Retry-After header
- The limiter lives on app.state so it can be swapped or reset
"""

import logging
import math
import threading
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from fastapi.responses import JSONResponse

from app.core.errors import RateLimited


logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    Allows at most `max_requests` per `window_seconds` for each key.

    A max_requests of 0 or less disables limiting.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.max_requests > 0

    def hit(self, key: str) -> float:
        """
        Record one request for key.

        Returns:
            0.0 if the request is allowed, otherwise the seconds until the
            oldest request in the window expires.
        """
        if not self.enabled:
            return 0.0
        now = self._clock()
        with self._lock:
            hits = self._hits[key]
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return self.window_seconds - (now - hits[0])
            hits.append(now)
            return 0.0

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class RateLimitMiddleware:
    """ASGI middleware consulting `app.state.rate_limiter` for each HTTP request."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limiter = getattr(scope["app"].state, "rate_limiter", None)
        client = scope.get("client")
        key = client[0] if client else "unknown"
        retry_after = limiter.hit(key) if limiter is not None else 0.0
        if retry_after <= 0:
            await self.app(scope, receive, send)
            return

        logger.info(f"Rate limit exceeded for {key} on {scope['path']}")
        error = RateLimited(
            f"Maximum {limiter.max_requests} requests per {limiter.window_seconds:g} seconds"
        )
        response = JSONResponse(
            status_code=error.status_code,
            content=error.to_body(),
            headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
        )
        await response(scope, receive, send)
