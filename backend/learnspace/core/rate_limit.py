"""
Per-client request rate limiting for LearnSpace.

Sliding-window limiter keyed by client address. Client histories live in an
LRU map capped at ``max_clients`` entries so the map cannot grow without
bound; the least recently seen client is evicted first.
"""

import math
import threading
import time
from collections import OrderedDict, deque
from typing import Callable, Deque, Optional

from fastapi import Request, status

from .config import settings
from .errors import AppError


class RateLimitExceeded(AppError):
    def __init__(self, retry_after: int):
        super().__init__(
            "Too many requests. Please try again later.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            extra={"retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class RateLimiter:
    """
    Sliding-window rate limiter usable as a FastAPI dependency.

    Args:
        max_requests: Requests allowed per window
        window_seconds: Window length in seconds
        max_clients: Maximum number of client histories kept in memory
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        max_clients: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_clients = max_clients
        self._clock = clock
        self._hits: "OrderedDict[str, Deque[float]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._hits)

    def hit(self, key: str) -> Optional[int]:
        """
        Record a request for ``key``.

        Returns:
            None when allowed, otherwise the number of seconds to wait.
        """
        now = self._clock()
        with self._lock:
            hits = self._hits.get(key)
            if hits is None:
                hits = deque()
                self._hits[key] = hits
            else:
                self._hits.move_to_end(key)

            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()

            if len(hits) >= self.max_requests:
                return max(1, math.ceil(hits[0] + self.window_seconds - now))

            hits.append(now)

            while len(self._hits) > self.max_clients:
                self._hits.popitem(last=False)

        return None

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    async def __call__(self, request: Request) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        client = request.client.host if request.client else "unknown"
        retry_after = self.hit(f"{request.url.path}:{client}")
        if retry_after is not None:
            raise RateLimitExceeded(retry_after)


# Shared limiter for endpoints that are expensive or brute-forceable
default_limiter = RateLimiter(
    max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    max_clients=settings.RATE_LIMIT_MAX_CLIENTS,
)
