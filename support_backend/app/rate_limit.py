"""Sliding-window rate limiting per client IP."""
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from fastapi import HTTPException, Request

from .config import Config
from ..utils.logger import get_logger

logger = get_logger("rate_limit")

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


class RateLimitExceeded(HTTPException):
    def __init__(self):
        super().__init__(status_code=429, detail=RATE_LIMIT_MESSAGE)


class RateLimiter:
    """FastAPI dependency allowing `max_requests` per `window_seconds` per IP."""

    def __init__(self, max_requests: int = None, window_seconds: float = None, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests or Config.RATE_LIMIT_MAX_REQUESTS
        self.window_seconds = window_seconds or Config.RATE_LIMIT_WINDOW_MS / 1000
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def hit(self, client_id: str) -> bool:
        """Record a request; False when the client is over its limit."""
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._drop_idle(now)
            timestamps = self._hits.setdefault(client_id, deque())
            while timestamps and timestamps[0] <= now - self.window_seconds:
                timestamps.popleft()
            if len(timestamps) >= self.max_requests:
                return False
            timestamps.append(now)
            return True

    def _drop_idle(self, now: float):
        """Forget clients with no request inside the current window."""
        cutoff = now - self.window_seconds
        for client_id in [c for c, ts in self._hits.items() if not ts or ts[-1] <= cutoff]:
            del self._hits[client_id]
        self._last_sweep = now

    def reset(self):
        with self._lock:
            self._hits.clear()

    def __call__(self, request: Request):
        client_ip = request.client.host if request.client else "unknown"
        if not self.hit(client_ip):
            logger.warning("Rate limit exceeded for %s on %s", client_ip, request.url.path)
            raise RateLimitExceeded()
