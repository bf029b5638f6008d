# core/rate_limiter.py

from typing import Dict, List, Optional, Tuple
from fastapi import HTTPException, Request
from collections import defaultdict
import threading
import time

from core.logging_config import logger


class RateLimiter:
    """
    Sliding-window, in-memory rate limiter.
    One instance per process; state is lost on restart.
    """

    def __init__(self, max_requests: int = 10, window_seconds: int = 60, clock=time.time):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._store: Dict[str, List[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def check(self, identifier: str) -> Tuple[bool, int]:
        """
        Record a request for `identifier` if it fits in the window.

        Returns:
            Tuple of (allowed: bool, remaining: int)
        """
        now = self._clock()
        window_start = now - self.window_seconds

        with self._lock:
            requests = [ts for ts in self._store[identifier] if ts > window_start]

            if len(requests) >= self.max_requests:
                self._store[identifier] = requests
                return False, 0

            requests.append(now)
            self._store[identifier] = requests
            return True, self.max_requests - len(requests)

    def reset(self, identifier: Optional[str] = None):
        with self._lock:
            if identifier is None:
                self._store.clear()
            else:
                self._store.pop(identifier, None)

    def require(self, request: Request, identifier: Optional[str] = None) -> int:
        """
        Raise 429 Too Many Requests when the caller is over the limit.
        Returns the remaining request count otherwise.
        """
        if identifier is None:
            identifier = get_rate_limit_identifier(request)

        allowed, remaining = self.check(identifier)

        if not allowed:
            logger.warning(f"Rate limit hit for {identifier} on {request.url.path}")
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded. Maximum {self.max_requests} requests per {self.window_seconds} seconds.",
                headers={
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Window": str(self.window_seconds),
                    "Retry-After": str(self.window_seconds),
                },
            )

        return remaining


def get_rate_limit_identifier(request: Request, scope: Optional[str] = None) -> str:
    """
    Client IP (honouring X-Forwarded-For), optionally namespaced by `scope`
    so different endpoints keep separate budgets.
    """
    client_ip = request.client.host if request.client else "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP (original client)
        client_ip = forwarded_for.split(",")[0].strip()

    identifier = f"ip:{client_ip}"
    return f"{scope}:{identifier}" if scope else identifier
