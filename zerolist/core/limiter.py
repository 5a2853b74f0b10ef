"""
Fixed-window rate limiting keyed by route class and client IP.

Counters live in process memory by default, so each worker process enforces
its own budget. Pass a shared `store` to enforce limits across processes.
"""

import math
import time
import logging
from fastapi import Request, Response
from zerolist.core.exceptions import RateLimitedError
from zerolist.core.utils import get_client_ip

logger = logging.getLogger(__name__)

# Sweep expired windows once the store grows past this many keys
CLEANUP_THRESHOLD = 1000
UNKNOWN_CLIENT = "unknown"


class MemoryStore:
    """Process-local window store: key -> {"count", "reset_at"}."""

    def __init__(self):
        self._records = {}

    def get(self, key):
        return self._records.get(key)

    def set(self, key, record):
        self._records[key] = record

    def delete(self, key):
        self._records.pop(key, None)

    def items(self):
        return list(self._records.items())

    def clear(self):
        self._records.clear()

    def __len__(self):
        return len(self._records)


class RateLimiter:

    def __init__(self, name: str, window: int, limit: int, store=None, now=time.time):
        self.name = name
        self.window = window
        self.limit = limit
        self.store = store if store is not None else MemoryStore()
        self.now = now
        self.enabled = True

    def key_for(self, request: Request) -> str:
        return f"{self.name}:{get_client_ip(request) or UNKNOWN_CLIENT}"

    def cleanup(self, now: float):
        if len(self.store) <= CLEANUP_THRESHOLD:
            return
        expired = [k for k, record in self.store.items() if record["reset_at"] < now]
        for key in expired:
            self.store.delete(key)
        logger.debug(f"Rate limiter swept {len(expired)} expired windows")

    def hit(self, key: str) -> dict:
        """Counts one request against `key` and returns the rate limit headers.

        Raises RateLimitedError, carrying the same headers plus `Retry-After`,
        once the window's count exceeds the limit.
        """
        now = self.now()
        self.cleanup(now)

        record = self.store.get(key)
        if record is None or record["reset_at"] < now:
            record = {"count": 1, "reset_at": now + self.window}
        else:
            record = {"count": record["count"] + 1, "reset_at": record["reset_at"]}
        self.store.set(key, record)

        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.limit - record["count"])),
            "X-RateLimit-Reset": str(math.ceil(record["reset_at"])),
        }
        if record["count"] > self.limit:
            headers["Retry-After"] = str(math.ceil(record["reset_at"] - now))
            logger.info(f"Rate limit exceeded for {key}")
            raise RateLimitedError(headers=headers)
        return headers

    async def __call__(self, request: Request, response: Response):
        if not self.enabled:
            return
        for name, value in self.hit(self.key_for(request)).items():
            response.headers[name] = value


store = MemoryStore()

# 10 signups per IP per hour
signup_limiter = RateLimiter("signup", window=60 * 60, limit=10, store=store)

# 100 admin API requests per IP per minute
api_limiter = RateLimiter("api", window=60, limit=100, store=store)

limiters = (signup_limiter, api_limiter)
