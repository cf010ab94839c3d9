import math
import time
from typing import Dict, Optional

from fastapi import Response
from limits import RateLimitItemPerSecond
from limits.aio.storage import MemoryStorage, Storage
from limits.aio.strategies import MovingWindowRateLimiter

from jwt_signer.core.exceptions import RateLimitExceededError

class RateLimiter:
    """
    Sliding-window request limiter kept in process memory.

    State is local to this instance: several replicas each enforce their own
    bound, and everything resets on restart.
    """

    def __init__(self, storage: Optional[Storage] = None):
        self.storage = storage or MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self.storage)

    async def check_limit(self, key: str, limit: int, window: int, response: Response = None) -> Dict[str, str]:
        item = RateLimitItemPerSecond(limit, window)
        allowed = await self._strategy.hit(item, key)
        stats = await self._strategy.get_window_stats(item, key)

        reset_in = max(0.0, stats.reset_time - time.time())
        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(stats.remaining),
            "X-RateLimit-Reset": str(int(stats.reset_time))
        }

        if response:
            response.headers.update(headers)

        if not allowed:
            headers["X-RateLimit-Remaining"] = "0"
            headers["Retry-After"] = str(max(1, math.ceil(reset_in)))
            raise RateLimitExceededError("Rate limit exceeded", headers=headers)

        return headers

    async def limit(self, identifier: str, endpoint: str, limit: int, window: int, response: Response = None) -> Dict[str, str]:
        key = f"ratelimit:{endpoint}:{identifier}"
        return await self.check_limit(key, limit, window, response)
