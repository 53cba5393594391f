import math
import time
from collections import defaultdict, deque
from typing import Callable, DefaultDict, Deque, Hashable

from fastapi import Request

from couponme.core.errors import TooManyRequests


def client_host(request: Request) -> str:
    return request.client.host if request.client else "anon"


class SlidingWindowLimiter:
    """Per-process sliding-window limiter used as a FastAPI dependency.

    Each identifier (client address by default) may make ``limit`` calls in any
    ``window_seconds`` span. Rejected calls do not consume a slot.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: int = 60,
        identifier_fn: Callable[[Request], Hashable] = client_host,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.identifier_fn = identifier_fn
        self.buckets: DefaultDict[Hashable, Deque[float]] = defaultdict(deque)

    def hit(self, identifier: Hashable, now: float | None = None) -> None:
        now = time.time() if now is None else now
        bucket = self.buckets[identifier]
        while bucket and now - bucket[0] > self.window_seconds:
            bucket.popleft()
        if len(bucket) >= self.limit:
            retry_after = max(1, int(math.ceil(bucket[0] + self.window_seconds - now)))
            raise TooManyRequests(headers={"Retry-After": str(retry_after)})
        bucket.append(now)

    async def __call__(self, request: Request) -> None:
        self.hit(self.identifier_fn(request))
