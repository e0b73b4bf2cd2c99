"""Per-client limits for the question endpoint, backed by slowapi."""

from __future__ import annotations

import time

from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

QUERY_SCOPE = "sql-agent-query"


class QueryRateLimiter:
    """
    Allow ``max_requests`` per client address within a moving window.

    Rejected requests are not recorded, so a client regains capacity as soon as
    its oldest accepted request leaves the window.
    """

    def __init__(self, max_requests: int = 10, window_seconds: int = 60) -> None:
        self.limit: RateLimitItem = parse(f"{max_requests}/{window_seconds} seconds")
        self.limiter = Limiter(key_func=get_remote_address, strategy="moving-window")

    @property
    def max_requests(self) -> int:
        return self.limit.amount

    def hit(self, request: Request) -> bool:
        """Record one request from the caller; False when it is over the limit."""
        return self.limiter.limiter.hit(self.limit, QUERY_SCOPE, get_remote_address(request))

    def retry_after(self, request: Request) -> float:
        reset_time, _ = self.limiter.limiter.get_window_stats(
            self.limit, QUERY_SCOPE, get_remote_address(request)
        )
        return max(reset_time - time.time(), 0.0)

    def reset(self) -> None:
        self.limiter.reset()
