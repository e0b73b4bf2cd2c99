"""Process-local execution counters."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class ExecutionMetrics:
    total_queries: int = 0
    successful_queries: int = 0
    failed_queries: int = 0
    average_execution_time: float = 0.0
    cache_hits: int = 0

    def record_success(self, execution_time_ms: float) -> None:
        """Count a successful database execution and fold it into the running mean."""
        self.successful_queries += 1
        n = self.successful_queries
        self.average_execution_time = (
            self.average_execution_time * (n - 1) + execution_time_ms
        ) / n

    def hit_rate(self) -> str:
        if self.total_queries == 0:
            return "0%"
        return f"{self.cache_hits / self.total_queries * 100:.2f}%"

    def snapshot(self) -> dict[str, Any]:
        """Counters keyed the way the analytics payload reports them."""
        data = asdict(self)
        return {
            "totalQueries": data["total_queries"],
            "successfulQueries": data["successful_queries"],
            "failedQueries": data["failed_queries"],
            "averageExecutionTime": data["average_execution_time"],
            "cacheHits": data["cache_hits"],
        }
