"""Bounded log of executed statements for analytics."""

from __future__ import annotations

from collections import deque
from datetime import UTC, datetime

from sqlagent.models.agent import QueryHistoryRecord

QUERY_PREVIEW_LENGTH = 200


class QueryHistory:
    """Keeps the most recent ``max_size`` records; older ones fall off the front."""

    def __init__(self, max_size: int = 1000) -> None:
        self._records: deque[QueryHistoryRecord] = deque(maxlen=max_size)

    @property
    def max_size(self) -> int:
        return self._records.maxlen or 0

    def record(
        self,
        query: str,
        success: bool,
        execution_time_ms: int,
        row_count: int,
        error: str | None = None,
    ) -> QueryHistoryRecord:
        entry = QueryHistoryRecord(
            timestamp=datetime.now(UTC).isoformat(),
            query=query[:QUERY_PREVIEW_LENGTH],
            success=success,
            execution_time_ms=execution_time_ms,
            row_count=row_count,
            error=error,
        )
        self._records.append(entry)
        return entry

    def recent(self, n: int = 10) -> list[QueryHistoryRecord]:
        if n <= 0:
            return []
        return list(self._records)[-n:]

    def __len__(self) -> int:
        return len(self._records)
