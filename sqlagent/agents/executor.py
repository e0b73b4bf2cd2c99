"""
ExecutorAgent

Runs guarded SQL through the pooled connector with bounded retry on
transient connection errors, serves repeats from the result cache, and
records history and metrics for analytics.

Failures come back as an ExecutionResult with a user-facing message,
the original error code and an ErrorKind; execute_sql never raises.
"""

import logging
import time
from typing import Any

from sqlagent.catalog.schema import SchemaCatalog
from sqlagent.connectors.base import BaseConnector, ConnectorError
from sqlagent.connectors.mysql import TRANSIENT_ERROR_CODES
from sqlagent.execution.cache import QueryCache
from sqlagent.execution.history import QueryHistory
from sqlagent.execution.metrics import ExecutionMetrics
from sqlagent.models.agent import ErrorKind, ExecutionResult
from sqlagent.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

NO_SUCH_TABLE_MESSAGE = (
    "Table doesn't exist. Please check the table name. "
    "Available tables include: company, projects, contacts, teammembers, etc."
)
CONNECTION_TIMEOUT_MESSAGE = (
    "Database connection timeout. The query may be too complex or the database "
    "is temporarily unavailable."
)
BAD_FIELD_MESSAGE = "Column doesn't exist. Please check the column name in the table schema."


def is_transient_error(exc: BaseException) -> bool:
    """Connection-level failures worth another attempt."""
    return isinstance(exc, ConnectorError) and (
        exc.kind == ErrorKind.TRANSIENT or exc.code in TRANSIENT_ERROR_CODES
    )


def describe_error(exc: BaseException) -> tuple[str, str | None, ErrorKind]:
    """User-facing message, original code and kind for a failed execution."""
    if not isinstance(exc, ConnectorError):
        return str(exc), None, ErrorKind.UNKNOWN

    if exc.code == "ER_NO_SUCH_TABLE":
        return NO_SUCH_TABLE_MESSAGE, exc.code, ErrorKind.SEMANTIC_SCHEMA
    if exc.code == "ER_BAD_FIELD_ERROR":
        return BAD_FIELD_MESSAGE, exc.code, ErrorKind.SEMANTIC_SCHEMA
    if is_transient_error(exc):
        return CONNECTION_TIMEOUT_MESSAGE, exc.code, ErrorKind.TRANSIENT
    return str(exc), exc.code, exc.kind


class ExecutorAgent:
    """
    Cached, retried SQL execution.

    Usage:
        executor = ExecutorAgent(connector, QueryCache(), QueryHistory(), ExecutionMetrics())
        result = await executor.execute_sql("SELECT COUNT(*) AS count FROM company")
        if result.success:
            print(result.rows)
    """

    name = "ExecutorAgent"

    def __init__(
        self,
        connector: BaseConnector,
        cache: QueryCache,
        history: QueryHistory,
        metrics: ExecutionMetrics,
        retry_policy: RetryPolicy | None = None,
        catalog: SchemaCatalog | None = None,
        cache_max_rows: int = 1000,
    ):
        self.connector = connector
        self.cache = cache
        self.history = history
        self.metrics = metrics
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=3, is_retryable=is_transient_error
        )
        self.catalog = catalog
        self.cache_max_rows = cache_max_rows

    async def execute_sql(self, sql: str, use_cache: bool = True) -> ExecutionResult:
        start_time = time.perf_counter()
        self.metrics.total_queries += 1
        cache_key = self.cache.make_key(sql)

        if use_cache:
            cached_rows = self.cache.get(cache_key)
            if cached_rows is not None:
                self.metrics.cache_hits += 1
                logger.debug("Cache hit", extra={"cache_key": cache_key})
                return ExecutionResult(
                    success=True,
                    rows=cached_rows,
                    row_count=len(cached_rows),
                    execution_time_ms=self._elapsed_ms(start_time),
                    from_cache=True,
                )

        try:
            result = await self.retry_policy.run(
                lambda: self.connector.execute(sql),
                on_retry=self._before_retry,
            )
        except Exception as exc:
            execution_time_ms = self._elapsed_ms(start_time)
            self.metrics.failed_queries += 1
            self.history.record(sql, False, execution_time_ms, 0, error=str(exc))
            message, code, kind = describe_error(exc)
            logger.error(
                f"SQL execution error: {exc}",
                extra={"error_code": code, "error_kind": kind.value},
            )
            return ExecutionResult(
                success=False,
                execution_time_ms=execution_time_ms,
                error=message,
                error_code=code,
                error_kind=kind,
            )

        rows = result.rows
        execution_time_ms = self._elapsed_ms(start_time)
        if use_cache and 0 < len(rows) < self.cache_max_rows:
            self.cache.put(cache_key, rows)

        self.metrics.record_success(execution_time_ms)
        self.history.record(sql, True, execution_time_ms, len(rows))

        return ExecutionResult(
            success=True,
            rows=rows,
            row_count=len(rows),
            execution_time_ms=execution_time_ms,
            from_cache=False,
        )

    def clear_cache(self) -> int:
        cleared = self.cache.clear()
        logger.info(f"Query cache cleared ({cleared} entries)")
        return cleared

    def analytics(self) -> dict[str, Any]:
        loaded_at = self.catalog.loaded_at if self.catalog is not None else None
        return {
            "metrics": self.metrics.snapshot(),
            "cacheStatus": {
                "size": len(self.cache),
                "hitRate": self.metrics.hit_rate(),
            },
            "recentQueries": [
                record.model_dump(by_alias=True) for record in self.history.recent(10)
            ],
            "tableStats": {
                "totalTables": len(self.catalog) if self.catalog is not None else 0,
                "loadedAt": loaded_at.isoformat() if loaded_at else None,
            },
        }

    async def _before_retry(self, next_attempt: int, error: BaseException) -> None:
        if next_attempt != self.retry_policy.max_attempts:
            return
        try:
            await self.connector.reset_pool()
        except ConnectorError as exc:
            logger.error(f"Failed to recreate connection pool: {exc}")

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.perf_counter() - start_time) * 1000)
