"""Unit tests for ExecutorAgent."""

import pytest

from sqlagent.agents.executor import (
    CONNECTION_TIMEOUT_MESSAGE,
    NO_SUCH_TABLE_MESSAGE,
    ExecutorAgent,
    describe_error,
    is_transient_error,
)
from sqlagent.connectors.base import ConnectionError, QueryError, QueryResult
from sqlagent.execution.cache import QueryCache
from sqlagent.execution.history import QueryHistory
from sqlagent.execution.metrics import ExecutionMetrics
from sqlagent.models.agent import ErrorKind
from sqlagent.utils.retry import RetryPolicy

SQL = "SELECT companyName FROM company LIMIT 100"


def _result(rows):
    return QueryResult(
        rows=rows,
        row_count=len(rows),
        columns=list(rows[0]) if rows else [],
        execution_time_ms=1.0,
    )


def _connection_reset():
    return QueryError("read ECONNRESET", code="ECONNRESET", kind=ErrorKind.TRANSIENT)


@pytest.fixture
def executor(mock_mysql_connector, no_sleep, sample_catalog):
    return ExecutorAgent(
        mock_mysql_connector,
        QueryCache(ttl_seconds=300, max_entries=100),
        QueryHistory(max_size=1000),
        ExecutionMetrics(),
        retry_policy=RetryPolicy(max_attempts=3, is_retryable=is_transient_error, sleep=no_sleep),
        catalog=sample_catalog,
        cache_max_rows=1000,
    )


class TestExecution:
    @pytest.mark.asyncio
    async def test_success_records_history_and_metrics(self, executor, mock_mysql_connector):
        mock_mysql_connector.execute.return_value = _result([{"companyName": "Acme"}])

        result = await executor.execute_sql(SQL)

        assert result.success is True
        assert result.rows == [{"companyName": "Acme"}]
        assert result.row_count == 1
        assert result.from_cache is False
        assert executor.metrics.total_queries == 1
        assert executor.metrics.successful_queries == 1
        assert len(executor.history) == 1
        assert executor.history.recent(1)[0].success is True

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, executor, mock_mysql_connector):
        mock_mysql_connector.execute.return_value = _result([{"companyName": "Acme"}])

        await executor.execute_sql(SQL)
        result = await executor.execute_sql(SQL)

        assert result.from_cache is True
        assert result.rows == [{"companyName": "Acme"}]
        assert mock_mysql_connector.execute.await_count == 1
        assert executor.metrics.cache_hits == 1
        assert executor.metrics.total_queries == 2
        # Cache hits are not database executions
        assert executor.metrics.successful_queries == 1
        assert len(executor.history) == 1

    @pytest.mark.asyncio
    async def test_statements_with_shared_prefix_cached_separately(
        self, executor, mock_mysql_connector
    ):
        active = "SELECT COUNT(*) AS count FROM projects WHERE projectStatus = 'active'"
        closed = "SELECT COUNT(*) AS count FROM projects WHERE projectStatus = 'closed'"
        mock_mysql_connector.execute.side_effect = [
            _result([{"count": 7}]),
            _result([{"count": 2}]),
        ]

        first = await executor.execute_sql(active)
        second = await executor.execute_sql(closed)

        assert first.rows == [{"count": 7}]
        assert second.rows == [{"count": 2}]
        assert second.from_cache is False
        assert mock_mysql_connector.execute.await_count == 2
        assert (await executor.execute_sql(active)).rows == [{"count": 7}]

    @pytest.mark.asyncio
    async def test_use_cache_false_bypasses_cache(self, executor, mock_mysql_connector):
        mock_mysql_connector.execute.return_value = _result([{"companyName": "Acme"}])

        await executor.execute_sql(SQL, use_cache=False)
        await executor.execute_sql(SQL, use_cache=False)

        assert mock_mysql_connector.execute.await_count == 2
        assert len(executor.cache) == 0

    @pytest.mark.asyncio
    async def test_empty_results_not_cached(self, executor, mock_mysql_connector):
        mock_mysql_connector.execute.return_value = _result([])

        result = await executor.execute_sql(SQL)

        assert result.success is True
        assert result.row_count == 0
        assert len(executor.cache) == 0

    @pytest.mark.asyncio
    async def test_large_results_not_cached(self, executor, mock_mysql_connector):
        rows = [{"companyId": i} for i in range(1000)]
        mock_mysql_connector.execute.return_value = _result(rows)

        result = await executor.execute_sql(SQL)

        assert result.row_count == 1000
        assert len(executor.cache) == 0


class TestRetry:
    @pytest.mark.asyncio
    async def test_transient_errors_retried_with_backoff(
        self, executor, mock_mysql_connector, no_sleep
    ):
        mock_mysql_connector.execute.side_effect = [
            _connection_reset(),
            _connection_reset(),
            _result([{"count": 3}]),
        ]

        result = await executor.execute_sql("SELECT COUNT(*) AS count FROM company")

        assert result.success is True
        assert result.rows == [{"count": 3}]
        assert no_sleep.delays == [1.0, 2.0]
        assert mock_mysql_connector.execute.await_count == 3
        # Pool is recreated once, right before the final attempt
        mock_mysql_connector.reset_pool.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_exhausted_retries_report_timeout(self, executor, mock_mysql_connector):
        mock_mysql_connector.execute.side_effect = _connection_reset()

        result = await executor.execute_sql(SQL)

        assert result.success is False
        assert result.error == CONNECTION_TIMEOUT_MESSAGE
        assert result.error_code == "ECONNRESET"
        assert result.error_kind == ErrorKind.TRANSIENT
        assert mock_mysql_connector.execute.await_count == 3
        assert executor.metrics.failed_queries == 1

    @pytest.mark.asyncio
    async def test_schema_errors_not_retried(self, executor, mock_mysql_connector, no_sleep):
        mock_mysql_connector.execute.side_effect = QueryError(
            "Table 'certaintiMaster.companies' doesn't exist",
            code="ER_NO_SUCH_TABLE",
            kind=ErrorKind.SEMANTIC_SCHEMA,
        )

        result = await executor.execute_sql("SELECT * FROM companies")

        assert result.success is False
        assert result.error == NO_SUCH_TABLE_MESSAGE
        assert result.error_kind == ErrorKind.SEMANTIC_SCHEMA
        assert mock_mysql_connector.execute.await_count == 1
        assert no_sleep.delays == []
        failed = executor.history.recent(1)[0]
        assert failed.success is False
        assert "doesn't exist" in failed.error

    @pytest.mark.asyncio
    async def test_pool_reset_failure_does_not_stop_retry(
        self, executor, mock_mysql_connector
    ):
        mock_mysql_connector.reset_pool.side_effect = ConnectionError("pool gone")
        mock_mysql_connector.execute.side_effect = [
            _connection_reset(),
            _connection_reset(),
            _result([{"count": 1}]),
        ]

        result = await executor.execute_sql(SQL)

        assert result.success is True


class TestErrorDescription:
    def test_bad_field(self):
        message, code, kind = describe_error(
            QueryError("Unknown column", code="ER_BAD_FIELD_ERROR", kind=ErrorKind.SEMANTIC_SCHEMA)
        )

        assert message.startswith("Column doesn't exist")
        assert code == "ER_BAD_FIELD_ERROR"
        assert kind == ErrorKind.SEMANTIC_SCHEMA

    def test_transient_by_code(self):
        assert is_transient_error(QueryError("lost", code="PROTOCOL_CONNECTION_LOST"))

    def test_non_connector_errors(self):
        assert is_transient_error(RuntimeError("boom")) is False
        assert describe_error(RuntimeError("boom")) == ("boom", None, ErrorKind.UNKNOWN)


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_analytics_payload(self, executor, mock_mysql_connector):
        mock_mysql_connector.execute.return_value = _result([{"companyName": "Acme"}])
        await executor.execute_sql(SQL)
        await executor.execute_sql(SQL)

        analytics = executor.analytics()

        assert analytics["metrics"]["totalQueries"] == 2
        assert analytics["metrics"]["cacheHits"] == 1
        assert analytics["cacheStatus"] == {"size": 1, "hitRate": "50.00%"}
        assert analytics["recentQueries"][0]["rowCount"] == 1
        assert analytics["tableStats"]["totalTables"] == 3
        assert analytics["tableStats"]["loadedAt"].startswith("2025-01-01")

    @pytest.mark.asyncio
    async def test_clear_cache_returns_count(self, executor, mock_mysql_connector):
        mock_mysql_connector.execute.return_value = _result([{"companyName": "Acme"}])
        await executor.execute_sql(SQL)

        assert executor.clear_cache() == 1
        assert len(executor.cache) == 0
