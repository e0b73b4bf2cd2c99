"""Unit tests for QueryHistory and ExecutionMetrics."""

from sqlagent.execution.history import QueryHistory
from sqlagent.execution.metrics import ExecutionMetrics


class TestQueryHistory:
    def test_record_truncates_query(self):
        history = QueryHistory()
        record = history.record("SELECT " + "x" * 500, True, 12, 3)

        assert len(record.query) == 200
        assert record.success is True
        assert record.execution_time_ms == 12
        assert record.row_count == 3
        assert record.timestamp.endswith("+00:00")

    def test_bounded_size_drops_oldest(self):
        history = QueryHistory(max_size=3)
        for i in range(5):
            history.record(f"SELECT {i}", True, i, 1)

        assert len(history) == 3
        assert [r.query for r in history.recent(10)] == ["SELECT 2", "SELECT 3", "SELECT 4"]

    def test_recent_returns_last_n(self):
        history = QueryHistory()
        for i in range(15):
            history.record(f"SELECT {i}", True, i, 1)

        recent = history.recent(10)
        assert len(recent) == 10
        assert recent[-1].query == "SELECT 14"

    def test_record_serializes_with_wire_names(self):
        history = QueryHistory()
        record = history.record("SELECT 1", False, 5, 0, error="boom")

        dumped = record.model_dump(by_alias=True)
        assert dumped["executionTime"] == 5
        assert dumped["rowCount"] == 0
        assert dumped["error"] == "boom"


class TestExecutionMetrics:
    def test_hit_rate_without_queries(self):
        assert ExecutionMetrics().hit_rate() == "0%"

    def test_hit_rate_formats_percentage(self):
        metrics = ExecutionMetrics(total_queries=3, cache_hits=1)
        assert metrics.hit_rate() == "33.33%"

    def test_running_average(self):
        metrics = ExecutionMetrics()
        metrics.record_success(100)
        metrics.record_success(200)
        metrics.record_success(300)

        assert metrics.successful_queries == 3
        assert metrics.average_execution_time == 200

    def test_snapshot_keys(self):
        metrics = ExecutionMetrics(total_queries=2, failed_queries=1, cache_hits=1)

        assert metrics.snapshot() == {
            "totalQueries": 2,
            "successfulQueries": 0,
            "failedQueries": 1,
            "averageExecutionTime": 0.0,
            "cacheHits": 1,
        }
