"""Result cache, query history and execution metrics."""

from sqlagent.execution.cache import QueryCache
from sqlagent.execution.history import QueryHistory
from sqlagent.execution.metrics import ExecutionMetrics

__all__ = ["ExecutionMetrics", "QueryCache", "QueryHistory"]
