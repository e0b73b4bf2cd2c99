"""
Data Models

Pydantic models shared across agents, pipeline and API.
"""

from sqlagent.models.agent import (
    AgentError,
    AgentMetadata,
    CategorySelection,
    ErrorKind,
    ExecutionResult,
    GeneratedSQL,
    QueryHistoryRecord,
    QueryValidationError,
    QuestionResult,
    SQLGenerationError,
)
from sqlagent.models.catalog import CategoryDefinition

__all__ = [
    "AgentError",
    "AgentMetadata",
    "CategoryDefinition",
    "CategorySelection",
    "ErrorKind",
    "ExecutionResult",
    "GeneratedSQL",
    "QueryHistoryRecord",
    "QueryValidationError",
    "QuestionResult",
    "SQLGenerationError",
]
