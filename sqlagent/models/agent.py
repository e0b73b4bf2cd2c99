"""
Agent I/O Models

Pydantic models for agent inputs, outputs, and error handling.
Every stage of the question pipeline exchanges these models so that
failures cross component boundaries as values, not exceptions.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    """Broad failure classes used to decide retry and fallback behaviour."""

    TRANSIENT = "transient"
    VALIDATION = "validation"
    SEMANTIC_SCHEMA = "semantic_schema"
    UPSTREAM_RATE_LIMIT = "upstream_rate_limit"
    UNKNOWN = "unknown"


class AgentMetadata(BaseModel):
    """Metadata about agent execution."""

    agent_name: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    duration_ms: float | None = None
    llm_calls: int = 0
    tokens_used: int | None = None
    error: str | None = None

    model_config = ConfigDict(frozen=False)

    def mark_complete(self) -> None:
        """Mark execution as complete and calculate duration."""
        self.completed_at = datetime.now(UTC)
        if self.started_at:
            delta = self.completed_at - self.started_at
            self.duration_ms = delta.total_seconds() * 1000


class AgentError(Exception):
    """
    Custom exception for agent execution errors.

    Attributes:
        agent: Name of the agent that raised the error
        message: Error description
        kind: Failure class (see ErrorKind)
        recoverable: Whether the pipeline can retry or continue
        context: Additional context for debugging
    """

    def __init__(
        self,
        agent: str,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.agent = agent
        self.message = message
        self.kind = kind
        self.recoverable = recoverable
        self.context = context or {}
        super().__init__(f"[{agent}] {message}")


class QueryValidationError(AgentError):
    """Statement rejected before reaching the database (never retried)."""

    def __init__(self, agent: str, message: str, context: dict[str, Any] | None = None):
        super().__init__(
            agent, message, kind=ErrorKind.VALIDATION, recoverable=False, context=context
        )


class SQLGenerationError(AgentError):
    """Error during SQL generation."""

    def __init__(self, agent: str, message: str, context: dict[str, Any] | None = None):
        super().__init__(agent, message, kind=ErrorKind.UNKNOWN, recoverable=False, context=context)


# ============================================================================
# Category / Table selection models
# ============================================================================


class CategorySelection(BaseModel):
    """Outcome of mapping a question onto a business category."""

    category: str = Field(..., description="Selected category label")
    tables: list[str] = Field(default_factory=list, description="Candidate tables")
    score: int = Field(default=0, ge=0, description="Keyword score of the winner")
    used_llm: bool = Field(default=False, description="Whether the LLM classifier was used")


# ============================================================================
# SQL generation / execution models
# ============================================================================


class GeneratedSQL(BaseModel):
    """SQL produced by the synthesizer."""

    sql: str = Field(..., description="Single SQL statement")
    used_fallback: bool = Field(
        default=False, description="True when a template query replaced the model output"
    )


class ExecutionResult(BaseModel):
    """Structured outcome of running a guarded statement."""

    success: bool
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = 0
    execution_time_ms: int = 0
    from_cache: bool = False
    error: str | None = None
    error_code: str | None = None
    error_kind: ErrorKind | None = None


class QuestionResult(BaseModel):
    """Final result of answering one natural language question."""

    success: bool
    question: str
    response: str
    category: str | None = None
    tables: list[str] = Field(default_factory=list)
    query: str | None = None
    execution_time_ms: int | None = None
    row_count: int = 0
    from_cache: bool = False
    error: str | None = None
    error_kind: ErrorKind | None = None


# ============================================================================
# Analytics models
# ============================================================================


class QueryHistoryRecord(BaseModel):
    """One executed statement, kept for analytics only."""

    timestamp: str
    query: str
    success: bool
    execution_time_ms: int = Field(..., alias="executionTime")
    row_count: int = Field(..., alias="rowCount")
    error: str | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)
