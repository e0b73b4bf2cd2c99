"""
SQL Agent Pipeline Orchestrator

LangGraph-based pipeline that answers one question end to end:
- CategoryAgent → TableSelector → SQLAgent → QueryGuard → ExecutorAgent → ResponseAgent
- SQL generation failures and guard rejections route to the error handler
- Execution failures still reach the ResponseAgent, which explains them
"""

import logging
import time
from datetime import UTC, datetime
from typing import Any, TypedDict

from langgraph.graph import END, StateGraph

from sqlagent.agents.classifier import CategoryAgent
from sqlagent.agents.executor import ExecutorAgent
from sqlagent.agents.response_synthesis import ResponseAgent
from sqlagent.agents.sql import SQLAgent
from sqlagent.agents.table_selector import TableSelector
from sqlagent.agents.validator import QueryGuard
from sqlagent.catalog.schema import SchemaCatalog
from sqlagent.connectors.base import BaseConnector
from sqlagent.llm.base import BaseLLMProvider
from sqlagent.llm.models import LLMMessage, LLMRequest
from sqlagent.models.agent import AgentError, ErrorKind, ExecutionResult, QuestionResult

logger = logging.getLogger(__name__)


# ============================================================================
# Pipeline State Schema
# ============================================================================


class PipelineState(TypedDict, total=False):
    """State carried between pipeline nodes."""

    # Input
    question: str
    use_cache: bool

    # Category / table selection
    category: str | None
    candidate_tables: list[str]
    tables: list[str]
    schema_text: str

    # SQL generation and guard
    generated_sql: str | None
    used_fallback: bool
    validated_sql: str | None

    # Execution and response
    execution: ExecutionResult | None
    response: str | None

    # Pipeline metadata
    current_agent: str | None
    error: str | None
    error_kind: ErrorKind | None
    agent_timings: dict[str, float]


def apology(question: str) -> str:
    return (
        f'I\'m sorry, I encountered an error while processing your question: "{question}". '
        "Please try rephrasing your question or contact support if the issue persists."
    )


# ============================================================================
# SQL Agent Pipeline
# ============================================================================


class SQLAgentPipeline:
    """
    LangGraph pipeline over the question answering agents.

    Usage:
        pipeline = SQLAgentPipeline(category_agent=..., table_selector=..., ...)
        result = await pipeline.run("How many companies do we have?")
        print(result.response)
    """

    def __init__(
        self,
        *,
        category_agent: CategoryAgent,
        table_selector: TableSelector,
        sql_agent: SQLAgent,
        guard: QueryGuard,
        executor: ExecutorAgent,
        response_agent: ResponseAgent,
        catalog: SchemaCatalog,
        connector: BaseConnector,
        llm: BaseLLMProvider,
    ):
        self.category_agent = category_agent
        self.table_selector = table_selector
        self.sql_agent = sql_agent
        self.guard = guard
        self.executor = executor
        self.response_agent = response_agent
        self.catalog = catalog
        self.connector = connector
        self.llm = llm

        self.graph = self._build_graph()
        logger.info("SQLAgentPipeline initialized")

    def _build_graph(self):
        workflow = StateGraph(PipelineState)

        workflow.add_node("category", self._run_category)
        workflow.add_node("tables", self._run_tables)
        workflow.add_node("sql", self._run_sql)
        workflow.add_node("guard", self._run_guard)
        workflow.add_node("executor", self._run_executor)
        workflow.add_node("response", self._run_response)
        workflow.add_node("error_handler", self._handle_error)

        workflow.set_entry_point("category")
        workflow.add_edge("category", "tables")
        workflow.add_edge("tables", "sql")
        workflow.add_conditional_edges(
            "sql",
            self._continue_unless_error,
            {"continue": "guard", "error": "error_handler"},
        )
        workflow.add_conditional_edges(
            "guard",
            self._continue_unless_error,
            {"continue": "executor", "error": "error_handler"},
        )
        workflow.add_edge("executor", "response")
        workflow.add_edge("response", END)
        workflow.add_edge("error_handler", END)

        return workflow.compile()

    # ========================================================================
    # Public API
    # ========================================================================

    async def run(self, question: str, use_cache: bool = True) -> QuestionResult:
        """Answer one question; failures come back as ``success=False`` results."""
        logger.info(f"Processing question: {question}")
        initial_state: PipelineState = {
            "question": question,
            "use_cache": use_cache,
            "category": None,
            "candidate_tables": [],
            "tables": [],
            "schema_text": "",
            "generated_sql": None,
            "used_fallback": False,
            "validated_sql": None,
            "execution": None,
            "response": None,
            "current_agent": None,
            "error": None,
            "error_kind": None,
            "agent_timings": {},
        }

        try:
            state = await self.graph.ainvoke(initial_state)
        except Exception as exc:
            logger.error(f"Error processing question: {exc}", exc_info=True)
            return QuestionResult(
                success=False,
                question=question,
                response=apology(question),
                error=str(exc),
                error_kind=ErrorKind.UNKNOWN,
            )

        if state.get("error"):
            return QuestionResult(
                success=False,
                question=question,
                response=state.get("response") or apology(question),
                category=state.get("category"),
                tables=state.get("tables", []),
                query=state.get("generated_sql"),
                error=state["error"],
                error_kind=state.get("error_kind"),
            )

        execution = state.get("execution")
        error_kind = execution.error_kind if execution else None
        if error_kind is None and state.get("used_fallback"):
            # Answered, but from a template query because the model was throttled
            error_kind = ErrorKind.UPSTREAM_RATE_LIMIT
        return QuestionResult(
            success=True,
            question=question,
            response=state.get("response") or "",
            category=state.get("category"),
            tables=state.get("tables", []),
            query=state.get("validated_sql"),
            execution_time_ms=execution.execution_time_ms if execution else None,
            row_count=execution.row_count if execution else 0,
            from_cache=execution.from_cache if execution else False,
            error=execution.error if execution else None,
            error_kind=error_kind,
        )

    async def health_check(self) -> dict[str, Any]:
        """Probe the database and the model."""
        try:
            await self.connector.execute("SELECT 1 AS test")
            await self.llm.generate(
                LLMRequest(messages=[LLMMessage(role="user", content="Test message")])
            )
        except Exception as exc:
            logger.error(f"Health check failed: {exc}")
            return {
                "success": False,
                "status": "unhealthy",
                "error": str(exc),
                "timestamp": datetime.now(UTC).isoformat(),
            }

        return {
            "success": True,
            "status": "healthy",
            "services": {"database": "connected", "llm": "available", "agent": "running"},
            "metrics": self.executor.metrics.snapshot(),
            "cacheSize": len(self.executor.cache),
            "tablesLoaded": len(self.catalog),
            "timestamp": datetime.now(UTC).isoformat(),
        }

    # ========================================================================
    # Nodes
    # ========================================================================

    async def _run_category(self, state: PipelineState) -> PipelineState:
        start = time.perf_counter()
        state["current_agent"] = self.category_agent.name
        selection = await self.category_agent.select_category(state["question"])
        state["category"] = selection.category
        state["candidate_tables"] = selection.tables
        self._record_timing(state, "category", start)
        return state

    async def _run_tables(self, state: PipelineState) -> PipelineState:
        start = time.perf_counter()
        state["current_agent"] = "TableSelector"
        tables = self.table_selector.select(state["question"], state.get("candidate_tables", []))
        state["tables"] = tables
        state["schema_text"] = self.catalog.describe(tables)
        self._record_timing(state, "tables", start)
        return state

    async def _run_sql(self, state: PipelineState) -> PipelineState:
        start = time.perf_counter()
        state["current_agent"] = self.sql_agent.name
        try:
            generated = await self.sql_agent.generate(
                state["question"], state.get("tables", []), state.get("schema_text", "")
            )
        except AgentError as exc:
            state["error"] = exc.message
            state["error_kind"] = exc.kind
        else:
            state["generated_sql"] = generated.sql
            state["used_fallback"] = generated.used_fallback
        self._record_timing(state, "sql", start)
        return state

    async def _run_guard(self, state: PipelineState) -> PipelineState:
        state["current_agent"] = self.guard.name
        try:
            state["validated_sql"] = self.guard.validate(state.get("generated_sql") or "")
        except AgentError as exc:
            state["error"] = exc.message
            state["error_kind"] = exc.kind
        return state

    async def _run_executor(self, state: PipelineState) -> PipelineState:
        start = time.perf_counter()
        state["current_agent"] = self.executor.name
        state["execution"] = await self.executor.execute_sql(
            state["validated_sql"] or "", use_cache=state.get("use_cache", True)
        )
        self._record_timing(state, "executor", start)
        return state

    async def _run_response(self, state: PipelineState) -> PipelineState:
        start = time.perf_counter()
        state["current_agent"] = self.response_agent.name
        state["response"] = await self.response_agent.compose(
            state["question"], state.get("validated_sql") or "", state["execution"]
        )
        self._record_timing(state, "response", start)
        return state

    async def _handle_error(self, state: PipelineState) -> PipelineState:
        logger.error(
            f"Pipeline error in {state.get('current_agent')}: {state.get('error')}",
            extra={"error_kind": getattr(state.get("error_kind"), "value", None)},
        )
        state["current_agent"] = "ErrorHandler"
        state["response"] = apology(state["question"])
        return state

    # ========================================================================
    # Conditional Edge Logic
    # ========================================================================

    def _continue_unless_error(self, state: PipelineState) -> str:
        return "error" if state.get("error") else "continue"

    @staticmethod
    def _record_timing(state: PipelineState, node: str, start: float) -> None:
        timings = dict(state.get("agent_timings") or {})
        timings[node] = (time.perf_counter() - start) * 1000
        state["agent_timings"] = timings
