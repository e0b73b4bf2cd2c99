"""
ProjectSummaryAgent

Serves the stored AI project summaries (master_project_ai_summary) and
answers questions about a single project grounded on its summary.

Database access shares the application's connector. Connection drops are
retried with backoff and the pool is recreated before each retry.
"""

import logging
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sqlagent.agents.base import BaseAgent
from sqlagent.connectors.base import BaseConnector, ConnectorError
from sqlagent.llm.base import BaseLLMProvider
from sqlagent.prompts.loader import PromptLoader
from sqlagent.utils.html_markdown import html_to_markdown
from sqlagent.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

SUMMARY_RETRY_CODES = frozenset({"ECONNRESET", "PROTOCOL_CONNECTION_LOST", "ENOTFOUND"})
SUMMARY_PREVIEW_LENGTH = 200
SUMMARY_REQUEST_KEYWORDS = ("summary", "summarize", "overview", "details", "about this project")

_LATEST_SUMMARY_SQL = """
    SELECT
        id, intent_framework_id, companyId, projectId, projectCode, summary, status,
        createdtime, createdby, modifiedtime, modifiedby, summary_identifier
    FROM master_project_ai_summary
    WHERE (projectId = %s OR projectId = CONCAT('3', %s) OR projectId = LPAD(%s, 6, '0') OR projectCode = %s)
    AND status = 'active'
    ORDER BY modifiedtime DESC
    LIMIT 1
"""

_BASIC_PROJECT_SQL = """
    SELECT
        projectId, projectCode, projectName, companyId, projectType, projectStatus,
        startDate, endDate, totalBudget, projectManager, createdTime, modifiedTime
    FROM projects
    WHERE projectId = %s
    LIMIT 1
"""

_SUGGESTIONS_SQL = """
    SELECT DISTINCT projectId, projectCode
    FROM master_project_ai_summary
    WHERE status = 'active'
    AND (projectId LIKE %s OR projectCode LIKE %s)
    ORDER BY modifiedtime DESC
    LIMIT 5
"""

_COMPANY_SUMMARIES_SQL = """
    SELECT id, projectId, projectCode, summary, status, modifiedtime
    FROM master_project_ai_summary
    WHERE companyId = %s
    AND status = 'active'
    ORDER BY modifiedtime DESC
"""


def is_summary_request(message: str) -> bool:
    """True when a chat message asks to see the whole summary."""
    lowered = message.lower()
    return any(keyword in lowered for keyword in SUMMARY_REQUEST_KEYWORDS)


def is_summary_retryable(exc: BaseException) -> bool:
    return isinstance(exc, ConnectorError) and exc.code in SUMMARY_RETRY_CODES


# ============================================================================
# Result models
# ============================================================================


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectSummary(_CamelModel):
    """One project's summary, either AI generated or assembled from basic project data."""

    id: str | None = None
    project_id: str
    project_code: str | None = None
    company_id: str | None = None
    summary: str
    status: str | None = None
    last_modified: datetime | str | None = None
    source: Literal["ai_summary", "basic_project_data"] = "ai_summary"
    raw_project_data: dict[str, Any] | None = None


class SummaryLookup(_CamelModel):
    success: bool
    message: str
    data: ProjectSummary | None = None
    error: str | None = None


class CompanySummaries(_CamelModel):
    success: bool
    message: str
    data: list[ProjectSummary] = Field(default_factory=list)
    error: str | None = None


class ProjectAnswer(_CamelModel):
    success: bool
    message: str
    answer: str
    project_info: dict[str, Any] | None = None
    error: str | None = None


class FormattedSummary(_CamelModel):
    success: bool
    message: str
    formatted_summary: str
    raw_data: ProjectSummary | None = None
    error: str | None = None


# ============================================================================
# Formatting helpers
# ============================================================================


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def _format_date(value: Any) -> str:
    moment = _as_datetime(value)
    return moment.strftime("%m/%d/%Y") if moment else str(value or "Unknown")


def _format_datetime(value: Any) -> str:
    moment = _as_datetime(value)
    return moment.strftime("%m/%d/%Y, %I:%M:%S %p") if moment else str(value or "Unknown")


def _format_money(value: Any) -> str | None:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    text = f"{amount:,.2f}"
    if text.endswith(".00"):
        text = text[:-3]
    return f"${text}"


def build_basic_summary(project: dict[str, Any]) -> str:
    """Markdown summary assembled from a ``projects`` row."""
    lines = [f"**{project.get('projectName') or 'Project ' + str(project.get('projectId'))}**", ""]

    if project.get("projectType"):
        lines.append(f"**Type:** {project['projectType']}")
    if project.get("projectStatus"):
        lines.append(f"**Status:** {project['projectStatus']}")
    if project.get("startDate"):
        lines.append(f"**Start Date:** {_format_date(project['startDate'])}")
    if project.get("endDate"):
        lines.append(f"**End Date:** {_format_date(project['endDate'])}")
    for key, label in (("totalBudget", "Budget"), ("totalCost", "Total Cost")):
        if project.get(key):
            money = _format_money(project[key])
            if money:
                lines.append(f"**{label}:** {money}")
    if project.get("projectManager"):
        lines.append(f"**Project Manager:** {project['projectManager']}")

    lines.append("")
    lines.append(
        "*Note: This is basic project information. A detailed AI-generated summary "
        "may not be available for this project yet.*"
    )
    return "\n".join(lines)


# ============================================================================
# Agent
# ============================================================================


class ProjectSummaryAgent(BaseAgent):
    """
    Project summary lookup and Q&A.

    Usage:
        agent = ProjectSummaryAgent(connector, llm_provider)
        lookup = await agent.fetch_project_summary("1024")
        answer = await agent.answer_query("1024", "What are the key milestones?")
    """

    def __init__(
        self,
        connector: BaseConnector,
        llm_provider: BaseLLMProvider,
        retry_policy: RetryPolicy | None = None,
        prompts: PromptLoader | None = None,
    ):
        super().__init__(name="ProjectSummaryAgent", llm_provider=llm_provider)
        self.connector = connector
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=3, is_retryable=is_summary_retryable
        )
        self.prompts = prompts or PromptLoader()

    async def _query(self, sql: str, params: list[Any]) -> list[dict[str, Any]]:
        result = await self.retry_policy.run(
            lambda: self.connector.execute(sql, params),
            on_retry=self._reset_pool,
        )
        return result.rows

    async def _reset_pool(self, next_attempt: int, error: BaseException) -> None:
        try:
            await self.connector.reset_pool()
        except ConnectorError as exc:
            logger.error(f"Database reconnection failed: {exc}")

    async def fetch_project_summary(self, project_id: str) -> SummaryLookup:
        if not project_id:
            return SummaryLookup(
                success=False,
                message="Database error occurred while fetching project summary",
                error="Project ID is required",
            )

        logger.info(f"Fetching project summary for ID: {project_id}")
        try:
            rows = await self._query(_LATEST_SUMMARY_SQL, [project_id] * 4)
            if rows:
                row = rows[0]
                return SummaryLookup(
                    success=True,
                    message="AI project summary retrieved successfully",
                    data=ProjectSummary(
                        id=_text(row.get("id")),
                        project_id=str(row["projectId"]),
                        project_code=_text(row.get("projectCode")),
                        company_id=_text(row.get("companyId")),
                        summary=row.get("summary") or "",
                        status=row.get("status"),
                        last_modified=row.get("modifiedtime") or row.get("createdtime"),
                        source="ai_summary",
                    ),
                )

            project_rows = await self._query(_BASIC_PROJECT_SQL, [project_id])
            if project_rows:
                project = project_rows[0]
                return SummaryLookup(
                    success=True,
                    message="Basic project information retrieved successfully",
                    data=ProjectSummary(
                        project_id=str(project["projectId"]),
                        project_code=_text(project.get("projectCode")),
                        company_id=_text(project.get("companyId")),
                        summary=build_basic_summary(project),
                        status="basic_info",
                        last_modified=project.get("modifiedTime") or project.get("createdTime"),
                        source="basic_project_data",
                        raw_project_data={k: _jsonable(v) for k, v in project.items()},
                    ),
                )

            await self._log_suggestions(project_id)
            return SummaryLookup(
                success=False, message=f"No summary found for project ID: {project_id}"
            )
        except ConnectorError as exc:
            logger.error(f"Error fetching project summary: {exc}")
            return SummaryLookup(
                success=False,
                message="Database error occurred while fetching project summary",
                error=str(exc),
            )

    async def _log_suggestions(self, project_id: str) -> None:
        pattern = f"%{project_id}%"
        try:
            suggestions = await self._query(_SUGGESTIONS_SQL, [pattern, pattern])
        except ConnectorError as exc:
            logger.info(f"Could not fetch suggestions: {exc}")
            return
        if suggestions:
            listing = ", ".join(f"{s['projectId']} ({s['projectCode']})" for s in suggestions)
            logger.info(f"Similar projects found: {listing}")

    async def fetch_company_project_summaries(self, company_id: str) -> CompanySummaries:
        if not company_id:
            return CompanySummaries(
                success=False,
                message="Failed to fetch company project summaries",
                error="Company ID is required",
            )
        try:
            rows = await self._query(_COMPANY_SUMMARIES_SQL, [company_id])
        except ConnectorError as exc:
            logger.error(f"Error fetching company project summaries: {exc}")
            return CompanySummaries(
                success=False,
                message="Failed to fetch company project summaries",
                error=str(exc),
            )

        return CompanySummaries(
            success=True,
            message=f"Found {len(rows)} project summaries for company {company_id}",
            data=[
                ProjectSummary(
                    id=_text(row.get("id")),
                    project_id=str(row["projectId"]),
                    project_code=_text(row.get("projectCode")),
                    summary=(row.get("summary") or "")[:SUMMARY_PREVIEW_LENGTH] + "...",
                    status=row.get("status"),
                    last_modified=row.get("modifiedtime"),
                )
                for row in rows
            ],
        )

    async def answer_query(self, project_id: str, question: str) -> ProjectAnswer:
        lookup = await self.fetch_project_summary(project_id)
        if not lookup.success or lookup.data is None:
            return ProjectAnswer(
                success=False,
                message=lookup.message,
                answer=(
                    "I couldn't find a summary for this project. Please make sure the project "
                    "ID is correct and the summary exists in the database."
                ),
            )

        project = lookup.data
        prompt = self.prompts.render(
            "agents/project_summary_answer.md",
            project_id=project.project_id,
            project_code=project.project_code,
            company_id=project.company_id,
            last_modified=project.last_modified,
            summary=project.summary,
            question=question,
        )
        try:
            answer = await self._complete(prompt)
        except Exception as exc:
            logger.error(f"Error answering query: {exc}")
            return ProjectAnswer(
                success=False,
                message="Failed to process query",
                error=str(exc),
                answer=(
                    "I'm sorry, I encountered an error while processing your question. "
                    "Please try again or contact support if the issue persists."
                ),
            )

        return ProjectAnswer(
            success=True,
            message="Query answered successfully",
            answer=answer,
            project_info={
                "projectId": project.project_id,
                "projectCode": project.project_code,
                "lastUpdated": _jsonable(project.last_modified),
            },
        )

    async def get_formatted_summary(self, project_id: str) -> FormattedSummary:
        lookup = await self.fetch_project_summary(project_id)
        if not lookup.success or lookup.data is None:
            return FormattedSummary(
                success=False,
                message=lookup.message,
                formatted_summary="No summary available for this project.",
            )

        project = lookup.data
        formatted = self.prompts.render(
            "agents/project_summary_card.md",
            project_id=project.project_id,
            project_code=project.project_code,
            company_id=project.company_id,
            last_updated_date=_format_date(project.last_modified),
            last_updated=_format_datetime(project.last_modified),
            body=html_to_markdown(project.summary),
        )
        return FormattedSummary(
            success=True,
            message="Summary formatted successfully",
            formatted_summary=formatted,
            raw_data=project,
        )

    async def health_check(self) -> dict[str, Any]:
        try:
            await self.connector.execute("SELECT 1")
            database = "connected"
        except ConnectorError as exc:
            logger.error(f"Database connection test failed: {exc}")
            database = "disconnected"

        return {
            "success": True,
            "status": "healthy",
            "services": {"database": database, "llm": "available", "agent": "running"},
            "timestamp": datetime.now(UTC).isoformat(),
        }


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value
