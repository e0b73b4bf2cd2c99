"""Unit tests for ProjectSummaryAgent."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from sqlagent.agents.project_summary import (
    ProjectSummaryAgent,
    build_basic_summary,
    is_summary_request,
    is_summary_retryable,
)
from sqlagent.connectors.base import QueryError, QueryResult
from sqlagent.models.agent import ErrorKind
from sqlagent.utils.retry import RetryPolicy

AI_SUMMARY_ROW = {
    "id": 7,
    "intent_framework_id": 1,
    "companyId": 12,
    "projectId": "1024",
    "projectCode": "P-1024",
    "summary": "<h2>Milestones</h2><p>Prototype <strong>done</strong></p>",
    "status": "active",
    "createdtime": datetime(2025, 3, 1, 9, 0, 0),
    "modifiedtime": datetime(2025, 3, 4, 15, 30, 0),
}

PROJECT_ROW = {
    "projectId": "1024",
    "projectCode": "P-1024",
    "projectName": "Battery Research",
    "companyId": 12,
    "projectType": "R&D",
    "projectStatus": "Active",
    "startDate": date(2024, 1, 15),
    "endDate": None,
    "totalBudget": Decimal("150000.00"),
    "projectManager": "Dana Lee",
    "createdTime": datetime(2024, 1, 10, 8, 0, 0),
    "modifiedTime": None,
}


def _result(rows):
    return QueryResult(
        rows=rows, row_count=len(rows), columns=list(rows[0]) if rows else [], execution_time_ms=1.0
    )


@pytest.fixture
def agent(mock_mysql_connector, mock_llm_provider, no_sleep):
    return ProjectSummaryAgent(
        mock_mysql_connector,
        mock_llm_provider,
        retry_policy=RetryPolicy(max_attempts=3, is_retryable=is_summary_retryable, sleep=no_sleep),
    )


def _route(summary_rows=(), project_rows=(), company_rows=()):
    """execute() side effect that answers by target table."""

    async def _execute(sql, params=None):
        if "FROM projects" in sql:
            return _result(list(project_rows))
        if "companyId = %s" in sql:
            return _result(list(company_rows))
        if "LIKE" in sql:
            return _result([])
        return _result(list(summary_rows))

    return _execute


class TestFetchProjectSummary:
    @pytest.mark.asyncio
    async def test_ai_summary(self, agent, mock_mysql_connector):
        mock_mysql_connector.execute.side_effect = _route(summary_rows=[AI_SUMMARY_ROW])

        lookup = await agent.fetch_project_summary("1024")

        assert lookup.success is True
        assert lookup.message == "AI project summary retrieved successfully"
        assert lookup.data.source == "ai_summary"
        assert lookup.data.id == "7"
        assert lookup.data.company_id == "12"
        assert lookup.data.last_modified == datetime(2025, 3, 4, 15, 30, 0)
        sql, params = mock_mysql_connector.execute.call_args.args
        assert "master_project_ai_summary" in sql
        assert params == ["1024"] * 4

    @pytest.mark.asyncio
    async def test_basic_project_fallback(self, agent, mock_mysql_connector):
        mock_mysql_connector.execute.side_effect = _route(project_rows=[PROJECT_ROW])

        lookup = await agent.fetch_project_summary("1024")

        assert lookup.success is True
        assert lookup.message == "Basic project information retrieved successfully"
        assert lookup.data.source == "basic_project_data"
        assert lookup.data.status == "basic_info"
        assert "**Budget:** $150,000" in lookup.data.summary
        assert "**Start Date:** 01/15/2024" in lookup.data.summary
        assert lookup.data.raw_project_data["totalBudget"] == 150000.0
        assert lookup.data.raw_project_data["startDate"] == "2024-01-15"

    @pytest.mark.asyncio
    async def test_not_found(self, agent, mock_mysql_connector):
        mock_mysql_connector.execute.side_effect = _route()

        lookup = await agent.fetch_project_summary("999")

        assert lookup.success is False
        assert lookup.message == "No summary found for project ID: 999"
        # summary, projects, then the suggestions lookup
        assert mock_mysql_connector.execute.await_count == 3

    @pytest.mark.asyncio
    async def test_database_error(self, agent, mock_mysql_connector, no_sleep):
        mock_mysql_connector.execute.side_effect = QueryError(
            "Access denied", code="ER_ACCESS_DENIED_ERROR"
        )

        lookup = await agent.fetch_project_summary("1024")

        assert lookup.success is False
        assert lookup.message == "Database error occurred while fetching project summary"
        assert lookup.error == "Access denied"
        assert no_sleep.delays == []

    @pytest.mark.asyncio
    async def test_connection_reset_retried(self, agent, mock_mysql_connector, no_sleep):
        mock_mysql_connector.execute.side_effect = [
            QueryError("read ECONNRESET", code="ECONNRESET", kind=ErrorKind.TRANSIENT),
            _result([AI_SUMMARY_ROW]),
        ]

        lookup = await agent.fetch_project_summary("1024")

        assert lookup.success is True
        assert no_sleep.delays == [1.0]
        mock_mysql_connector.reset_pool.assert_awaited_once()


class TestCompanySummaries:
    @pytest.mark.asyncio
    async def test_previews_truncated(self, agent, mock_mysql_connector):
        row = {**AI_SUMMARY_ROW, "summary": "x" * 300}
        mock_mysql_connector.execute.side_effect = _route(company_rows=[row])

        result = await agent.fetch_company_project_summaries("12")

        assert result.success is True
        assert result.message == "Found 1 project summaries for company 12"
        assert result.data[0].summary == "x" * 200 + "..."

    @pytest.mark.asyncio
    async def test_missing_company_id(self, agent):
        result = await agent.fetch_company_project_summaries("")

        assert result.success is False
        assert result.error == "Company ID is required"


class TestAnswerQuery:
    @pytest.mark.asyncio
    async def test_answer_grounded_on_summary(self, agent, mock_mysql_connector, mock_llm_provider):
        mock_mysql_connector.execute.side_effect = _route(summary_rows=[AI_SUMMARY_ROW])
        mock_llm_provider.set_response("The prototype milestone is complete.")

        answer = await agent.answer_query("1024", "What are the key milestones?")

        assert answer.success is True
        assert answer.answer == "The prototype milestone is complete."
        assert answer.project_info == {
            "projectId": "1024",
            "projectCode": "P-1024",
            "lastUpdated": "2025-03-04T15:30:00",
        }
        prompt = mock_llm_provider.last_prompt()
        assert "USER QUESTION: What are the key milestones?" in prompt
        assert "Prototype" in prompt

    @pytest.mark.asyncio
    async def test_unknown_project(self, agent, mock_mysql_connector, mock_llm_provider):
        mock_mysql_connector.execute.side_effect = _route()

        answer = await agent.answer_query("999", "Anything?")

        assert answer.success is False
        assert answer.answer.startswith("I couldn't find a summary for this project.")
        mock_llm_provider.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_model_error(self, agent, mock_mysql_connector, mock_llm_provider):
        mock_mysql_connector.execute.side_effect = _route(summary_rows=[AI_SUMMARY_ROW])
        mock_llm_provider.set_error(RuntimeError("model down"))

        answer = await agent.answer_query("1024", "Status?")

        assert answer.success is False
        assert answer.message == "Failed to process query"
        assert answer.error == "model down"


class TestFormattedSummary:
    @pytest.mark.asyncio
    async def test_card_rendering(self, agent, mock_mysql_connector):
        mock_mysql_connector.execute.side_effect = _route(summary_rows=[AI_SUMMARY_ROW])

        formatted = await agent.get_formatted_summary("1024")

        assert formatted.success is True
        text = formatted.formatted_summary
        assert text.startswith("📋 **Project Summary**")
        assert "- 🆔 Project ID: `1024`" in text
        assert "- 📅 Last Updated: 03/04/2025" in text
        assert "**done**" in text
        assert "<p>" not in text
        assert text.endswith("*This summary was last updated on 03/04/2025, 03:30:00 PM*")

    @pytest.mark.asyncio
    async def test_missing_summary(self, agent, mock_mysql_connector):
        mock_mysql_connector.execute.side_effect = _route()

        formatted = await agent.get_formatted_summary("999")

        assert formatted.success is False
        assert formatted.formatted_summary == "No summary available for this project."


class TestHealth:
    @pytest.mark.asyncio
    async def test_database_down_still_reports_healthy(self, agent, mock_mysql_connector):
        mock_mysql_connector.execute.side_effect = QueryError("refused", code="ECONNREFUSED")

        health = await agent.health_check()

        assert health["status"] == "healthy"
        assert health["services"]["database"] == "disconnected"


def test_basic_summary_without_name():
    summary = build_basic_summary({"projectId": 55, "totalBudget": "1234.5"})

    assert summary.startswith("**Project 55**")
    assert "**Budget:** $1,234.50" in summary
    assert "*Note: This is basic project information." in summary


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Give me a SUMMARY", True),
        ("Can you summarize it?", True),
        ("Tell me about this project", True),
        ("Show the details", True),
        ("Who is the project manager?", False),
    ],
)
def test_is_summary_request(message, expected):
    assert is_summary_request(message) is expected
