"""
SQL Agent Routes

FastAPI endpoints for natural language querying, admin SQL execution,
analytics and catalog inspection. Every response uses the
``{success, message, data?, error?, timestamp}`` envelope.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from sqlagent.api.dependencies import (
    RATE_LIMITED_MESSAGE,
    get_agent_context,
    is_rate_limited,
    require_admin,
)
from sqlagent.catalog.categories import DEFAULT_CATEGORIES
from sqlagent.models.agent import AgentError, QuestionResult
from sqlagent.models.api import ApiEnvelope, ChatRequest, DirectSQLRequest, QueryRequest
from sqlagent.pipeline.context import AgentContext

logger = logging.getLogger(__name__)

router = APIRouter()


def _envelope(status_code: int, **fields: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiEnvelope(**fields).to_content())


@router.get("/health")
async def health(context: AgentContext = Depends(get_agent_context)) -> JSONResponse:
    """
    Database and LLM health.

    Returns:
        200 OK when both answer
        503 Service Unavailable otherwise
    """
    health_status = await context.pipeline.health_check()
    if health_status["success"]:
        return _envelope(
            status.HTTP_200_OK,
            success=True,
            message="Advanced SQL Agent is healthy",
            data=health_status,
        )
    return _envelope(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        success=False,
        message="Advanced SQL Agent is unhealthy",
        error=health_status.get("error"),
    )


@router.post("/query")
async def query(
    request: Request,
    query_request: QueryRequest,
    context: AgentContext = Depends(get_agent_context),
) -> JSONResponse:
    """
    Answer a natural language question.

    Returns 400 for an empty question or a pipeline failure and 429 when the
    caller is over the rate limit.
    """
    question = (query_request.question or "").strip()
    if not question:
        return _envelope(
            status.HTTP_400_BAD_REQUEST,
            success=False,
            message="Question is required and must be a non-empty string",
        )

    if is_rate_limited(request, context):
        return _envelope(
            status.HTTP_429_TOO_MANY_REQUESTS, success=False, message=RATE_LIMITED_MESSAGE
        )

    result = await context.pipeline.run(question, use_cache=query_request.use_cache)

    data: dict[str, Any] = {
        "question": result.question,
        "response": result.response,
        "category": result.category,
        "tables": result.tables,
        "executionTime": result.execution_time_ms,
        "rowCount": result.row_count,
        "fromCache": result.from_cache,
    }
    if query_request.include_query and result.success and result.query:
        data["sqlQuery"] = result.query

    return _envelope(
        status.HTTP_200_OK if result.success else status.HTTP_400_BAD_REQUEST,
        success=result.success,
        message="Query processed successfully" if result.success else "Query processing failed",
        data=data,
        error=None if result.success else result.error,
    )


@router.post("/direct-sql", dependencies=[Depends(require_admin)])
async def direct_sql(
    sql_request: DirectSQLRequest,
    context: AgentContext = Depends(get_agent_context),
) -> JSONResponse:
    """Validate and execute SQL supplied by an administrator."""
    sql = (sql_request.query or "").strip()
    if not sql:
        return _envelope(
            status.HTTP_400_BAD_REQUEST,
            success=False,
            message="SQL query is required and must be a non-empty string",
        )

    try:
        validated = context.guard.validate(sql)
    except AgentError as exc:
        logger.warning(f"Direct SQL rejected: {exc.message}")
        return _envelope(
            status.HTTP_400_BAD_REQUEST,
            success=False,
            message="Query validation failed",
            error=exc.message,
        )

    result = await context.executor.execute_sql(validated, use_cache=sql_request.use_cache)
    if not result.success:
        return _envelope(
            status.HTTP_400_BAD_REQUEST,
            success=False,
            message="Query execution failed",
            error=result.error,
        )

    return _envelope(
        status.HTTP_200_OK,
        success=True,
        message="Query executed successfully",
        data={
            "query": validated,
            "results": result.rows,
            "executionTime": result.execution_time_ms,
            "rowCount": result.row_count,
            "fromCache": result.from_cache,
        },
    )


@router.get("/analytics", dependencies=[Depends(require_admin)])
async def analytics(context: AgentContext = Depends(get_agent_context)) -> JSONResponse:
    return _envelope(
        status.HTTP_200_OK,
        success=True,
        message="Analytics retrieved successfully",
        data=context.executor.analytics(),
    )


@router.post("/clear-cache", dependencies=[Depends(require_admin)])
async def clear_cache(context: AgentContext = Depends(get_agent_context)) -> JSONResponse:
    cleared = context.executor.clear_cache()
    return _envelope(
        status.HTTP_200_OK,
        success=True,
        message="Cache cleared successfully",
        data={"success": True, "message": "Cache cleared successfully", "cleared": cleared},
    )


@router.get("/tables")
async def tables(context: AgentContext = Depends(get_agent_context)) -> JSONResponse:
    """Category mapping plus an overview of every table in the catalog."""
    table_schemas = {summary["name"]: summary for summary in context.catalog.summaries()}
    categories = {
        category.name: {"tables": list(category.tables), "keywords": list(category.keywords)}
        for category in DEFAULT_CATEGORIES
    }
    return _envelope(
        status.HTTP_200_OK,
        success=True,
        message="Database tables retrieved successfully",
        data={
            "categories": categories,
            "tableSchemas": table_schemas,
            "totalTables": len(table_schemas),
        },
    )


def compose_chat_response(result: QuestionResult, chat_request: ChatRequest) -> str:
    """Answer text with the conversation context footer and a timing note."""
    text = result.response
    chat_context = chat_request.context
    if chat_context and (chat_context.company_name or chat_context.project_name):
        text += "\n\n---\n"
        if chat_context.company_name:
            text += f"*Company: {chat_context.company_name}*\n"
        if chat_context.project_name:
            text += f"*Project: {chat_context.project_name}*\n"

    if result.success and result.execution_time_ms:
        text += f"\n*Query executed in {result.execution_time_ms}ms"
        if result.from_cache:
            text += " (cached result)"
        text += "*"
    return text


@router.post("/chat")
async def chat(
    chat_request: ChatRequest,
    context: AgentContext = Depends(get_agent_context),
) -> JSONResponse:
    """Chat front end over the question pipeline."""
    message = (chat_request.message or "").strip()
    if not message:
        return _envelope(
            status.HTTP_400_BAD_REQUEST,
            success=False,
            message="Message is required and must be a non-empty string",
        )

    logger.info(
        f"Chat request received: {message[:100]}",
        extra={"history_length": len(chat_request.conversation_history)},
    )
    result = await context.pipeline.run(message)

    return _envelope(
        status.HTTP_200_OK,
        success=True,
        message="Chat message processed successfully",
        data={
            "response": compose_chat_response(result, chat_request),
            "metadata": {
                "querySuccessful": result.success,
                "category": result.category,
                "tables": result.tables,
                "executionTime": result.execution_time_ms,
                "rowCount": result.row_count,
                "fromCache": result.from_cache,
            },
        },
    )
