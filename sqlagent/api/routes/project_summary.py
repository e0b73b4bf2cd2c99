"""
Project Summary Routes

FastAPI endpoints over the ProjectSummaryAgent: formatted and raw project
summaries, company listings, project Q&A and project chat.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from sqlagent.agents.project_summary import is_summary_request
from sqlagent.api.dependencies import get_agent_context
from sqlagent.models.api import ProjectChatRequest, ProjectQueryRequest, ProjectQuestionRequest
from sqlagent.pipeline.context import AgentContext

logger = logging.getLogger(__name__)

router = APIRouter()

QUESTION_REQUIRED_MESSAGE = "Both projectId and question are required"
SUMMARY_MISSING_RESPONSE = (
    "I couldn't find a summary for this project. "
    "The project may not have a summary generated yet."
)


def _respond(status_code: int, content: dict[str, Any]) -> JSONResponse:
    content.setdefault("timestamp", datetime.now(UTC).isoformat())
    return JSONResponse(status_code=status_code, content=content)


@router.get("/health")
async def health(context: AgentContext = Depends(get_agent_context)) -> JSONResponse:
    health_status = await context.project_summary.health_check()
    code = status.HTTP_200_OK if health_status["success"] else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=health_status)


@router.get("/raw/{project_id}")
async def raw_summary(
    project_id: str, context: AgentContext = Depends(get_agent_context)
) -> JSONResponse:
    """Project summary without chat formatting."""
    lookup = await context.project_summary.fetch_project_summary(project_id)
    if not lookup.success:
        return _respond(
            status.HTTP_404_NOT_FOUND,
            {"success": False, "message": lookup.message, "projectId": project_id},
        )
    return _respond(
        status.HTTP_200_OK,
        {
            "success": True,
            "message": lookup.message,
            "projectId": project_id,
            "data": lookup.data.model_dump(by_alias=True, mode="json") if lookup.data else None,
        },
    )


@router.get("/company/{company_id}")
async def company_summaries(
    company_id: str, context: AgentContext = Depends(get_agent_context)
) -> JSONResponse:
    result = await context.project_summary.fetch_company_project_summaries(company_id)
    if not result.success:
        return _respond(
            status.HTTP_404_NOT_FOUND,
            {"success": False, "message": result.message, "companyId": company_id},
        )
    return _respond(
        status.HTTP_200_OK,
        {
            "success": True,
            "message": result.message,
            "companyId": company_id,
            "projectCount": len(result.data),
            "projects": [p.model_dump(by_alias=True, mode="json") for p in result.data],
        },
    )


@router.get("/{project_id}")
async def formatted_summary(
    project_id: str, context: AgentContext = Depends(get_agent_context)
) -> JSONResponse:
    """Chat-ready Markdown summary of a project."""
    result = await context.project_summary.get_formatted_summary(project_id)
    if not result.success:
        return _respond(
            status.HTTP_404_NOT_FOUND,
            {"success": False, "message": result.message, "projectId": project_id},
        )
    return _respond(
        status.HTTP_200_OK,
        {
            "success": True,
            "message": result.message,
            "projectId": project_id,
            "summary": result.formatted_summary,
            "data": result.raw_data.model_dump(by_alias=True, mode="json")
            if result.raw_data
            else None,
        },
    )


async def _answer(context: AgentContext, project_id: str, question: str) -> JSONResponse:
    logger.info(f"Processing query for project {project_id}: {question}")
    result = await context.project_summary.answer_query(project_id, question)
    content = {
        "success": result.success,
        "message": result.message,
        "projectId": project_id,
        "question": question,
        "answer": result.answer,
    }
    if result.success:
        content["projectInfo"] = result.project_info
        return _respond(status.HTTP_200_OK, content)
    content["error"] = result.error
    return _respond(status.HTTP_404_NOT_FOUND, content)


@router.post("/query")
async def query(
    query_request: ProjectQueryRequest, context: AgentContext = Depends(get_agent_context)
) -> JSONResponse:
    """Answer a question about the project named in the body."""
    project_id = (query_request.project_id or "").strip()
    question = (query_request.question or "").strip()
    if not project_id or not question:
        return _respond(
            status.HTTP_400_BAD_REQUEST,
            {"success": False, "message": QUESTION_REQUIRED_MESSAGE},
        )
    return await _answer(context, project_id, question)


@router.post("/chat")
async def chat(
    chat_request: ProjectChatRequest, context: AgentContext = Depends(get_agent_context)
) -> JSONResponse:
    """
    Chat about one project.

    Messages asking for the summary itself get the formatted card
    (``responseType: summary``); anything else is answered from the summary
    (``responseType: query_answer``).
    """
    message = (chat_request.message or "").strip()
    if not message:
        return _respond(
            status.HTTP_400_BAD_REQUEST, {"success": False, "message": "Message is required"}
        )

    project_id = chat_request.target_project_id()
    if not project_id:
        return _respond(
            status.HTTP_400_BAD_REQUEST,
            {
                "success": False,
                "message": "Project ID is required. Please select a project first.",
                "suggestion": "Select a project from the sidebar to ask questions about its summary.",
            },
        )

    logger.info(f"Project chat for {project_id}: {message}")
    content: dict[str, Any] = {"projectId": project_id, "userMessage": message}

    if is_summary_request(message):
        summary = await context.project_summary.get_formatted_summary(project_id)
        if not summary.success:
            content.update(
                success=False,
                message=summary.message,
                response=SUMMARY_MISSING_RESPONSE,
                responseType="error",
            )
            return _respond(status.HTTP_404_NOT_FOUND, content)
        content.update(
            success=True,
            message="Project summary retrieved",
            response=summary.formatted_summary,
            responseType="summary",
        )
        return _respond(status.HTTP_200_OK, content)

    result = await context.project_summary.answer_query(project_id, message)
    if not result.success:
        content.update(
            success=False,
            message=result.message,
            response=result.answer,
            responseType="error",
            error=result.error,
        )
        return _respond(status.HTTP_404_NOT_FOUND, content)
    content.update(
        success=True,
        message=result.message,
        response=result.answer,
        responseType="query_answer",
        projectInfo=result.project_info,
    )
    return _respond(status.HTTP_200_OK, content)


@router.post("/{project_id}/ask")
async def ask(
    project_id: str,
    question_request: ProjectQuestionRequest,
    context: AgentContext = Depends(get_agent_context),
) -> JSONResponse:
    """Answer a question from the project's stored summary."""
    question = (question_request.question or "").strip()
    if not question:
        return _respond(
            status.HTTP_400_BAD_REQUEST,
            {"success": False, "message": QUESTION_REQUIRED_MESSAGE},
        )
    return await _answer(context, project_id, question)
