"""
API Request/Response Models

Pydantic models for FastAPI endpoints. Field names on the wire are camelCase.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryRequest(_CamelModel):
    """Request model for the question endpoint."""

    question: str | None = Field(None, description="Natural language question")
    use_cache: bool = Field(default=True, description="Serve repeated queries from cache")
    include_query: bool = Field(default=False, description="Echo the generated SQL")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "question": "How many companies do we have?",
                "useCache": True,
                "includeQuery": False,
            }
        },
    )


class DirectSQLRequest(_CamelModel):
    """Request model for admin direct SQL execution."""

    query: str | None = Field(None, description="SQL statement to validate and execute")
    use_cache: bool = Field(default=False, description="Serve repeated queries from cache")


class ChatMessage(BaseModel):
    """Chat message in conversation history."""

    role: str = Field(..., description="Message role: 'user' or 'assistant'")
    content: str = Field(..., description="Message content")


class ChatContext(_CamelModel):
    """Company and project the conversation is about."""

    company_name: str | None = None
    project_name: str | None = None


class ChatRequest(_CamelModel):
    """Request model for the chat endpoint."""

    message: str | None = Field(None, description="User's message")
    conversation_history: list[ChatMessage] = Field(
        default_factory=list, description="Previous messages in the conversation"
    )
    context: ChatContext | None = Field(None, description="Optional company/project context")


class ProjectQuestionRequest(BaseModel):
    """Question about a single project."""

    question: str | None = Field(None, description="Question about the project")


def _project_id_text(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class ProjectQueryRequest(_CamelModel):
    """Question about a project named in the body."""

    project_id: str | None = Field(None, description="Project the question is about")
    question: str | None = Field(None, description="Question about the project")

    @field_validator("project_id", mode="before")
    @classmethod
    def _coerce_project_id(cls, value: Any) -> Any:
        return _project_id_text(value)


class SelectedProject(_CamelModel):
    """Project picked in the client sidebar."""

    project_id: str | None = None
    id: str | None = None

    @field_validator("project_id", "id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        return _project_id_text(value)


class ProjectChatContext(_CamelModel):
    selected_project: SelectedProject | None = None


class ProjectChatRequest(_CamelModel):
    """Chat message about one project."""

    message: str | None = Field(None, description="User's message")
    project_id: str | None = Field(None, description="Project the message is about")
    context: ProjectChatContext | None = Field(None, description="Client selection state")

    @field_validator("project_id", mode="before")
    @classmethod
    def _coerce_project_id(cls, value: Any) -> Any:
        return _project_id_text(value)

    def target_project_id(self) -> str | None:
        """Explicit project id, else the one selected in the client."""
        if self.project_id:
            return self.project_id
        selected = self.context.selected_project if self.context else None
        if selected is None:
            return None
        return selected.project_id or selected.id


class ApiEnvelope(BaseModel):
    """Common response envelope: ``{success, message, data?, error?, timestamp}``."""

    success: bool
    message: str
    data: Any | None = None
    error: str | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_content(self) -> dict[str, Any]:
        """JSON body; absent ``data``/``error`` are omitted, nulls inside ``data`` are kept."""
        content = self.model_dump(mode="json")
        return {key: value for key, value in content.items() if value is not None}
