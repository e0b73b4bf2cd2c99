"""Response agent: turn query rows into a business-friendly answer."""

from __future__ import annotations

import json
import logging

from sqlagent.agents.base import BaseAgent
from sqlagent.llm.base import BaseLLMProvider
from sqlagent.models.agent import ExecutionResult
from sqlagent.prompts.loader import PromptLoader

logger = logging.getLogger(__name__)


class ResponseAgent(BaseAgent):
    """Paraphrase execution results; degrade to canned text when the model fails."""

    def __init__(
        self,
        llm_provider: BaseLLMProvider,
        max_rows: int = 50,
        max_chars: int = 4000,
        slow_query_ms: int = 1000,
        prompts: PromptLoader | None = None,
    ) -> None:
        super().__init__(name="ResponseAgent", llm_provider=llm_provider)
        self.max_rows = max_rows
        self.max_chars = max_chars
        self.slow_query_ms = slow_query_ms
        self.prompts = prompts or PromptLoader()

    async def compose(self, question: str, sql: str, result: ExecutionResult) -> str:
        if not result.success:
            return (
                f"I encountered an error while executing your query: {result.error}. "
                "Please try rephrasing your question or contact support if the issue persists."
            )

        if not result.rows:
            return (
                f'I couldn\'t find any data matching your question: "{question}". '
                "The query executed successfully but returned no results."
            )

        data = json.dumps(result.rows[: self.max_rows], indent=2, default=str)
        if len(data) > self.max_chars:
            data = data[: self.max_chars] + "..."

        prompt = self.prompts.render(
            "agents/response_composer.md",
            question=question,
            sql=sql,
            row_count=len(result.rows),
            from_cache=result.from_cache,
            data=data,
        )

        try:
            answer = await self._complete(prompt)
        except Exception as exc:
            logger.error(f"Error generating response: {exc}")
            return (
                f"I found {len(result.rows)} records matching your question, but I'm having "
                "trouble interpreting the results. Please contact support for assistance."
            )

        if result.execution_time_ms > self.slow_query_ms:
            answer += f"\n\n*Query executed in {result.execution_time_ms}ms*"
        return answer
