"""
Base Agent Framework

Common plumbing for the agents of the question pipeline: a name for
logging, execution metadata, and a single helper for one-shot LLM calls.

Usage:
    class MyAgent(BaseAgent):
        def __init__(self, llm_provider):
            super().__init__(name="MyAgent", llm_provider=llm_provider)

        async def summarize(self, text: str) -> str:
            return await self._complete(f"Summarize: {text}")
"""

import logging

from sqlagent.llm.base import BaseLLMProvider
from sqlagent.llm.models import LLMMessage, LLMRequest
from sqlagent.models.agent import AgentMetadata

logger = logging.getLogger(__name__)


class BaseAgent:
    """
    Shared base for pipeline agents.

    Attributes:
        name: Unique identifier for this agent, used in logs and errors
        llm: Optional LLM provider for agents that call a model
    """

    def __init__(self, name: str, llm_provider: BaseLLMProvider | None = None):
        self.name = name
        self.llm = llm_provider
        self._metadata = self._create_metadata()

        logger.info(
            f"Initialized {self.name}",
            extra={
                "agent": self.name,
                "provider": getattr(llm_provider, "provider_name", None),
            },
        )

    @property
    def metadata(self) -> AgentMetadata:
        """Metadata of the most recent LLM-backed call."""
        return self._metadata

    async def _complete(
        self,
        prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Send one user prompt to the model and return the stripped text.

        Provider exceptions propagate unchanged; callers decide how to degrade.
        """
        if self.llm is None:
            raise RuntimeError(f"{self.name} has no LLM provider configured")

        self._metadata = self._create_metadata()
        try:
            response = await self.llm.generate(
                LLMRequest(
                    messages=[LLMMessage(role="user", content=prompt)],
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
            )
        except Exception as exc:
            self._metadata.error = str(exc)
            raise
        finally:
            self._metadata.mark_complete()

        self._track_llm_call(response.usage.total_tokens)
        return response.content.strip()

    def _create_metadata(self) -> AgentMetadata:
        return AgentMetadata(agent_name=self.name)

    def _track_llm_call(self, tokens: int | None = None) -> None:
        """Track an LLM API call in metadata."""
        self._metadata.llm_calls += 1
        if tokens:
            current_tokens = self._metadata.tokens_used or 0
            self._metadata.tokens_used = current_tokens + tokens

        logger.debug(
            f"LLM call tracked for {self.name}",
            extra={
                "agent": self.name,
                "total_llm_calls": self._metadata.llm_calls,
                "tokens_this_call": tokens,
                "total_tokens": self._metadata.tokens_used,
            },
        )
