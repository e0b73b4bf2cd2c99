"""
LLM Provider Module

Provider abstraction over Google Gemini (default) and OpenAI.

Usage:
    from sqlagent.llm import LLMProviderFactory, LLMRequest, LLMMessage
    from sqlagent.config import get_settings

    config = get_settings()
    provider = LLMProviderFactory.create_default_provider(config.llm)

    request = LLMRequest(
        messages=[LLMMessage(role="user", content="Hello!")],
    )

    response = await provider.generate(request)
    print(response.content)
"""

from sqlagent.llm.base import BaseLLMProvider, ProviderRateLimitError
from sqlagent.llm.factory import LLMProviderFactory
from sqlagent.llm.google import GoogleProvider
from sqlagent.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMUsage
from sqlagent.llm.openai import OpenAIProvider

__all__ = [
    "BaseLLMProvider",
    "ProviderRateLimitError",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
    "LLMProviderFactory",
    "GoogleProvider",
    "OpenAIProvider",
]
