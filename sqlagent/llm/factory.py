"""
LLM Provider Factory

Factory and registry for creating LLM provider instances based on configuration.
"""

import logging
from typing import Literal

from sqlagent.config import LLMSettings
from sqlagent.llm.base import BaseLLMProvider
from sqlagent.llm.google import GoogleProvider
from sqlagent.llm.openai import OpenAIProvider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """
    Factory for creating LLM provider instances.

    Handles provider selection and per-agent overrides.
    """

    PROVIDERS = {
        "google": GoogleProvider,
        "openai": OpenAIProvider,
    }

    @staticmethod
    def create_provider(
        provider_type: Literal["google", "openai"],
        config: LLMSettings,
    ) -> BaseLLMProvider:
        """
        Create an LLM provider instance.

        Args:
            provider_type: Type of provider to create
            config: LLM configuration settings

        Raises:
            ValueError: If provider type is unknown or required config is missing
        """
        if provider_type not in LLMProviderFactory.PROVIDERS:
            raise ValueError(
                f"Unknown provider type: {provider_type}. "
                f"Available providers: {list(LLMProviderFactory.PROVIDERS.keys())}"
            )

        logger.info(f"Creating {provider_type} provider", extra={"provider": provider_type})

        if provider_type == "openai":
            return LLMProviderFactory._create_openai(config)
        return LLMProviderFactory._create_google(config)

    @staticmethod
    def create_default_provider(config: LLMSettings) -> BaseLLMProvider:
        """Create provider using default_provider from config."""
        return LLMProviderFactory.create_provider(config.default_provider, config)

    @staticmethod
    def create_agent_provider(
        agent_name: str,
        config: LLMSettings,
    ) -> BaseLLMProvider:
        """
        Create provider for a specific agent with override support.

        Checks for an agent-specific provider override (e.g., sql_provider)
        and falls back to default_provider if not specified.
        """
        override_attr = f"{agent_name}_provider"
        provider_type = getattr(config, override_attr, None) or config.default_provider

        logger.info(
            f"Creating provider for {agent_name} agent",
            extra={"agent": agent_name, "provider": provider_type},
        )

        return LLMProviderFactory.create_provider(provider_type, config)

    @staticmethod
    def _create_openai(config: LLMSettings) -> OpenAIProvider:
        if not config.openai_api_key:
            raise ValueError("OpenAI API key is required but not configured")

        return OpenAIProvider(
            api_key=config.openai_api_key,
            model=config.openai_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )

    @staticmethod
    def _create_google(config: LLMSettings) -> GoogleProvider:
        if not config.google_api_key:
            raise ValueError("Google API key is required but not configured")

        return GoogleProvider(
            api_key=config.google_api_key,
            model=config.google_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )
