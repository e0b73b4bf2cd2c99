"""
Google LLM Provider

Implementation of BaseLLMProvider for Google's Gemini models.
Supports Gemini 1.5 Flash, Gemini 1.5 Pro, etc.
"""

import logging
import warnings
from typing import Any

from google.api_core import exceptions as google_exceptions

with warnings.catch_warnings():
    warnings.simplefilter("ignore", FutureWarning)
    import google.generativeai as genai

from sqlagent.llm.base import BaseLLMProvider, ProviderRateLimitError
from sqlagent.llm.models import LLMRequest, LLMResponse, LLMUsage

logger = logging.getLogger(__name__)


class GoogleProvider(BaseLLMProvider):
    """
    Google (Gemini) LLM provider implementation.

    Uses the google-generativeai Python SDK. Quota and rate limit
    rejections surface as ProviderRateLimitError so callers can fall back
    to canned behaviour.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        temperature: float = 0.0,
        max_tokens: int = 2000,
        timeout: int = 30,
    ):
        """Initialize Google provider."""
        super().__init__(
            provider_name="google",
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )

        self.model = model
        self.api_key = api_key
        genai.configure(api_key=api_key)
        self.genai = genai

        logger.info(f"Google provider initialized with model: {model}", extra={"model": model})

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate completion using Google Gemini API."""
        request = self._apply_defaults(request)
        self._log_request(request)

        model_name = request.model or self.model
        client = self.genai.GenerativeModel(model_name)

        # Gemini takes a single prompt; user-only conversations are sent verbatim
        if all(msg.role == "user" for msg in request.messages):
            prompt = "\n\n".join(msg.content for msg in request.messages)
        else:
            prompt = "\n\n".join(
                f"{msg.role.capitalize()}: {msg.content}" for msg in request.messages
            )

        try:
            response = await client.generate_content_async(
                prompt,
                generation_config=self.genai.types.GenerationConfig(
                    temperature=request.temperature,
                    max_output_tokens=request.max_tokens,
                ),
                request_options={"timeout": self.timeout},
            )
        except (google_exceptions.ResourceExhausted, google_exceptions.TooManyRequests) as e:
            logger.warning(f"Google API rate limited: {e}")
            raise ProviderRateLimitError("google", str(e)) from e
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Google API error: {e}")
            raise

        response_text = self._extract_response_text(response)
        finish_reason = self._extract_finish_reason(response)

        # Estimate token usage (Gemini doesn't always provide exact counts)
        prompt_tokens = self.count_tokens(prompt)
        completion_tokens = self.count_tokens(response_text)

        llm_response = LLMResponse(
            content=response_text,
            model=model_name,
            usage=LLMUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            finish_reason=finish_reason,
            provider="google",
            metadata={"raw_finish_reason": self._extract_raw_finish_reason(response)},
        )

        self._log_response(llm_response)
        return llm_response

    def _extract_response_text(self, response: Any) -> str:
        text = getattr(response, "text", "")
        if isinstance(text, str):
            return text
        if text is None:
            return ""
        return str(text)

    def _extract_raw_finish_reason(self, response: Any) -> str:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return ""
        reason = getattr(candidates[0], "finish_reason", "")
        return str(reason or "")

    def _extract_finish_reason(self, response: Any) -> str:
        raw_reason = self._extract_raw_finish_reason(response).lower()
        if any(token in raw_reason for token in ("max_tokens", "length")):
            return "length"
        if any(token in raw_reason for token in ("safety", "blocked", "recitation")):
            return "content_filter"
        if "error" in raw_reason:
            return "error"
        return "stop"
