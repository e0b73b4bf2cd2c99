"""Unit tests for GoogleProvider."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from google.api_core import exceptions as google_exceptions

from sqlagent.llm.base import ProviderRateLimitError
from sqlagent.llm.google import GoogleProvider
from sqlagent.llm.models import LLMMessage, LLMRequest


@pytest.fixture
def fake_genai():
    client = SimpleNamespace(generate_content_async=AsyncMock())
    genai = SimpleNamespace(
        GenerativeModel=Mock(return_value=client),
        types=SimpleNamespace(GenerationConfig=Mock(side_effect=lambda **kwargs: kwargs)),
    )
    return genai, client


@pytest.fixture
def provider(fake_genai):
    provider = GoogleProvider(api_key="test-google-key", model="gemini-1.5-flash", timeout=15)
    provider.genai = fake_genai[0]
    return provider


def _response(text: str, finish_reason: str = "STOP"):
    return SimpleNamespace(text=text, candidates=[SimpleNamespace(finish_reason=finish_reason)])


@pytest.mark.asyncio
async def test_user_prompt_sent_verbatim(provider, fake_genai):
    _, client = fake_genai
    client.generate_content_async.return_value = _response("SELECT 1")

    response = await provider.generate(
        LLMRequest(messages=[LLMMessage(role="user", content="Generate SQL")])
    )

    assert response.content == "SELECT 1"
    assert response.provider == "google"
    assert response.finish_reason == "stop"
    args, kwargs = client.generate_content_async.call_args
    assert args[0] == "Generate SQL"
    assert kwargs["request_options"] == {"timeout": 15}
    assert kwargs["generation_config"]["temperature"] == 0.0


@pytest.mark.asyncio
async def test_mixed_roles_are_prefixed(provider, fake_genai):
    _, client = fake_genai
    client.generate_content_async.return_value = _response("ok")

    await provider.generate(
        LLMRequest(
            messages=[
                LLMMessage(role="system", content="Be brief"),
                LLMMessage(role="user", content="Hi"),
            ]
        )
    )

    assert client.generate_content_async.call_args.args[0] == "System: Be brief\n\nUser: Hi"


@pytest.mark.asyncio
async def test_quota_errors_become_rate_limit_errors(provider, fake_genai):
    _, client = fake_genai
    client.generate_content_async.side_effect = google_exceptions.ResourceExhausted("quota")

    with pytest.raises(ProviderRateLimitError) as exc_info:
        await provider.generate(LLMRequest(messages=[LLMMessage(role="user", content="x")]))

    assert exc_info.value.provider == "google"


@pytest.mark.asyncio
async def test_other_api_errors_propagate(provider, fake_genai):
    _, client = fake_genai
    client.generate_content_async.side_effect = google_exceptions.InternalServerError("down")

    with pytest.raises(google_exceptions.InternalServerError):
        await provider.generate(LLMRequest(messages=[LLMMessage(role="user", content="x")]))


@pytest.mark.asyncio
async def test_max_tokens_finish_reason(provider, fake_genai):
    _, client = fake_genai
    client.generate_content_async.return_value = _response("partial", "MAX_TOKENS")

    response = await provider.generate(
        LLMRequest(messages=[LLMMessage(role="user", content="x")])
    )

    assert response.finish_reason == "length"
