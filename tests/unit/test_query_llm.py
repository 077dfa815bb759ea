"""
Unit tests for query_llm
"""

import httpx
import pytest

from aiscripts.core.exceptions import ConfigurationError, HttpStatusError
from aiscripts.llm.factory import ClientFactory, LLMConfig
from aiscripts.llm.query import query_llm


@pytest.mark.asyncio
async def test_query_uses_configured_provider(http):
    recorder = http({"choices": [{"text": "answer"}], "usage": {"total_tokens": 9}})
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    text = await query_llm("question", max_tokens=42, temperature=0.3, factory=factory)

    assert text == "answer"
    assert recorder.url() == "http://127.0.0.1:1234/v1/completions"
    assert recorder.body()["max_tokens"] == 42
    assert recorder.body()["temperature"] == 0.3


@pytest.mark.asyncio
async def test_query_endpoint_targets_selected_provider(http):
    recorder = http({"candidates": [{"content": {"parts": [{"text": "gem"}]}}]})
    factory = ClientFactory(LLMConfig(gemini_api_key="g"), transport=recorder.transport)

    text = await query_llm(
        "question",
        provider="gemini",
        endpoint="https://gemini-proxy.example.com/v1beta",
        factory=factory,
    )

    assert text == "gem"
    assert recorder.url().startswith(
        "https://gemini-proxy.example.com/v1beta/models/gemini-1.5-flash:generateContent"
    )
    assert factory.get_config().gemini_endpoint is None


@pytest.mark.asyncio
async def test_query_endpoint_without_provider_targets_configured_one(http):
    recorder = http({"choices": [{"text": "ok"}]})
    factory = ClientFactory(LLMConfig(provider="openai", openai_api_key="k"), transport=recorder.transport)

    await query_llm("question", endpoint="https://openai-proxy.example.com/v1/completions", factory=factory)

    assert recorder.url() == "https://openai-proxy.example.com/v1/completions"


@pytest.mark.asyncio
async def test_query_model_override(http):
    recorder = http({"choices": [{"message": {"content": "chat"}}]})
    factory = ClientFactory(LLMConfig(provider="openai", openai_api_key="k"), transport=recorder.transport)

    text = await query_llm("question", model="gpt-4o", factory=factory)

    assert text == "chat"
    assert recorder.url() == "https://api.openai.com/v1/chat/completions"


@pytest.mark.asyncio
async def test_query_propagates_configuration_error(http):
    recorder = http()
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    with pytest.raises(ConfigurationError):
        await query_llm("question", provider="anthropic", factory=factory)

    assert recorder.calls == 0


@pytest.mark.asyncio
async def test_query_propagates_provider_errors(http):
    recorder = http(httpx.Response(502, text="bad gateway"))
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    with pytest.raises(HttpStatusError, match="Error calling Local LLM API"):
        await query_llm("question", factory=factory)


@pytest.mark.asyncio
async def test_query_rejects_out_of_range_max_tokens(http):
    recorder = http()
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    with pytest.raises(ConfigurationError, match="Invalid LLM options"):
        await query_llm("question", max_tokens=0, factory=factory)

    assert recorder.calls == 0
