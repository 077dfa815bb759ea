"""
Unit tests for the provider comparison service
"""

from datetime import datetime

import httpx
import pytest

from aiscripts.llm.factory import ClientFactory, LLMConfig
from aiscripts.llm.protocol import ProviderTag, TokenUsage
from aiscripts.services.provider_check import (
    ProviderCheckResult,
    check_provider,
    configured_providers,
    format_comparison,
    format_results_table,
    is_provider_configured,
    render_report,
    run_provider_checks,
    save_report,
)


@pytest.fixture
def sample_results():
    return [
        ProviderCheckResult(
            provider=ProviderTag.OPENAI,
            model="gpt-4o",
            response_time_ms=812,
            success=True,
            response="Python is a language.",
            usage=TokenUsage(prompt_tokens=20, completion_tokens=12, total_tokens=32),
        ),
        ProviderCheckResult(
            provider=ProviderTag.ANTHROPIC,
            response_time_ms=3,
            error="Anthropic API key is required for Anthropic provider",
        ),
    ]


def test_is_provider_configured():
    config = LLMConfig(openai_api_key="k", custom_api_key="c")

    assert is_provider_configured(config, ProviderTag.LOCAL) is True
    assert is_provider_configured(config, ProviderTag.OPENAI) is True
    assert is_provider_configured(config, ProviderTag.GEMINI) is False
    assert is_provider_configured(config, ProviderTag.CUSTOM) is False


def test_configured_providers_keeps_order():
    config = LLMConfig(gemini_api_key="g", openai_api_key="k")

    assert configured_providers(config) == [ProviderTag.LOCAL, ProviderTag.OPENAI, ProviderTag.GEMINI]


@pytest.mark.asyncio
async def test_check_provider_success(http):
    recorder = http({"choices": [{"text": "Python!"}], "usage": {"total_tokens": 11}})
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    result = await check_provider(factory, ProviderTag.LOCAL, "What is Python?", max_tokens=50)

    assert result.success is True
    assert result.response == "Python!"
    assert result.model == "llama-3.2-3b-instruct"
    assert result.usage.total_tokens == 11
    assert result.error is None
    assert recorder.body()["max_tokens"] == 50


@pytest.mark.asyncio
async def test_check_provider_records_failure(http):
    recorder = http(httpx.Response(500, text="boom"))
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    result = await check_provider(factory, ProviderTag.LOCAL, "hi")

    assert result.success is False
    assert result.error == "Error calling Local LLM API: API returned error status: 500"


@pytest.mark.asyncio
async def test_check_provider_missing_credentials(http):
    recorder = http()
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    result = await check_provider(factory, ProviderTag.ANTHROPIC, "hi")

    assert result.success is False
    assert result.error == "Anthropic API key is required for Anthropic provider"
    assert recorder.calls == 0


@pytest.mark.asyncio
async def test_check_provider_records_malformed_endpoint(http):
    recorder = http()
    factory = ClientFactory(LLMConfig(local_endpoint="http://[::1"), transport=recorder.transport)

    result = await check_provider(factory, ProviderTag.LOCAL, "hi")

    assert result.success is False
    assert "Invalid API endpoint URL" in result.error
    assert recorder.calls == 0


@pytest.mark.asyncio
async def test_check_provider_records_invalid_max_tokens(http):
    recorder = http()
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    result = await check_provider(factory, ProviderTag.LOCAL, "hi", max_tokens=0)

    assert result.success is False
    assert result.error.startswith("Invalid LLM options")
    assert recorder.calls == 0


@pytest.mark.asyncio
async def test_check_provider_records_unexpected_errors(http):
    recorder = http(RuntimeError("boom"))
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    result = await check_provider(factory, ProviderTag.LOCAL, "hi")

    assert result.success is False
    assert result.error == "Unexpected error: RuntimeError: boom"


@pytest.mark.asyncio
async def test_run_provider_checks_continues_after_failure(http):
    recorder = http({"choices": [{"text": "local"}]})
    factory = ClientFactory(
        LLMConfig(gemini_api_key="g", gemini_endpoint="http://[::1"),
        transport=recorder.transport,
    )

    results = await run_provider_checks(factory, [ProviderTag.GEMINI, ProviderTag.LOCAL], "hi")

    assert [result.success for result in results] == [False, True]
    assert results[1].response == "local"
    assert recorder.calls == 1


@pytest.mark.asyncio
async def test_run_provider_checks_is_sequential_in_order(http):
    recorder = http(
        {"content": [{"type": "text", "text": "claude"}]},
        {"choices": [{"text": "local"}]},
    )
    factory = ClientFactory(LLMConfig(anthropic_api_key="a"), transport=recorder.transport)

    results = await run_provider_checks(factory, [ProviderTag.ANTHROPIC, ProviderTag.LOCAL], "hi")

    assert [result.provider for result in results] == [ProviderTag.ANTHROPIC, ProviderTag.LOCAL]
    assert [result.response for result in results] == ["claude", "local"]
    assert recorder.requests[0].url.host == "api.anthropic.com"
    assert recorder.requests[1].url.host == "127.0.0.1"
    assert factory.get_config().provider == "local"


def test_format_results_table(sample_results):
    table = format_results_table(sample_results)
    lines = table.splitlines()

    assert lines[0].startswith("┌") and lines[-1].startswith("└")
    assert "Provider" in lines[1] and "Time (ms)" in lines[1]
    assert "openai" in lines[3] and "gpt-4o" in lines[3] and "Success" in lines[3] and "32" in lines[3]
    assert "anthropic" in lines[4] and "default" in lines[4] and "Failed" in lines[4] and "N/A" in lines[4]
    assert len({len(line) for line in lines}) == 1


def test_format_comparison_lists_successes_only(sample_results):
    output = format_comparison(sample_results)

    assert "=== OPENAI (gpt-4o) ===\nPython is a language." in output
    assert "ANTHROPIC" not in output


def test_render_report(sample_results):
    report = render_report(sample_results, "What is Python?", generated_at=datetime(2024, 5, 1, 9, 30))

    assert report.startswith("# LLM Provider Test Results")
    assert "Test run at: 2024-05-01 09:30:00" in report
    assert "```\nWhat is Python?\n```" in report
    assert "### OPENAI (gpt-4o)" in report
    assert "**Error:** Anthropic API key is required for Anthropic provider" in report


def test_save_report(tmp_path, sample_results):
    path = save_report(sample_results, "What is Python?", tmp_path / "results")

    assert path.parent == tmp_path / "results"
    assert path.name.startswith("llm-test-results-") and path.suffix == ".md"
    assert "## Results Summary" in path.read_text(encoding="utf-8")
