"""
Provider comparison

Sends one prompt to each configured provider, strictly one after another
in list order, and renders the outcome as a table and a Markdown report.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from aiscripts.core.exceptions import AIScriptsException
from aiscripts.core.logging import get_logger
from aiscripts.llm.factory import ClientFactory, LLMConfig, describe_model_source
from aiscripts.llm.protocol import ProviderTag, TokenUsage
from aiscripts.llm.schemas import CompletionOptions

logger = get_logger(__name__)

DEFAULT_TEST_PROMPT = (
    "You are a helpful AI assistant. Please answer the following question concisely in one paragraph.\n"
    "\n"
    "What is Python and why is it useful?"
)
DEFAULT_MAX_TOKENS = 200
ALL_PROVIDERS: tuple[ProviderTag, ...] = tuple(ProviderTag)

_COLUMNS = (("Provider", 15), ("Model", 25), ("Time (ms)", 12), ("Status", 10), ("Tokens", 10))


class ProviderCheckResult(BaseModel):
    """Outcome of one provider check."""

    provider: ProviderTag
    model: str | None = None
    response_time_ms: int = 0
    success: bool = False
    response: str | None = None
    error: str | None = None
    usage: TokenUsage = Field(default_factory=TokenUsage)


def is_provider_configured(config: LLMConfig, provider: ProviderTag) -> bool:
    """Credentials check without building a client; local needs none."""
    if provider is ProviderTag.OPENAI:
        return bool(config.openai_api_key)
    if provider is ProviderTag.ANTHROPIC:
        return bool(config.anthropic_api_key)
    if provider is ProviderTag.GEMINI:
        return bool(config.gemini_api_key)
    if provider is ProviderTag.CUSTOM:
        return bool(config.custom_api_key) and bool(config.custom_endpoint)
    return True


def configured_providers(
    config: LLMConfig,
    providers: Iterable[ProviderTag] = ALL_PROVIDERS,
) -> list[ProviderTag]:
    return [provider for provider in providers if is_provider_configured(config, provider)]


async def check_provider(
    factory: ClientFactory,
    provider: ProviderTag,
    prompt: str,
    *,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> ProviderCheckResult:
    """Run `prompt` against one provider; failures are recorded, not raised."""
    model, _ = describe_model_source(factory.get_config(), provider)
    result = ProviderCheckResult(provider=provider, model=model)
    logger.info("provider_check_started", provider=provider.value, model=model or "default")

    start = time.perf_counter()
    try:
        client = factory.create_client({"provider": provider})
        completion = await client.get_completion(prompt, CompletionOptions.validated(max_tokens=max_tokens))
    except AIScriptsException as exc:
        result.error = exc.message
        result.response_time_ms = int((time.perf_counter() - start) * 1000)
        logger.warning("provider_check_failed", provider=provider.value, error=exc.message)
        return result
    except Exception as exc:
        result.error = f"Unexpected error: {type(exc).__name__}: {exc}"
        result.response_time_ms = int((time.perf_counter() - start) * 1000)
        logger.error("provider_check_crashed", provider=provider.value, error=str(exc), exc_info=True)
        return result

    result.response_time_ms = int((time.perf_counter() - start) * 1000)
    result.success = True
    result.response = completion.text
    result.model = completion.model or model
    result.usage = completion.usage
    logger.info("provider_check_passed", provider=provider.value, latency_ms=result.response_time_ms)
    return result


async def run_provider_checks(
    factory: ClientFactory,
    providers: Iterable[ProviderTag],
    prompt: str = DEFAULT_TEST_PROMPT,
    *,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> list[ProviderCheckResult]:
    results = []
    for provider in providers:
        results.append(await check_provider(factory, provider, prompt, max_tokens=max_tokens))
    return results


def _row(cells: Iterable[str]) -> str:
    return "│ " + " │ ".join(cell.ljust(width - 2) for cell, (_, width) in zip(cells, _COLUMNS)) + " │"


def _rule(left: str, middle: str, right: str) -> str:
    return left + middle.join("─" * width for _, width in _COLUMNS) + right


def format_results_table(results: Iterable[ProviderCheckResult]) -> str:
    lines = [
        _rule("┌", "┬", "┐"),
        _row(title for title, _ in _COLUMNS),
        _rule("├", "┼", "┤"),
    ]
    for result in results:
        tokens = result.usage.total_tokens
        lines.append(
            _row(
                [
                    result.provider.value,
                    result.model or "default",
                    str(result.response_time_ms),
                    "Success" if result.success else "Failed",
                    str(tokens) if tokens is not None else "N/A",
                ]
            )
        )
    lines.append(_rule("└", "┴", "┘"))
    return "\n".join(lines)


def _heading(result: ProviderCheckResult) -> str:
    label = result.provider.value.upper()
    return f"{label} ({result.model})" if result.model else label


def format_comparison(results: Iterable[ProviderCheckResult]) -> str:
    output = "\n=== Response Comparison ===\n\n"
    for result in results:
        if result.success and result.response:
            output += f"=== {_heading(result)} ===\n{result.response}\n\n"
    return output


def render_report(
    results: list[ProviderCheckResult],
    prompt: str,
    *,
    generated_at: datetime | None = None,
) -> str:
    generated_at = generated_at or datetime.now()
    parts = [
        "# LLM Provider Test Results\n",
        f"Test run at: {generated_at:%Y-%m-%d %H:%M:%S}\n",
        f"## Test Prompt\n\n```\n{prompt}\n```\n",
        f"## Results Summary\n\n```\n{format_results_table(results)}\n```\n",
        "## Response Comparison\n",
    ]
    for result in results:
        parts.append(f"### {_heading(result)}\n")
        if result.success and result.response:
            parts.append(f"```\n{result.response}\n```\n")
        else:
            parts.append(f"**Error:** {result.error or 'Unknown error'}\n")
    return "\n".join(parts)


def save_report(
    results: list[ProviderCheckResult],
    prompt: str,
    results_dir: Path,
) -> Path:
    """Write the Markdown report to a timestamped file under results_dir."""
    now = datetime.now()
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / f"llm-test-results-{now:%Y-%m-%dT%H-%M-%S}.md"
    path.write_text(render_report(results, prompt, generated_at=now), encoding="utf-8")
    logger.info("provider_report_saved", path=str(path))
    return path
