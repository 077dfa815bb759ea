"""
One-shot prompt helper used by the scripts
"""

from __future__ import annotations

from typing import Any

from aiscripts.core.logging import get_logger
from aiscripts.llm.factory import ClientFactory, get_client_factory, parse_provider
from aiscripts.llm.protocol import ProviderTag
from aiscripts.llm.schemas import CompletionOptions

logger = get_logger(__name__)

ENDPOINT_FIELDS: dict[ProviderTag, str] = {
    ProviderTag.OPENAI: "openai_endpoint",
    ProviderTag.ANTHROPIC: "anthropic_endpoint",
    ProviderTag.GEMINI: "gemini_endpoint",
    ProviderTag.CUSTOM: "custom_endpoint",
    ProviderTag.LOCAL: "local_endpoint",
}


async def query_llm(
    prompt: str,
    *,
    provider: str | ProviderTag | None = None,
    model: str | None = None,
    max_tokens: int | None = None,
    temperature: float | None = None,
    endpoint: str | None = None,
    factory: ClientFactory | None = None,
) -> str:
    """
    Send `prompt` to the configured (or given) provider and return the text

    `endpoint` is applied to the selected provider; without a provider it
    targets the configured one. Errors propagate unchanged.
    """
    factory = factory or get_client_factory()
    overrides: dict[str, Any] = {
        "provider": provider,
        "model": model,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    if endpoint:
        target = parse_provider(provider or factory.get_config().provider)
        overrides[ENDPOINT_FIELDS[target]] = endpoint

    client = factory.create_client(overrides)
    logger.info("llm_provider_selected", provider=client.get_name())

    result = await client.get_completion(
        prompt,
        CompletionOptions.validated(model=model, max_tokens=max_tokens, temperature=temperature),
    )
    if result.usage.as_dict():
        logger.info(
            "llm_tokens_used",
            total_tokens=result.usage.total_tokens,
            prompt_tokens=result.usage.prompt_tokens,
            completion_tokens=result.usage.completion_tokens,
        )
    return result.text
