"""
LLM Client Factory
Creates the provider client selected by configuration
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from aiscripts.core.config import Settings, settings
from aiscripts.core.exceptions import ConfigurationError
from aiscripts.core.logging import get_logger
from aiscripts.llm.anthropic import AnthropicLLMClient
from aiscripts.llm.base import BaseLLMClient
from aiscripts.llm.custom import CustomLLMClient
from aiscripts.llm.gemini import GeminiLLMClient
from aiscripts.llm.local import LocalLLMClient
from aiscripts.llm.openai import OpenAILLMClient
from aiscripts.llm.protocol import ProviderTag
from aiscripts.llm.schemas import options_error
from aiscripts.llm.transport import DEFAULT_TIMEOUT_SECONDS, HttpTransport

logger = get_logger(__name__)


class LLMConfig(BaseModel):
    """
    Provider configuration

    Immutable: use `with_overrides()` to derive a changed copy.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider: str = ProviderTag.LOCAL.value
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    openai_api_key: str | None = None
    openai_endpoint: str | None = None
    openai_default_model: str | None = None

    anthropic_api_key: str | None = None
    anthropic_endpoint: str | None = None
    anthropic_default_model: str | None = None

    gemini_api_key: str | None = None
    gemini_endpoint: str | None = None
    gemini_default_model: str | None = None

    local_endpoint: str | None = None
    local_model: str | None = None

    custom_provider_name: str | None = None
    custom_api_key: str | None = None
    custom_endpoint: str | None = None
    custom_default_model: str | None = None

    @classmethod
    def from_settings(cls, source: Settings) -> LLMConfig:
        return cls(
            provider=source.llm_provider,
            model=source.llm_model,
            temperature=source.llm_temperature,
            max_tokens=source.llm_max_tokens,
            timeout_seconds=source.llm_timeout_seconds,
            openai_api_key=source.openai_api_key,
            openai_endpoint=source.openai_endpoint,
            openai_default_model=source.openai_default_model,
            anthropic_api_key=source.anthropic_api_key,
            anthropic_endpoint=source.anthropic_endpoint,
            anthropic_default_model=source.anthropic_default_model,
            gemini_api_key=source.gemini_api_key,
            gemini_endpoint=source.gemini_endpoint,
            gemini_default_model=source.gemini_default_model,
            local_endpoint=source.local_llm_endpoint,
            local_model=source.local_llm_model,
            custom_provider_name=source.custom_provider_name,
            custom_api_key=source.custom_api_key,
            custom_endpoint=source.custom_endpoint,
            custom_default_model=source.custom_default_model,
        )

    def with_overrides(self, **changes: Any) -> LLMConfig:
        """
        Copy with `changes` applied

        None values are ignored, so optional CLI flags can be passed through
        as-is. Unknown keys raise ValueError.
        Use `cleared()` to reset a field to its default.
        """
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown LLM config fields: {', '.join(sorted(unknown))}")
        updates = {key: value for key, value in changes.items() if value is not None}
        if isinstance(updates.get("provider"), ProviderTag):
            updates["provider"] = updates["provider"].value
        return self.model_validate({**self.model_dump(), **updates})

    def cleared(self, *fields: str) -> LLMConfig:
        """Copy with `fields` reset to their defaults (None for most)."""
        model_fields = type(self).model_fields
        unknown = set(fields) - set(model_fields)
        if unknown:
            raise ValueError(f"Unknown LLM config fields: {', '.join(sorted(unknown))}")
        defaults = {name: model_fields[name].get_default() for name in fields}
        return self.model_validate({**self.model_dump(), **defaults})


DEFAULT_MODEL_FIELDS: dict[ProviderTag, str] = {
    ProviderTag.OPENAI: "openai_default_model",
    ProviderTag.ANTHROPIC: "anthropic_default_model",
    ProviderTag.GEMINI: "gemini_default_model",
    ProviderTag.CUSTOM: "custom_default_model",
    ProviderTag.LOCAL: "local_model",
}


def parse_provider(value: str | ProviderTag) -> ProviderTag:
    try:
        return ProviderTag(str(getattr(value, "value", value)).strip().lower())
    except ValueError as exc:
        supported = ", ".join(tag.value for tag in ProviderTag)
        raise ConfigurationError(
            f"Unsupported LLM provider: {value}. Supported providers: {supported}",
            status=400,
        ) from exc


def resolve_model(config: LLMConfig, provider: ProviderTag | str) -> str | None:
    """Global model setting first, then the provider's default model."""
    model, _ = describe_model_source(config, provider)
    return model


def describe_model_source(
    config: LLMConfig,
    provider: ProviderTag | str,
    model: str | None = None,
) -> tuple[str | None, str]:
    """
    Effective model and the layer that supplied it

    Returns:
        (model, source) with source one of "explicit", "global",
        "provider_default", "client_default"
    """
    if model:
        return model, "explicit"
    if config.model:
        return config.model, "global"
    default_model = getattr(config, DEFAULT_MODEL_FIELDS[parse_provider(provider)])
    if default_model:
        return default_model, "provider_default"
    return None, "client_default"


def create_client(
    config: LLMConfig,
    overrides: dict[str, Any] | None = None,
    *,
    transport: HttpTransport | None = None,
) -> BaseLLMClient:
    """
    Build a client for the provider selected by `config` + `overrides`

    Args:
        config: Base configuration
        overrides: Per-call config changes (provider, model, endpoint, ...)
        transport: Shared HTTP transport; a new one is made when omitted

    Raises:
        ConfigurationError: If the provider is unknown or lacks credentials,
            or an option value is out of range
    """
    try:
        effective = config.with_overrides(**(overrides or {}))
    except ValidationError as exc:
        raise options_error(exc) from exc
    provider = parse_provider(effective.provider)
    model = resolve_model(effective, provider)
    transport = transport or HttpTransport(timeout=effective.timeout_seconds)
    common = {
        "model": model,
        "temperature": effective.temperature,
        "max_tokens": effective.max_tokens,
        "transport": transport,
    }

    logger.debug("llm_factory", provider=provider.value, model=model)

    if provider is ProviderTag.OPENAI:
        _require(effective.openai_api_key, "OpenAI API key is required for OpenAI provider")
        return OpenAILLMClient(
            api_key=effective.openai_api_key,
            endpoint=effective.openai_endpoint,
            **common,
        )

    if provider is ProviderTag.ANTHROPIC:
        _require(effective.anthropic_api_key, "Anthropic API key is required for Anthropic provider")
        return AnthropicLLMClient(
            api_key=effective.anthropic_api_key,
            endpoint=effective.anthropic_endpoint,
            **common,
        )

    if provider is ProviderTag.GEMINI:
        _require(effective.gemini_api_key, "Google API key is required for Gemini provider")
        return GeminiLLMClient(
            api_key=effective.gemini_api_key,
            endpoint=effective.gemini_endpoint,
            **common,
        )

    if provider is ProviderTag.CUSTOM:
        _require(effective.custom_api_key, "API key is required for custom provider")
        _require(effective.custom_endpoint, "Endpoint is required for custom provider")
        return CustomLLMClient(
            provider_name=effective.custom_provider_name,
            api_key=effective.custom_api_key,
            endpoint=effective.custom_endpoint,
            **common,
        )

    return LocalLLMClient(endpoint=effective.local_endpoint, **common)


def _require(value: str | None, message: str) -> None:
    if not value:
        raise ConfigurationError(message, status=400)


class ClientFactory:
    """
    Holder of the provider configuration

    Builds a fresh client per `create_client()` call; clients keep no
    connections open, so nothing is cached.
    """

    def __init__(self, config: LLMConfig, *, transport: HttpTransport | None = None) -> None:
        self._config = config
        self._transport = transport

    def get_config(self) -> LLMConfig:
        return self._config

    def update_config(self, **changes: Any) -> None:
        """Replace the configuration with a copy that has `changes` applied."""
        self._config = self._config.with_overrides(**changes)

    def clear_config(self, *fields: str) -> None:
        """Reset `fields` (e.g. the global `model`) to their defaults."""
        self._config = self._config.cleared(*fields)

    @contextmanager
    def override(self, **changes: Any) -> Iterator[LLMConfig]:
        """
        Apply `changes` for the duration of a block

        Usage:
            with factory.override(provider="gemini"):
                client = factory.create_client()
        """
        previous = self._config
        self._config = previous.with_overrides(**changes)
        try:
            yield self._config
        finally:
            self._config = previous

    def create_client(self, overrides: dict[str, Any] | None = None) -> BaseLLMClient:
        return create_client(self._config, overrides, transport=self._transport)


def load_config(source: Settings | None = None) -> LLMConfig:
    return LLMConfig.from_settings(source or settings)


# Singleton instance for the scripts
_client_factory: ClientFactory | None = None


def get_client_factory() -> ClientFactory:
    """
    Get singleton client factory, loading configuration on first access

    Returns:
        Client factory
    """
    global _client_factory
    if _client_factory is None:
        config = load_config()
        logger.info("llm_config_loaded", provider=config.provider, model=config.model)
        _client_factory = ClientFactory(config)
    return _client_factory


def reset_client_factory() -> None:
    global _client_factory
    _client_factory = None
