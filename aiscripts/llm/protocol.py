"""
LLM Client Protocol (Interface)
Defines contract for all provider client implementations
"""

from enum import Enum
from typing import NamedTuple, Protocol, runtime_checkable

from aiscripts.llm.schemas import CompletionOptions


class ProviderTag(str, Enum):
    """Supported provider identifiers (LLM_PROVIDER values)."""

    LOCAL = "local"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    CUSTOM = "custom"


class TokenUsage(NamedTuple):
    """
    Vendor-reported token counts

    Every field is best-effort; an empty usage has all fields None.
    """

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None

    def as_dict(self) -> dict:
        return {key: value for key, value in self._asdict().items() if value is not None}


class CompletionResult(NamedTuple):
    """
    Completion container

    Attributes:
        text: Generated text content (never empty)
        usage: Token usage info
        model: Model name the request was sent with
    """

    text: str
    usage: TokenUsage = TokenUsage()
    model: str | None = None


@runtime_checkable
class LLMClientProtocol(Protocol):
    """
    Protocol for provider clients

    The factory relies on exactly these three operations.
    """

    async def get_completion(
        self,
        prompt: str,
        overrides: CompletionOptions | None = None,
    ) -> CompletionResult:
        """
        Generate completion from the provider

        Args:
            prompt: Prompt text, already assembled by the caller
            overrides: Per-call options (model, temperature, max_tokens, ...)

        Returns:
            Completion result

        Raises:
            ConfigurationError: If the client lacks credentials or an endpoint
            TransportError: If the request could not be delivered
            HttpStatusError: If the provider answered with status >= 400
            ResponseFormatError: If the response has no usable text
            ProviderApiError: If the provider reported an error object
        """
        ...

    def get_name(self) -> str:
        """Display name used in logs and reports."""
        ...

    def is_configured(self) -> bool:
        """True when required credentials/endpoint are present."""
        ...
