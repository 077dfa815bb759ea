"""
Google Gemini LLM Client

REST generateContent; the model name and the API key are part of the URL.
Also lists the models available to a key.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from aiscripts.core.exceptions import ConfigurationError, ProviderError, ResponseFormatError
from aiscripts.core.logging import get_logger
from aiscripts.llm.base import BaseLLMClient
from aiscripts.llm.protocol import CompletionResult, TokenUsage
from aiscripts.llm.schemas import ClientOptions, CompletionRequest, GeminiRequestBody
from aiscripts.llm.transport import raise_for_status

logger = get_logger(__name__)

GENERATE_CONTENT_METHOD = "generateContent"


def format_model_name(model: str | None) -> str:
    """Bare model id; the API lists models as "models/<id>"."""
    name = (model or "").strip()
    if name.startswith("models/"):
        return name[len("models/"):]
    return name


class GeminiLLMClient(BaseLLMClient):
    """Gemini client using REST generateContent."""

    DEFAULT_MODEL = "gemini-1.5-flash"
    DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1"

    def get_name(self) -> str:
        return "Google Gemini"

    def is_configured(self) -> bool:
        return bool(self.options.api_key)

    def build_url(self, options: ClientOptions) -> str | None:
        if not options.endpoint:
            return None
        model = format_model_name(options.model)
        logger.info("gemini_request", model=model)
        return (
            f"{options.endpoint.rstrip('/')}/models/{model}:{GENERATE_CONTENT_METHOD}"
            f"?key={quote(options.api_key or '', safe='')}"
        )

    def build_request_body(self, request: CompletionRequest) -> dict[str, Any]:
        return GeminiRequestBody.build(request).to_payload()

    def parse_response(self, payload: dict) -> CompletionResult:
        try:
            parts = payload["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ResponseFormatError(
                f"Invalid response format from {self.get_name()} API",
                status=400,
                details=payload,
            ) from exc
        if not isinstance(parts, list) or not parts:
            raise ResponseFormatError(
                f"Invalid response format from {self.get_name()} API",
                status=400,
                details=payload,
            )

        text = "\n".join(
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"]
        ).strip()
        if not text:
            raise self.no_text_error(payload["candidates"][0])

        return CompletionResult(text=text, usage=_usage(payload.get("usageMetadata")))

    async def list_models(self) -> list[dict[str, Any]]:
        """
        Models visible to the configured key

        Returns:
            Raw model descriptors (name, displayName, supportedGenerationMethods, ...)

        Raises:
            ConfigurationError, TransportError, HttpStatusError,
            ResponseFormatError, ProviderApiError
        """
        name = self.get_name()
        if not self.is_configured():
            raise ConfigurationError(
                "Google API key is required for Gemini provider",
                status=400,
                provider=name,
            )
        url = f"{(self.options.endpoint or self.DEFAULT_ENDPOINT).rstrip('/')}/models"
        url += f"?key={quote(self.options.api_key or '', safe='')}"

        try:
            response = raise_for_status(await self.transport.get(url))
            payload = self._decode(response)
        except ProviderError as exc:
            raise exc.with_context(f"Error calling {name} API", provider=name) from exc

        models = payload.get("models") or []
        if not isinstance(models, list):
            raise ResponseFormatError(
                f"Invalid response format from {name} API: models is not a list",
                status=400,
                details=payload,
            )
        return [model for model in models if isinstance(model, dict)]


def recommended_model(models: list[dict[str, Any]], fallback: str = "gemini-1.5-pro") -> str:
    """First model that supports generateContent, without its "models/" prefix."""
    for model in models:
        if GENERATE_CONTENT_METHOD in (model.get("supportedGenerationMethods") or []):
            return format_model_name(model.get("name"))
    return fallback


def _usage(metadata: Any) -> TokenUsage:
    # the API has no combined count; total is rebuilt from the two parts
    metadata = metadata if isinstance(metadata, dict) else {}
    prompt_tokens = metadata.get("promptTokenCount") or 0
    completion_tokens = metadata.get("candidatesTokenCount") or 0
    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=prompt_tokens + completion_tokens,
    )
