"""
Base provider client

Holds the request path every provider shares: option merging, the
configured-or-not gate, the HTTP call, status checking, and error wrapping.
Subclasses supply the wire format (`build_request_body`, `parse_response`).
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from typing import Any

from aiscripts.core.exceptions import (
    ConfigurationError,
    ProviderApiError,
    ProviderError,
    ResponseFormatError,
)
from aiscripts.core.logging import get_logger, log_llm_call
from aiscripts.llm.protocol import CompletionResult, TokenUsage
from aiscripts.llm.schemas import ClientOptions, CompletionOptions, CompletionRequest
from aiscripts.llm.transport import HttpResponse, HttpTransport, raise_for_status

logger = get_logger(__name__)


class BaseLLMClient(ABC):
    """Abstract provider client."""

    DEFAULT_MODEL: str | None = None
    DEFAULT_ENDPOINT: str | None = None

    def __init__(
        self,
        *,
        api_key: str | None = None,
        endpoint: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        base = ClientOptions(model=self.DEFAULT_MODEL, endpoint=self.DEFAULT_ENDPOINT)
        self.options = base.merged(
            CompletionOptions.validated(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                api_key=api_key,
                endpoint=endpoint,
            )
        )
        self.transport = transport or HttpTransport()

    @abstractmethod
    def get_name(self) -> str:
        """Display name used in logs and reports."""

    @abstractmethod
    def is_configured(self) -> bool:
        """True when required credentials/endpoint are present."""

    @abstractmethod
    def build_request_body(self, request: CompletionRequest) -> dict[str, Any]:
        """Provider-specific JSON body for one request."""

    @abstractmethod
    def parse_response(self, payload: Any) -> CompletionResult:
        """Turn a decoded JSON body into a CompletionResult."""

    async def get_completion(
        self,
        prompt: str,
        overrides: CompletionOptions | None = None,
    ) -> CompletionResult:
        options = self.options.merged(overrides)
        return await self._send(CompletionRequest.from_options(prompt, options), options)

    def build_url(self, options: ClientOptions) -> str | None:
        return options.endpoint

    def build_headers(self, options: ClientOptions) -> dict[str, str]:
        return {}

    async def _send(self, request: CompletionRequest, options: ClientOptions) -> CompletionResult:
        """
        Issue one request through the shared transport

        Raises:
            ProviderError subclasses, message prefixed with the provider name
        """
        name = self.get_name()
        if not self.is_configured():
            raise ConfigurationError(
                f"{name} client is not configured (missing API key or endpoint)",
                status=400,
                provider=name,
            )
        url = self.build_url(options)
        if not url:
            raise ConfigurationError("API endpoint not specified", status=400, provider=name)

        body = self.build_request_body(request)
        logger.debug("llm_request_sending", provider=name, model=request.model)

        start = time.perf_counter()
        try:
            response = await self.transport.post(url, body, headers=self.build_headers(options))
            raise_for_status(response)
            result = self.parse_response(self._decode(response))
        except ProviderError as exc:
            wrapped = exc.with_context(f"Error calling {name} API", provider=name)
            log_llm_call(
                provider=name,
                model=request.model,
                latency_ms=(time.perf_counter() - start) * 1000,
                error=wrapped.message,
            )
            raise wrapped from exc

        log_llm_call(
            provider=name,
            model=request.model,
            latency_ms=(time.perf_counter() - start) * 1000,
            tokens=result.usage.as_dict(),
        )
        return result._replace(model=request.model)

    def _decode(self, response: HttpResponse) -> Any:
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            logger.debug("llm_raw_response", provider=self.get_name(), body=response.text[:500])
            raise ResponseFormatError(
                f"Error parsing {self.get_name()} response: body is not valid JSON",
                status=500,
                details=response.text,
            ) from exc
        if not isinstance(payload, dict):
            raise ResponseFormatError(
                f"Invalid response format from {self.get_name()} API: expected a JSON object",
                status=500,
                details=payload,
            )
        error = payload.get("error")
        if error:
            raise self.api_error(error)
        return payload

    def api_error(self, error: Any) -> ProviderApiError:
        """Wrap a vendor error object, keeping the vendor's message."""
        if isinstance(error, dict):
            message = error.get("message") or json.dumps(error)
            # OpenAI-style bodies use `status`, Gemini uses a numeric `code`
            status = next(
                (
                    value
                    for value in (error.get("status"), error.get("code"))
                    if isinstance(value, int) and not isinstance(value, bool)
                ),
                None,
            )
        else:
            message, status = str(error), None
        return ProviderApiError(
            f"{self.get_name()} API error: {message}",
            status=status or 400,
            details=error,
        )

    def no_text_error(self, details: Any = None) -> ResponseFormatError:
        return ResponseFormatError(
            f"No text content found in {self.get_name()} response",
            status=400,
            details=details,
        )


def first_choice(payload: dict, provider: str) -> dict:
    """choices[0] of an OpenAI-shaped body."""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise ResponseFormatError(
            f"Invalid response format from {provider} API: no choices returned",
            status=400,
            details=payload,
        )
    return choices[0]


def completion_text(choice: dict) -> str:
    text = choice.get("text")
    return text.strip() if isinstance(text, str) else ""


def message_text(choice: dict) -> str:
    message = choice.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return content.strip() if isinstance(content, str) else ""


def openai_usage(payload: dict) -> TokenUsage:
    usage = payload.get("usage")
    if not isinstance(usage, dict):
        return TokenUsage()
    return TokenUsage(
        prompt_tokens=usage.get("prompt_tokens"),
        completion_tokens=usage.get("completion_tokens"),
        total_tokens=usage.get("total_tokens"),
    )
