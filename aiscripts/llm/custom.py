"""
Custom LLM Client
Any provider that speaks the OpenAI completions format behind a bearer token
"""

from __future__ import annotations

from typing import Any

from aiscripts.core.logging import get_logger
from aiscripts.llm.base import (
    BaseLLMClient,
    completion_text,
    first_choice,
    message_text,
    openai_usage,
)
from aiscripts.llm.protocol import CompletionResult
from aiscripts.llm.schemas import ClientOptions, CompletionRequest, CompletionsRequestBody
from aiscripts.llm.transport import HttpTransport

logger = get_logger(__name__)

DEFAULT_PROVIDER_NAME = "Custom Provider"


class CustomLLMClient(BaseLLMClient):
    """OpenAI-compatible custom endpoint."""

    def __init__(
        self,
        *,
        provider_name: str | None = None,
        api_key: str | None = None,
        endpoint: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        super().__init__(
            api_key=api_key,
            endpoint=endpoint,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            transport=transport,
        )
        self.provider_name = provider_name or DEFAULT_PROVIDER_NAME

    def get_name(self) -> str:
        return self.provider_name

    def is_configured(self) -> bool:
        return bool(self.options.api_key) and bool(self.options.endpoint)

    def build_headers(self, options: ClientOptions) -> dict[str, str]:
        return {"Authorization": f"Bearer {options.api_key}"}

    def build_request_body(self, request: CompletionRequest) -> dict[str, Any]:
        logger.info("custom_llm_request", provider=self.provider_name, model=request.model or "default")
        return CompletionsRequestBody.build(request).to_payload()

    def parse_response(self, payload: dict) -> CompletionResult:
        choice = first_choice(payload, self.get_name())
        # endpoint may answer in either completions or chat shape
        text = completion_text(choice) or message_text(choice)
        if not text:
            raise self.no_text_error(choice)
        return CompletionResult(text=text, usage=openai_usage(payload))
