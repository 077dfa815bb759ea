"""
Anthropic LLM Client

Messages API (Claude models).
"""

from __future__ import annotations

from typing import Any

from aiscripts.core.exceptions import ResponseFormatError
from aiscripts.llm.base import BaseLLMClient
from aiscripts.llm.protocol import CompletionResult, TokenUsage
from aiscripts.llm.schemas import ChatRequestBody, ClientOptions, CompletionRequest

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicLLMClient(BaseLLMClient):
    """Anthropic Messages API client."""

    DEFAULT_MODEL = "claude-3-sonnet-20240229"
    DEFAULT_ENDPOINT = "https://api.anthropic.com/v1/messages"

    def get_name(self) -> str:
        return "Anthropic Claude"

    def is_configured(self) -> bool:
        return bool(self.options.api_key)

    def build_headers(self, options: ClientOptions) -> dict[str, str]:
        return {
            "x-api-key": options.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_request_body(self, request: CompletionRequest) -> dict[str, Any]:
        return ChatRequestBody.build(request).to_payload()

    def parse_response(self, payload: dict) -> CompletionResult:
        content = payload.get("content")
        if not isinstance(content, list) or not content:
            raise ResponseFormatError(
                f"Invalid response format from {self.get_name()} API: no content returned",
                status=400,
                details=payload,
            )

        text = "\n".join(
            block["text"]
            for block in content
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
        ).strip()
        if not text:
            raise self.no_text_error(content)

        return CompletionResult(text=text, usage=_usage(payload.get("usage")))


def _usage(usage: Any) -> TokenUsage:
    if not isinstance(usage, dict):
        return TokenUsage()
    prompt_tokens = usage.get("input_tokens")
    completion_tokens = usage.get("output_tokens")
    total_tokens = None
    if prompt_tokens is not None and completion_tokens is not None:
        total_tokens = prompt_tokens + completion_tokens
    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
    )
