"""
OpenAI LLM Client

Routes a request to the completions API or the chat completions API
depending on the model name.
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
from aiscripts.llm.schemas import (
    ChatRequestBody,
    ClientOptions,
    CompletionRequest,
    CompletionsRequestBody,
)

logger = get_logger(__name__)

CHAT_MODELS = ("gpt-4", "gpt-4-turbo", "gpt-4o", "gpt-3.5-turbo", "gpt-4o-2024")


def is_chat_model(model: str | None) -> bool:
    """
    True when `model` must go through the chat completions API.

    Matching is by substring, so dated variants (gpt-4o-2024-08-06) route
    to chat. `-instruct` models are completions-only and never match, even
    though "gpt-3.5-turbo-instruct" contains "gpt-3.5-turbo".
    """
    name = (model or "").lower()
    if "-instruct" in name:
        return False
    return any(chat_model in name for chat_model in CHAT_MODELS)


class OpenAILLMClient(BaseLLMClient):
    """OpenAI client (completions + chat completions)."""

    DEFAULT_MODEL = "gpt-3.5-turbo-instruct"
    DEFAULT_ENDPOINT = "https://api.openai.com/v1/completions"
    CHAT_ENDPOINT = "https://api.openai.com/v1/chat/completions"

    def get_name(self) -> str:
        return "OpenAI"

    def is_configured(self) -> bool:
        return bool(self.options.api_key)

    def build_url(self, options: ClientOptions) -> str | None:
        endpoint = options.endpoint
        if not endpoint or not is_chat_model(options.model):
            return endpoint
        if endpoint == self.DEFAULT_ENDPOINT:
            return self.CHAT_ENDPOINT
        if endpoint.endswith("/completions") and not endpoint.endswith("/chat/completions"):
            return endpoint[: -len("/completions")] + "/chat/completions"
        return endpoint

    def build_headers(self, options: ClientOptions) -> dict[str, str]:
        return {"Authorization": f"Bearer {options.api_key}"}

    def build_request_body(self, request: CompletionRequest) -> dict[str, Any]:
        chat = is_chat_model(request.model)
        logger.info(
            "openai_request",
            api="chat" if chat else "completions",
            model=request.model,
        )
        if chat:
            return ChatRequestBody.build(request).to_payload()
        return CompletionsRequestBody.build(request).to_payload()

    def parse_response(self, payload: dict) -> CompletionResult:
        choice = first_choice(payload, self.get_name())
        # a `message` object marks a chat completions reply
        uses_chat = choice.get("message") is not None
        text = message_text(choice) if uses_chat else completion_text(choice)
        if not text:
            raise self.no_text_error(choice)
        logger.debug(
            "openai_text_extracted",
            api="chat" if uses_chat else "completions",
            length=len(text),
        )
        return CompletionResult(text=text, usage=openai_usage(payload))
