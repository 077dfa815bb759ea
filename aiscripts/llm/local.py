"""
Local LLM Client

OpenAI-compatible completions endpoint of a local server (LM Studio,
llama.cpp server, Ollama's /v1 API). No authentication.
"""

from __future__ import annotations

from typing import Any

from aiscripts.core.logging import get_logger
from aiscripts.llm.base import BaseLLMClient, completion_text, first_choice, openai_usage
from aiscripts.llm.protocol import CompletionResult
from aiscripts.llm.schemas import CompletionRequest, CompletionsRequestBody

logger = get_logger(__name__)


class LocalLLMClient(BaseLLMClient):
    """Local inference server client."""

    DEFAULT_MODEL = "llama-3.2-3b-instruct"
    DEFAULT_ENDPOINT = "http://127.0.0.1:1234/v1/completions"

    def get_name(self) -> str:
        return "Local LLM"

    def is_configured(self) -> bool:
        return bool(self.options.endpoint)

    def build_request_body(self, request: CompletionRequest) -> dict[str, Any]:
        logger.info("local_llm_request", model=request.model or "default")
        return CompletionsRequestBody.build(request).to_payload()

    def parse_response(self, payload: dict) -> CompletionResult:
        choice = first_choice(payload, self.get_name())
        text = completion_text(choice)
        if not text:
            raise self.no_text_error(choice)
        return CompletionResult(text=text, usage=openai_usage(payload))
