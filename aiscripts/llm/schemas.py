"""
LLM Client DTOs

Option containers and the typed request bodies each provider sends.
Bodies are serialized with `to_payload()` so unset fields never reach the wire.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from aiscripts.core.exceptions import ConfigurationError

DEFAULT_TEMPERATURE = 0.5
DEFAULT_MAX_TOKENS = 500


class CompletionOptions(BaseModel):
    """Per-call overrides; None means "keep the client's value"."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = Field(default=None, ge=1)
    api_key: str | None = None
    endpoint: str | None = None

    @classmethod
    def validated(cls, **values: Any) -> CompletionOptions:
        """Build options, reporting out-of-range values as ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            raise options_error(exc) from exc


class ClientOptions(BaseModel):
    """Resolved options a client was constructed with."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model: str | None = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    api_key: str | None = None
    endpoint: str | None = None

    def merged(self, overrides: CompletionOptions | None) -> ClientOptions:
        if overrides is None:
            return self
        return self.model_copy(update=overrides.model_dump(exclude_none=True))


class CompletionRequest(BaseModel):
    """One prompt plus the sampling settings it is sent with."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    prompt: str
    model: str | None = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS

    @classmethod
    def from_options(cls, prompt: str, options: ClientOptions) -> CompletionRequest:
        return cls(
            prompt=prompt,
            model=options.model,
            temperature=options.temperature,
            max_tokens=options.max_tokens,
        )


def options_error(exc: ValidationError) -> ConfigurationError:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return ConfigurationError(f"Invalid LLM options: {problems}", status=400, details=str(exc))


# --- Wire bodies ---


class RequestBody(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CompletionsRequestBody(RequestBody):
    """OpenAI completions shape, also spoken by local servers and custom endpoints."""

    model: str | None = None
    prompt: str
    max_tokens: int
    temperature: float

    @classmethod
    def build(cls, request: CompletionRequest) -> CompletionsRequestBody:
        return cls(
            model=request.model,
            prompt=request.prompt,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"] = "user"
    content: str


class ChatRequestBody(RequestBody):
    """Chat shape shared by OpenAI chat completions and Anthropic messages."""

    model: str | None = None
    messages: list[ChatMessage]
    max_tokens: int
    temperature: float

    @classmethod
    def build(cls, request: CompletionRequest) -> ChatRequestBody:
        return cls(
            model=request.model,
            messages=[ChatMessage(role="user", content=request.prompt)],
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )


class GeminiPart(BaseModel):
    text: str


class GeminiContent(BaseModel):
    parts: list[GeminiPart]


class GeminiGenerationConfig(BaseModel):
    maxOutputTokens: int
    temperature: float


class GeminiRequestBody(RequestBody):
    """generateContent body; the model travels in the URL."""

    contents: list[GeminiContent]
    generationConfig: GeminiGenerationConfig

    @classmethod
    def build(cls, request: CompletionRequest) -> GeminiRequestBody:
        return cls(
            contents=[GeminiContent(parts=[GeminiPart(text=request.prompt)])],
            generationConfig=GeminiGenerationConfig(
                maxOutputTokens=request.max_tokens,
                temperature=request.temperature,
            ),
        )
