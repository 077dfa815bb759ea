"""
Application Configuration
Pydantic Settings for environment-based configuration
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings from environment variables

    `.env` in the working directory wins over `../.env`; real environment
    variables win over both.
    """

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ai-scripts-and-tools"
    app_version: str = "1.0.0"

    # LLM Configuration (global overrides)
    llm_provider: str = "local"
    llm_model: str | None = None
    llm_temperature: float | None = None
    llm_max_tokens: int | None = None
    llm_timeout_seconds: float = Field(default=30.0, gt=0)

    # OpenAI
    openai_api_key: str | None = None
    openai_endpoint: str | None = None
    openai_default_model: str | None = None

    # Anthropic
    anthropic_api_key: str | None = None
    anthropic_endpoint: str | None = None
    anthropic_default_model: str | None = None

    # Gemini
    gemini_api_key: str | None = None
    gemini_endpoint: str | None = None
    gemini_default_model: str | None = None

    # Local inference server (LM Studio, Ollama OpenAI-compatible API, ...)
    local_llm_endpoint: str | None = None
    local_llm_model: str | None = None

    # Custom OpenAI-compatible provider
    custom_provider_name: str | None = None
    custom_api_key: str | None = None
    custom_endpoint: str | None = None
    custom_default_model: str | None = None

    # Logging
    llm_debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    @field_validator(
        "llm_model",
        "llm_temperature",
        "llm_max_tokens",
        "openai_api_key",
        "openai_endpoint",
        "openai_default_model",
        "anthropic_api_key",
        "anthropic_endpoint",
        "anthropic_default_model",
        "gemini_api_key",
        "gemini_endpoint",
        "gemini_default_model",
        "local_llm_endpoint",
        "local_llm_model",
        "custom_provider_name",
        "custom_api_key",
        "custom_endpoint",
        "custom_default_model",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("llm_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value):
        if value is None:
            return "local"
        return str(value).strip().lower() or "local"

    @property
    def effective_log_level(self) -> str:
        """LLM_DEBUG forces DEBUG regardless of LOG_LEVEL"""
        return "DEBUG" if self.llm_debug else self.log_level


# Global settings instance
settings = Settings()
