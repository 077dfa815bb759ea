"""
Structured Logging
structlog setup shared by the LLM layer and the scripts
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from aiscripts.core.config import settings


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add application context to log entries

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary

    Returns:
        Modified event dictionary
    """
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    return event_dict


def configure_logging() -> None:
    """
    Configure structured logging

    Sets up structlog with JSON output if enabled in settings,
    otherwise uses console output. Logs go to stderr so that
    script output on stdout stays pipeable.
    """
    level = logging.getLevelName(settings.effective_log_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if settings.log_json:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance

    Usage:
        logger = get_logger(__name__)
        logger.info("llm_request_sent", provider="OpenAI", model="gpt-4o")
    """
    return structlog.get_logger(name)


def log_llm_call(
    *,
    provider: str,
    model: str | None,
    latency_ms: float,
    tokens: dict | None = None,
    error: str | None = None,
) -> None:
    """Log one provider request with latency and token usage."""

    logger = get_logger("llm")
    if error:
        logger.warning(
            "llm_call",
            provider=provider,
            model=model,
            latency_ms=round(latency_ms, 1),
            error=error,
        )
        return
    logger.info(
        "llm_call",
        provider=provider,
        model=model,
        latency_ms=round(latency_ms, 1),
        tokens=tokens,
    )
