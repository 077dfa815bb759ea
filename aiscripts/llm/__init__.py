"""
LLM Client Abstraction
Provider clients, their factory, and the shared HTTP transport
"""

from aiscripts.llm.base import BaseLLMClient
from aiscripts.llm.factory import (
    ClientFactory,
    LLMConfig,
    create_client,
    get_client_factory,
    load_config,
)
from aiscripts.llm.protocol import CompletionResult, LLMClientProtocol, ProviderTag, TokenUsage
from aiscripts.llm.query import query_llm
from aiscripts.llm.schemas import CompletionOptions, CompletionRequest

__all__ = [
    "BaseLLMClient",
    "ClientFactory",
    "CompletionOptions",
    "CompletionRequest",
    "CompletionResult",
    "LLMClientProtocol",
    "LLMConfig",
    "ProviderTag",
    "TokenUsage",
    "create_client",
    "get_client_factory",
    "load_config",
    "query_llm",
]
