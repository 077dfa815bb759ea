"""
Custom Exceptions for ai-scripts-and-tools
"""

from typing import Any


class AIScriptsException(Exception):
    """Base exception for all ai-scripts errors"""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# LLM Provider Exceptions
class ProviderError(AIScriptsException):
    """
    LLM provider call failed

    Attributes:
        status: HTTP-like status code, when one applies
        details: Raw payload (vendor error object, response body, ...)
        provider: Display name of the provider that failed
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        details: Any = None,
        provider: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.details = details
        self.provider = provider

    def with_context(self, prefix: str, *, provider: str | None = None) -> "ProviderError":
        """Copy of this error, same class, message prefixed with `prefix`."""
        return self.__class__(
            f"{prefix}: {self.message}",
            status=self.status,
            details=self.details,
            provider=provider or self.provider,
        )


class ConfigurationError(ProviderError):
    """Required credential or endpoint is missing; no request was sent"""

    pass


class TransportError(ProviderError):
    """Connection to the provider failed"""

    pass


class TransportTimeoutError(TransportError):
    """Provider did not answer within the transport timeout"""

    pass


class HttpStatusError(ProviderError):
    """Provider answered with a non-2xx status"""

    pass


class ResponseFormatError(ProviderError):
    """Response body is not JSON or lacks the expected fields"""

    pass


class ProviderApiError(ProviderError):
    """Response body carries a vendor-reported error object"""

    pass


# Script Exceptions
class CommandError(AIScriptsException):
    """External command (git, ...) failed"""

    pass


class NoStagedChangesError(AIScriptsException):
    """Nothing is staged for commit"""

    pass
