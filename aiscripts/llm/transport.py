"""
HTTP Transport
One JSON request per call with a bounded timeout, shared by all provider clients
"""

from __future__ import annotations

import json
from typing import Any, NamedTuple

import httpx

from aiscripts.core.exceptions import (
    ConfigurationError,
    HttpStatusError,
    TransportError,
    TransportTimeoutError,
)
from aiscripts.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class HttpResponse(NamedTuple):
    """
    Raw HTTP response

    Attributes:
        status: HTTP status code
        headers: Response headers (lower-cased names)
        text: Decoded response body
    """

    status: int
    headers: dict[str, str]
    text: str

    def json(self) -> Any:
        """Decode the body as JSON (raises json.JSONDecodeError)."""
        return json.loads(self.text)


class HttpTransport:
    """
    Thin httpx wrapper that classifies failures.

    Connection problems become TransportError, timeouts TransportTimeoutError,
    a malformed URL ConfigurationError.
    Status codes are returned as-is; use raise_for_status() to reject >= 400.
    `transport` lets tests plug in httpx.MockTransport.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        request_headers = {"Content-Type": "application/json", **(headers or {})}
        effective_timeout = timeout or self.timeout

        async with httpx.AsyncClient(
            timeout=effective_timeout,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.request(
                    method.upper(),
                    url,
                    json=json,
                    headers=request_headers,
                )
            except httpx.InvalidURL as exc:
                raise ConfigurationError(
                    f"Invalid API endpoint URL {_redact(url)}: {exc}",
                    status=400,
                ) from exc
            except httpx.TimeoutException as exc:
                raise TransportTimeoutError(
                    f"Request to {_redact(url)} timed out after {effective_timeout}s",
                    status=408,
                ) from exc
            except httpx.HTTPError as exc:
                raise TransportError(
                    f"Request to {_redact(url)} failed: {exc}",
                    status=503,
                ) from exc

        logger.debug(
            "http_response_received",
            method=method.upper(),
            url=_redact(url),
            status=resp.status_code,
        )
        return HttpResponse(
            status=resp.status_code,
            headers={key.lower(): value for key, value in resp.headers.items()},
            text=resp.text,
        )

    async def post(
        self,
        url: str,
        body: Any,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        return await self.request("POST", url, json=body, headers=headers, timeout=timeout)

    async def get(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        return await self.request("GET", url, headers=headers, timeout=timeout)


def raise_for_status(response: HttpResponse) -> HttpResponse:
    """Raise HttpStatusError for status >= 400, body kept as details."""
    if response.status >= 400:
        raise HttpStatusError(
            f"API returned error status: {response.status}",
            status=response.status,
            details=response.text,
        )
    return response


def _redact(url: str) -> str:
    """Hide `key=` query values (Gemini puts the API key in the URL)."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        # unparsable: keep everything before the query string
        return url.split("?", 1)[0]
    if "key" not in parsed.params:
        return url
    return str(parsed.copy_set_param("key", "***"))
