"""
Shared fixtures: a recording HTTP transport backed by httpx.MockTransport
"""

import json
from typing import Any

import httpx
import pytest

from aiscripts.core.config import Settings
from aiscripts.llm import factory as factory_module
from aiscripts.llm.transport import HttpTransport


class HttpRecorder:
    """
    Replays queued responses and records every request

    Queue items may be a dict (sent as a 200 JSON body), an httpx.Response,
    or an exception instance to raise from the transport.
    """

    def __init__(self, responses: list[Any]):
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []
        self.transport = HttpTransport(transport=httpx.MockTransport(self._handle))

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    def url(self, index: int = -1) -> str:
        return str(self.requests[index].url)


@pytest.fixture
def http():
    """Build an HttpRecorder from queued responses"""

    def build(*responses: Any) -> HttpRecorder:
        return HttpRecorder(list(responses))

    return build


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every Settings variable from the environment"""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_factory_singleton():
    factory_module.reset_client_factory()
    yield
    factory_module.reset_client_factory()
