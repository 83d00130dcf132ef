"""
Shared fixtures for SimplyMedi tests.
"""

import os

# Settings are read at import time, so the environment is set first
os.environ["RATE_LIMIT_PER_MINUTE"] = "10000"
os.environ["GEMINI_API_KEY"] = ""
os.environ["JWT_SECRET"] = "simplymedi-test-secret-0123456789abcdef"

from typing import Callable, Dict, List, Tuple

import httpx
import pytest

from simplymedi.client.api_client import ApiClient
from simplymedi.client.document import DocumentRoot
from simplymedi.client.storage import MemoryStorage
from simplymedi.localization.store import LocalizationContext
from simplymedi.utils.logger import configure_logging

# Uncached loggers so structlog.testing.capture_logs sees every event
configure_logging(log_level="DEBUG", json_format=False, cache_loggers=False)

BASE_URL = "http://testserver/api"


class FakeBackend:
    """
    Scripted stand-in for the SimplyMedi API.

    Routes map (method, path) to a handler returning an httpx.Response.
    Every request is recorded in `calls`.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: List[httpx.Request] = []

    def on(self, method: str, path: str, handler=None, status: int = 200, json_body=None):
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json_body)
        self.routes[(method, "/api" + path)] = handler

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [call for call in self.calls if call.url.path == "/api" + path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        return handler(request)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def document():
    return DocumentRoot()


@pytest.fixture
def api(backend, storage, document):
    return ApiClient(
        storage=storage,
        document=document,
        base_url=BASE_URL,
        transport=httpx.MockTransport(backend)
    )


@pytest.fixture
def context(api):
    return LocalizationContext(api)
