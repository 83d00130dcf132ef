"""
Shared REST client for the SimplyMedi API.

Every API call in the client goes through one ApiClient instance, which:
- Attaches the stored bearer token to outgoing requests
- Logs method, URL, status and latency of every call
- Treats any 401 as session expiry: clears stored tokens and sends the
  document to the login entry point
"""

import time
from typing import Any, Dict, Optional

import httpx

from simplymedi.client.document import DocumentRoot
from simplymedi.client.storage import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    MemoryStorage,
)
from simplymedi.config import settings
from simplymedi.utils.logger import get_logger

logger = get_logger("api_client")

START_TIME_EXTENSION = "simplymedi.start_time"


class ApiClient:
    """Async HTTP client with auth, latency logging and session expiry."""

    def __init__(
        self,
        storage: Optional[MemoryStorage] = None,
        document: Optional[DocumentRoot] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.document = document or DocumentRoot()
        self.base_url = base_url or settings.api_base_url
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.http_timeout_seconds,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            event_hooks={
                "request": [self._on_request],
                "response": [self._on_response],
            },
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self.client.aclose()

    # =========================================================================
    # Credentials
    # =========================================================================

    @property
    def is_authenticated(self) -> bool:
        return bool(self.storage.get_item(ACCESS_TOKEN_KEY))

    def store_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        """Persist tokens returned by the auth endpoints."""
        self.storage.set_item(ACCESS_TOKEN_KEY, access_token)
        if refresh_token:
            self.storage.set_item(REFRESH_TOKEN_KEY, refresh_token)

    def clear_tokens(self) -> None:
        self.storage.remove_item(ACCESS_TOKEN_KEY)
        self.storage.remove_item(REFRESH_TOKEN_KEY)

    # =========================================================================
    # Hooks
    # =========================================================================

    async def _on_request(self, request: httpx.Request) -> None:
        token = self.storage.get_item(ACCESS_TOKEN_KEY)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

        request.extensions[START_TIME_EXTENSION] = time.perf_counter()

    async def _on_response(self, response: httpx.Response) -> None:
        request = response.request
        started = request.extensions.get(START_TIME_EXTENSION)
        duration_ms = int((time.perf_counter() - started) * 1000) if started else None

        log = logger.info if response.is_success else logger.warning
        log(
            f"API {request.method} {request.url.path} - {response.status_code} ({duration_ms}ms)",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            duration_ms=duration_ms
        )

        if response.status_code == 401:
            self._expire_session()

    def _expire_session(self) -> None:
        logger.warning("Session expired, redirecting to login", login_path=settings.login_path)
        self.clear_tokens()
        self.document.navigate(settings.login_path)

    # =========================================================================
    # Requests
    # =========================================================================

    async def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Send a request and return the response.

        Raises:
            httpx.HTTPStatusError: The server answered with a non-2xx status
            httpx.TransportError: No response was received
        """
        started = time.perf_counter()
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(
                f"API {method.upper()} {path} - Network Error "
                f"({int((time.perf_counter() - started) * 1000)}ms)",
                method=method.upper(),
                path=path,
                error=str(e)
            )
            raise

        response.raise_for_status()
        return response

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.request("GET", path, params=params)
        return response.json()

    async def post(self, path: str, json: Any = None) -> Any:
        response = await self.request("POST", path, json=json)
        return response.json()

    async def patch(self, path: str, json: Any = None) -> Any:
        response = await self.request("PATCH", path, json=json)
        return response.json()

    async def delete(self, path: str) -> Any:
        response = await self.request("DELETE", path)
        return response.json() if response.content else None


def describe_api_error(error: Exception) -> Dict[str, Any]:
    """
    Normalize an exception raised by ApiClient for display.

    Returns a dict with `message`, `status` and, when the server answered,
    the decoded error body as `data`.
    """
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        try:
            data = response.json()
        except ValueError:
            data = None
        message = None
        if isinstance(data, dict):
            message = data.get("error") or data.get("detail")
            if not isinstance(message, str):
                message = None
        return {
            "message": message or "An error occurred",
            "status": response.status_code,
            "data": data,
        }

    if isinstance(error, httpx.TransportError):
        return {
            "message": "Network error. Please check your connection.",
            "status": 0,
        }

    return {
        "message": str(error) or "An unexpected error occurred",
        "status": 0,
    }
