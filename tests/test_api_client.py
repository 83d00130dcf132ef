"""
Tests for the shared REST client.
"""

import re

import httpx
import pytest
from structlog.testing import capture_logs

from simplymedi.client.api_client import describe_api_error
from simplymedi.client.storage import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY


class TestAuthorization:

    @pytest.mark.asyncio
    async def test_bearer_token_attached(self, api, backend, storage):
        storage.set_item(ACCESS_TOKEN_KEY, "token-abc")
        backend.on("GET", "/languages/stats", json_body={"ok": True})

        await api.get("/languages/stats")

        assert backend.calls[0].headers["Authorization"] == "Bearer token-abc"

    @pytest.mark.asyncio
    async def test_anonymous_request_has_no_header(self, api, backend):
        backend.on("GET", "/languages/stats", json_body={"ok": True})

        await api.get("/languages/stats")

        assert "Authorization" not in backend.calls[0].headers

    @pytest.mark.asyncio
    async def test_json_headers(self, api, backend):
        backend.on("POST", "/languages/detect", json_body={})

        await api.post("/languages/detect", json={"text": "hi"})

        assert backend.calls[0].headers["Accept"] == "application/json"
        assert backend.calls[0].headers["Content-Type"] == "application/json"

    def test_store_and_clear_tokens(self, api, storage):
        api.store_tokens("access", "refresh")
        assert api.is_authenticated
        assert storage.get_item(REFRESH_TOKEN_KEY) == "refresh"

        api.clear_tokens()
        assert not api.is_authenticated
        assert storage.get_item(REFRESH_TOKEN_KEY) is None


class TestSessionExpiry:

    @pytest.mark.asyncio
    async def test_401_clears_tokens_and_redirects(self, api, backend, storage, document):
        api.store_tokens("expired", "refresh")
        backend.on("GET", "/users/language-preferences", status=401, json_body={"detail": "expired"})

        with pytest.raises(httpx.HTTPStatusError):
            await api.get("/users/language-preferences")

        assert storage.get_item(ACCESS_TOKEN_KEY) is None
        assert storage.get_item(REFRESH_TOKEN_KEY) is None
        assert document.location == "/login"

    @pytest.mark.asyncio
    async def test_other_errors_keep_session(self, api, backend, storage, document):
        api.store_tokens("valid")
        backend.on("GET", "/languages/stats", status=500, json_body={"error": "boom"})

        with pytest.raises(httpx.HTTPStatusError):
            await api.get("/languages/stats")

        assert storage.get_item(ACCESS_TOKEN_KEY) == "valid"
        assert document.location == "/"


class TestRequestLogging:

    @pytest.mark.asyncio
    async def test_success_logged_with_latency(self, api, backend):
        backend.on("GET", "/languages/stats", json_body={"ok": True})

        with capture_logs() as logs:
            await api.get("/languages/stats")

        events = [entry for entry in logs if entry["event"].startswith("API ")]
        assert len(events) == 1
        entry = events[0]
        assert re.fullmatch(r"API GET /api/languages/stats - 200 \(\d+ms\)", entry["event"])
        assert entry["log_level"] == "info"
        assert entry["status_code"] == 200
        assert isinstance(entry["duration_ms"], int)
        assert entry["event"].endswith(f"({entry['duration_ms']}ms)")

    @pytest.mark.asyncio
    async def test_error_status_logged_as_warning(self, api, backend):
        backend.on("GET", "/languages/stats", status=500, json_body={"error": "boom"})

        with capture_logs() as logs:
            with pytest.raises(httpx.HTTPStatusError):
                await api.get("/languages/stats")

        entry = next(entry for entry in logs if entry["event"].startswith("API "))
        assert re.fullmatch(r"API GET /api/languages/stats - 500 \(\d+ms\)", entry["event"])
        assert entry["log_level"] == "warning"

    @pytest.mark.asyncio
    async def test_network_error_logged(self, api, backend):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend.on("GET", "/languages/supported", handler=refuse)

        with capture_logs() as logs:
            with pytest.raises(httpx.TransportError):
                await api.get("/languages/supported")

        entry = next(entry for entry in logs if entry["log_level"] == "error")
        assert re.fullmatch(r"API GET /languages/supported - Network Error \(\d+ms\)", entry["event"])
        assert entry["error"] == "connection refused"


class TestErrors:

    @pytest.mark.asyncio
    async def test_network_error_propagates(self, api, backend):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend.on("GET", "/languages/supported", handler=refuse)

        with pytest.raises(httpx.TransportError) as exc_info:
            await api.get("/languages/supported")

        assert describe_api_error(exc_info.value) == {
            "message": "Network error. Please check your connection.",
            "status": 0,
        }

    @pytest.mark.asyncio
    async def test_describe_status_error(self, api, backend):
        backend.on("POST", "/languages/translate", status=400, json_body={"error": "Unsupported target language"})

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await api.post("/languages/translate", json={"text": "x"})

        described = describe_api_error(exc_info.value)
        assert described["message"] == "Unsupported target language"
        assert described["status"] == 400
        assert described["data"] == {"error": "Unsupported target language"}

    @pytest.mark.asyncio
    async def test_describe_uses_detail_string(self, api, backend):
        backend.on("GET", "/missing", status=404, json_body={"detail": "Not Found"})

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await api.get("/missing")

        assert describe_api_error(exc_info.value)["message"] == "Not Found"

    @pytest.mark.asyncio
    async def test_describe_non_json_body(self, api, backend):
        backend.on("GET", "/broken", handler=lambda request: httpx.Response(502, text="<html>"))

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await api.get("/broken")

        described = describe_api_error(exc_info.value)
        assert described["message"] == "An error occurred"
        assert described["data"] is None

    def test_describe_other_exception(self):
        assert describe_api_error(RuntimeError("boom")) == {"message": "boom", "status": 0}


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_delete_without_body(self, api, backend):
        backend.on("DELETE", "/users/language-preferences", handler=lambda request: httpx.Response(204))

        assert await api.delete("/users/language-preferences") is None

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, api):
        async with api as client:
            assert client is api
        assert api.client.is_closed
