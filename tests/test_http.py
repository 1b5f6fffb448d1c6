"""
Unit tests for the JSON request helper.
"""

import httpx
import pytest

from mcp_servers.errors import APIError, BackendError
from mcp_servers.http import request_json


def client_for(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestRequestJson:
    @pytest.mark.asyncio
    async def test_decodes_success(self):
        async with client_for(lambda r: httpx.Response(200, json={"ok": True})) as client:
            assert await request_json(client, "GET", "https://api.test/x") == {"ok": True}

    @pytest.mark.asyncio
    async def test_sends_json_body(self):
        seen = {}

        def handler(request):
            seen["body"] = request.content
            seen["method"] = request.method
            return httpx.Response(201, json={})

        async with client_for(handler) as client:
            await request_json(client, "POST", "https://api.test/x", json={"q": "a"})

        assert seen["method"] == "POST"
        assert b'"q"' in seen["body"]

    @pytest.mark.asyncio
    async def test_error_body_becomes_api_error(self):
        body = {"object": "error", "code": "object_not_found", "message": "Could not find page"}

        async with client_for(lambda r: httpx.Response(404, json=body)) as client:
            with pytest.raises(APIError) as exc_info:
                await request_json(client, "GET", "https://api.test/x")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "object_not_found"
        assert "Could not find page" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        async with client_for(lambda r: httpx.Response(502, text="<html>bad gateway</html>")) as client:
            with pytest.raises(BackendError, match="unexpected status code: 502"):
                await request_json(client, "GET", "https://api.test/x")

    @pytest.mark.asyncio
    async def test_undecodable_success_body(self):
        async with client_for(lambda r: httpx.Response(200, text="not json")) as client:
            with pytest.raises(BackendError, match="error decoding JSON"):
                await request_json(client, "GET", "https://api.test/x")

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with client_for(handler) as client:
            with pytest.raises(BackendError, match="error sending request"):
                await request_json(client, "GET", "https://api.test/x")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, url", [("", "https://api.test/x"), ("GET", "")])
    async def test_requires_method_and_url(self, method, url):
        async with client_for(lambda r: httpx.Response(200, json={})) as client:
            with pytest.raises(ValueError):
                await request_json(client, method, url)
