"""Tests for the aiohttp remote cart client against a local test server."""

import pytest
from aiohttp import test_utils, web

from cartcore.domain.exceptions import RemoteCartError
from cartcore.domain.service.cart_reconciliation import reconcile_with_remote
from cartcore.infrastructure.remote.http_cart_api import HttpCartApi
from tests.fakes import remote_entry


async def _start(handler) -> test_utils.TestServer:
    app = web.Application()
    app.router.add_get("/api/cart/", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


def _base_url(server: test_utils.TestServer) -> str:
    return f"http://{server.host}:{server.port}"


class TestHttpCartApi:

    @pytest.mark.asyncio
    async def test_fetches_items_with_bearer_token(self):
        seen_headers = []

        async def handler(request):
            seen_headers.append(dict(request.headers))
            return web.json_response({"items": [remote_entry(1, 2)]})

        server = await _start(handler)
        try:
            api = HttpCartApi(_base_url(server) + "/", token="secret")
            items = await api.fetch_cart()
        finally:
            await server.close()

        assert items == [remote_entry(1, 2)]
        assert seen_headers[0]["Authorization"] == "Bearer secret"
        assert seen_headers[0]["Cache-Control"] == "no-cache, no-store, must-revalidate"

    @pytest.mark.asyncio
    async def test_no_token_no_authorization_header(self):
        seen_headers = []

        async def handler(request):
            seen_headers.append(dict(request.headers))
            return web.json_response({"items": []})

        server = await _start(handler)
        try:
            assert await HttpCartApi(_base_url(server))() == []
        finally:
            await server.close()

        assert "Authorization" not in seen_headers[0]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        async def handler(request):
            return web.json_response({"detail": "Unauthorized"}, status=401)

        server = await _start(handler)
        try:
            with pytest.raises(RemoteCartError, match="HTTP 401"):
                await HttpCartApi(_base_url(server)).fetch_cart()
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_payload_without_items(self):
        async def handler(request):
            return web.json_response({"detail": "ok"})

        server = await _start(handler)
        try:
            with pytest.raises(RemoteCartError, match="no 'items' list"):
                await HttpCartApi(_base_url(server)).fetch_cart()
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        async def handler(request):
            return web.Response(text="<html>oops</html>", content_type="text/html")

        server = await _start(handler)
        try:
            with pytest.raises(RemoteCartError):
                await HttpCartApi(_base_url(server)).fetch_cart()
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_unreachable_server_degrades_to_local_cart(self):
        async def handler(request):
            return web.json_response({"items": []})

        server = await _start(handler)
        base_url = _base_url(server)
        await server.close()

        result = await reconcile_with_remote([], HttpCartApi(base_url, timeout=2))
        assert not result.success
        assert result.merged_items == []
        assert "Cart request failed" in result.error
