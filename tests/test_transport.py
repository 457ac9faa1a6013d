from __future__ import annotations

import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as _TestServer

from pyeverywhere._transport import HttpTransport
from pyeverywhere.config import EverywhereConfig
from pyeverywhere.exceptions import EverywhereTransportError
from pyeverywhere.state.store import EphemeralStore, MemoryStateBackend
from pyeverywhere.task import EverywhereTask


async def _serve(handler) -> _TestServer:
    app = web.Application()
    app.router.add_get("/v2/api/tracks", handler)
    server = _TestServer(app)
    await server.start_server()
    return server


@pytest.mark.asyncio
async def test_get_json_returns_body_and_sends_params() -> None:
    seen: dict[str, str] = {}

    async def handler(request: web.Request) -> web.Response:
        seen.update(request.query)
        return web.json_response({"type": "FeatureCollection", "features": []})

    server = await _serve(handler)
    try:
        config = EverywhereConfig(token_id="tok", base_url=f"http://{server.host}:{server.port}")
        async with aiohttp.ClientSession() as session:
            body = await HttpTransport(config, session).get_json("/v2/api/tracks", {"tokenId": "tok"})
    finally:
        await server.close()

    assert body == {"type": "FeatureCollection", "features": []}
    assert seen == {"tokenId": "tok"}


@pytest.mark.asyncio
async def test_non_2xx_raises_transport_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(status=503, text="maintenance")

    server = await _serve(handler)
    try:
        config = EverywhereConfig(base_url=f"http://{server.host}:{server.port}")
        async with aiohttp.ClientSession() as session:
            with pytest.raises(EverywhereTransportError) as excinfo:
                await HttpTransport(config, session).get_json("/v2/api/tracks", {})
    finally:
        await server.close()

    assert excinfo.value.status_code == 503
    assert excinfo.value.endpoint == "/v2/api/tracks"


@pytest.mark.asyncio
async def test_invalid_json_raises_transport_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(text="<html>oops</html>", content_type="text/html")

    server = await _serve(handler)
    try:
        config = EverywhereConfig(base_url=f"http://{server.host}:{server.port}")
        async with aiohttp.ClientSession() as session:
            with pytest.raises(EverywhereTransportError, match="Invalid JSON"):
                await HttpTransport(config, session).get_json("/v2/api/tracks", {})
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_timeout_raises_transport_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        await asyncio.sleep(1.0)
        return web.json_response({})

    server = await _serve(handler)
    try:
        config = EverywhereConfig(base_url=f"http://{server.host}:{server.port}", request_timeout=0.05)
        async with aiohttp.ClientSession() as session:
            with pytest.raises(EverywhereTransportError, match="timed out"):
                await HttpTransport(config, session).get_json("/v2/api/tracks", {})
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_connection_error_raises_transport_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response({})

    server = await _serve(handler)
    base_url = f"http://{server.host}:{server.port}"
    await server.close()

    config = EverywhereConfig(base_url=base_url)
    async with aiohttp.ClientSession() as session:
        with pytest.raises(EverywhereTransportError, match="failed"):
            await HttpTransport(config, session).get_json("/v2/api/tracks", {})


@pytest.mark.asyncio
async def test_non_utf8_body_raises_transport_error() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(body=b"\xff\xfe{garbage", content_type="application/json")

    server = await _serve(handler)
    try:
        config = EverywhereConfig(base_url=f"http://{server.host}:{server.port}")
        async with aiohttp.ClientSession() as session:
            with pytest.raises(EverywhereTransportError, match="Invalid JSON") as excinfo:
                await HttpTransport(config, session).get_json("/v2/api/tracks", {})
    finally:
        await server.close()

    assert excinfo.value.status_code == 200


@pytest.mark.asyncio
async def test_tick_survives_non_utf8_pull_body() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(body=b"\xff\xfe{garbage", content_type="application/json")

    server = await _serve(handler)
    backend = MemoryStateBackend()
    try:
        config = EverywhereConfig(token_id="tok", base_url=f"http://{server.host}:{server.port}")
        async with EverywhereTask(config, backend) as task:
            result = await task.run_scheduled(now_ms=5000)
    finally:
        await server.close()

    assert result.pulled is False
    assert result.pull_error is not None and "Invalid JSON" in result.pull_error
    assert result.collection.features == []
    assert EphemeralStore.from_persisted(backend.payload).last_sync_at is None
