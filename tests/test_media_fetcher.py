import asyncio
import gzip
import sys
from pathlib import Path

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from media_gateway.modules.gateway.errors import UpstreamFetchError
from media_gateway.modules.gateway.fetcher import AiohttpMediaFetcher
from media_gateway.modules.gateway.service import upstream_request_headers


def _loop_run(coro):
    return asyncio.run(coro)


def test_fetcher_streams_partial_content_with_identity_headers():
    async def scenario():
        seen = {}

        async def handler(request):
            seen.update(request.headers)
            return web.Response(
                status=206,
                body=b"0123456789",
                headers={"Content-Range": "bytes 0-9/100", "Content-Type": "video/mp4"},
            )

        media_app = web.Application()
        media_app.router.add_get("/v.mp4", handler)

        async with test_utils.TestServer(media_app) as server:
            async with aiohttp.ClientSession() as session:
                fetcher = AiohttpMediaFetcher(session, chunk_size=4)
                upstream = await fetcher.open(
                    str(server.make_url("/v.mp4")),
                    {"Range": "bytes=0-9", "Referer": "https://www.douyin.com/"},
                )
                chunks = [chunk async for chunk in upstream.body]
                await upstream.close()
        return seen, upstream, chunks

    seen, upstream, chunks = _loop_run(scenario())

    assert seen["Range"] == "bytes=0-9"
    assert seen["Referer"] == "https://www.douyin.com/"
    assert upstream.status == 206
    assert upstream.ok is True
    assert upstream.headers["content-range"] == "bytes 0-9/100"
    assert upstream.headers["content-type"] == "video/mp4"
    assert b"".join(chunks) == b"0123456789"
    assert all(len(chunk) <= 4 for chunk in chunks)
    assert upstream.closed is True


def test_fetcher_reports_non_success_status_without_raising():
    async def scenario():
        async def handler(request):
            return web.Response(status=404, text="gone")

        media_app = web.Application()
        media_app.router.add_get("/v.mp4", handler)

        async with test_utils.TestServer(media_app) as server:
            async with aiohttp.ClientSession() as session:
                upstream = await AiohttpMediaFetcher(session).open(str(server.make_url("/v.mp4")), {})
                await upstream.close()
        return upstream

    upstream = _loop_run(scenario())

    assert upstream.status == 404
    assert upstream.ok is False


def test_fetcher_wraps_connection_failures():
    async def scenario():
        async with aiohttp.ClientSession() as session:
            await AiohttpMediaFetcher(session).open("http://127.0.0.1:1/v.mp4", {})

    with pytest.raises(UpstreamFetchError):
        _loop_run(scenario())


MEDIA_BYTES = bytes(range(256)) * 400


def _gzip_media_app(seen, *, force_gzip=False):
    async def handler(request):
        seen.update(request.headers)
        if force_gzip or "gzip" in request.headers.get("Accept-Encoding", ""):
            return web.Response(
                body=gzip.compress(MEDIA_BYTES),
                headers={"Content-Encoding": "gzip", "Content-Type": "video/mp4"},
            )
        return web.Response(body=MEDIA_BYTES, headers={"Content-Type": "video/mp4"})

    media_app = web.Application()
    media_app.router.add_get("/v.mp4", handler)
    return media_app


def _fetch_all(media_app, headers):
    async def scenario():
        async with test_utils.TestServer(media_app) as server:
            async with aiohttp.ClientSession() as session:
                upstream = await AiohttpMediaFetcher(session).open(str(server.make_url("/v.mp4")), headers)
                chunks = [chunk async for chunk in upstream.body]
                await upstream.close()
        return upstream, b"".join(chunks)

    return _loop_run(scenario())


def test_fetcher_asks_for_uncompressed_media():
    seen = {}

    upstream, body = _fetch_all(_gzip_media_app(seen), upstream_request_headers())

    assert seen["Accept-Encoding"] == "identity"
    assert "content-encoding" not in upstream.headers
    assert body == MEDIA_BYTES
    assert int(upstream.headers["content-length"]) == len(body)


def test_fetcher_defaults_to_identity_encoding():
    seen = {}

    upstream, body = _fetch_all(_gzip_media_app(seen), {})

    assert seen["Accept-Encoding"] == "identity"
    assert int(upstream.headers["content-length"]) == len(body)


def test_fetcher_relays_compressed_bytes_matching_declared_length():
    seen = {}

    upstream, body = _fetch_all(_gzip_media_app(seen, force_gzip=True), upstream_request_headers())

    assert upstream.headers["content-encoding"] == "gzip"
    assert int(upstream.headers["content-length"]) == len(body)
    assert gzip.decompress(body) == MEDIA_BYTES
