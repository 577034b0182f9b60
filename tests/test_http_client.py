"""Tests for hls_sanitizer.utils.http_client against local HTTP servers."""

# pylint: disable=missing-function-docstring
from asyncio import run, start_server
from socket import socket

from aiohttp import test_utils, web
from pytest import raises

from hls_sanitizer.errors import FetchError
from hls_sanitizer.utils.http_client import PlaylistFetcher

PLAYLIST = "#EXTM3U\n#EXTINF:2.0,\nseg0.ts\n"


async def _playlist(request: web.Request) -> web.Response:
    return web.Response(text=PLAYLIST, content_type="application/vnd.apple.mpegurl")


async def _redirect(request: web.Request) -> web.Response:
    raise web.HTTPFound("/media/index.m3u8")


def _origin() -> web.Application:
    app = web.Application()
    app.router.add_get("/media/index.m3u8", _playlist)
    app.router.add_get("/short.m3u8", _redirect)
    return app


def test_fetch_returns_text_and_declared_content_type():
    async def scenario():
        async with test_utils.TestServer(_origin()) as server:
            async with PlaylistFetcher(timeout=5) as fetcher:
                return await fetcher.fetch(str(server.make_url("/media/index.m3u8")))

    document = run(scenario())

    assert document.text == PLAYLIST
    assert document.content_type.startswith("application/vnd.apple.mpegurl")
    assert document.source_url.endswith("/media/index.m3u8")


def test_redirect_is_followed_and_final_url_kept():
    async def scenario():
        async with test_utils.TestServer(_origin()) as server:
            async with PlaylistFetcher(timeout=5) as fetcher:
                return await fetcher.fetch(str(server.make_url("/short.m3u8")))

    document = run(scenario())

    assert document.text == PLAYLIST
    assert document.source_url.endswith("/media/index.m3u8")


def test_not_found_raises_fetch_error_with_status():
    async def scenario():
        async with test_utils.TestServer(_origin()) as server:
            url = str(server.make_url("/nope.m3u8"))
            async with PlaylistFetcher(timeout=5) as fetcher:
                with raises(FetchError) as excinfo:
                    await fetcher.fetch(url)
            return url, excinfo.value

    url, error = run(scenario())

    assert error.status_code == 404
    assert error.url == url
    assert error.cause is not None


def test_connection_failure_raises_fetch_error():
    with socket() as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
    url = f"http://127.0.0.1:{port}/index.m3u8"

    async def scenario():
        async with PlaylistFetcher(timeout=5) as fetcher:
            with raises(FetchError) as excinfo:
                await fetcher.fetch(url)
        return excinfo.value

    error = run(scenario())

    assert error.status_code is None
    assert error.url == url


def test_missing_content_type_defaults_to_text_plain():
    body = PLAYLIST.encode("utf-8")

    async def handle(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        writer.write(
            b"HTTP/1.1 200 OK\r\n"
            + f"Content-Length: {len(body)}\r\n".encode("ascii")
            + b"Connection: close\r\n\r\n"
            + body
        )
        await writer.drain()
        writer.close()

    async def scenario():
        server = await start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        async with server:
            async with PlaylistFetcher(timeout=5) as fetcher:
                return await fetcher.fetch(f"http://127.0.0.1:{port}/index.m3u8")

    document = run(scenario())

    assert document.content_type == "text/plain"
    assert document.text == PLAYLIST


class _StaleSession:
    def __init__(self, fail: bool = False) -> None:
        self.closed = False
        self.fail = fail
        self.close_calls = 0

    async def close(self) -> None:
        self.close_calls += 1
        if self.fail:
            raise RuntimeError("Event loop is closed")
        self.closed = True


def test_close_releases_session_from_another_loop():
    # pylint: disable=protected-access
    fetcher = PlaylistFetcher(timeout=5)
    stale = _StaleSession()
    fetcher._session = stale
    fetcher._session_loop = object()

    run(fetcher.close())

    assert stale.close_calls == 1
    assert stale.closed
    assert fetcher._session is None


def test_close_tolerates_session_that_cannot_close():
    # pylint: disable=protected-access
    fetcher = PlaylistFetcher(timeout=5)
    stale = _StaleSession(fail=True)
    fetcher._session = stale
    fetcher._session_loop = object()

    run(fetcher.close())

    assert stale.close_calls == 1
    assert fetcher._session is None
    assert fetcher._session_loop is None
