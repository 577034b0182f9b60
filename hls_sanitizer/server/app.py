"""Local HTTP service that sanitizes playlists and serves the results to players."""

from __future__ import annotations

import logging
from typing import Dict

from aiohttp import web

from ..errors import ResourceNotFoundError
from ..models import LoadResult, LoadStatus, SanitizerSettings
from ..playlist import PlaylistPublisher, PlaylistSanitizer
from ..utils.http_client import PlaylistFetcher

SANITIZER_KEY = web.AppKey("sanitizer", PlaylistSanitizer)

FAILURE_STATUS: Dict[str, int] = {
    "fetch_error": 502,
    "recursion_limit_exceeded": 422,
    "variant_not_found": 422,
    "invalid_url": 400,
}


def _result_status(result: LoadResult) -> int:
    if result.status is LoadStatus.OK:
        return 200
    if result.status is LoadStatus.SUPERSEDED:
        return 409
    if result.error is None:
        return 500
    return FAILURE_STATUS.get(result.error.kind, 500)


async def handle_load(request: web.Request) -> web.Response:
    url = request.query.get("url", "").strip()
    if not url:
        raise web.HTTPBadRequest(text="Missing 'url' query parameter")

    sanitizer = request.app[SANITIZER_KEY]
    result = await sanitizer.load(url)
    return web.json_response(result.model_dump(mode="json"), status=_result_status(result))


async def handle_playlist(request: web.Request) -> web.Response:
    sanitizer = request.app[SANITIZER_KEY]
    try:
        playlist = sanitizer.publisher.open(request.match_info["resource_id"])
    except ResourceNotFoundError:
        raise web.HTTPNotFound(text="Playlist not found or already released") from None

    # Raw header so parameters such as charset survive unchanged.
    return web.Response(body=playlist.text.encode("utf-8"), headers={"Content-Type": playlist.content_type})


async def _close_sanitizer(app: web.Application) -> None:
    await app[SANITIZER_KEY].close()


def public_base_url(settings: SanitizerSettings) -> str:
    return f"http://{settings.host}:{settings.port}/playlists"


def create_app(settings: SanitizerSettings, sanitizer: PlaylistSanitizer | None = None) -> web.Application:
    """Build the aiohttp application; a sanitizer can be injected for tests."""

    if sanitizer is None:
        fetcher = PlaylistFetcher(timeout=settings.timeout, user_agent=settings.user_agent)
        publisher = PlaylistPublisher(base_url=settings.public_base_url)
        sanitizer = PlaylistSanitizer(fetcher, publisher=publisher, max_depth=settings.max_depth)

    app = web.Application()
    app[SANITIZER_KEY] = sanitizer
    app.router.add_get("/load", handle_load)
    app.router.add_get("/playlists/{resource_id}", handle_playlist)
    app.on_cleanup.append(_close_sanitizer)
    return app


def run_server(settings: SanitizerSettings) -> None:
    if settings.public_base_url.startswith("memory://"):
        settings = settings.model_copy(update={"public_base_url": public_base_url(settings)})
    logging.info("Serving sanitized playlists on http://%s:%s", settings.host, settings.port)
    web.run_app(create_app(settings), host=settings.host, port=settings.port, print=None)
