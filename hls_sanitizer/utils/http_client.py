"""Async HTTP client for retrieving playlist text from origins and CDNs."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from ..errors import FetchError
from ..models import PlaylistDocument
from ..models.playlist_models import DEFAULT_CONTENT_TYPE
from ..models.settings_models import DEFAULT_USER_AGENT

PLAYLIST_HEADERS: Dict[str, str] = {
    "accept": "application/vnd.apple.mpegurl, application/x-mpegurl, */*",
}


class PlaylistFetcher:
    """Issues GET requests for playlists and wraps every failure in ``FetchError``."""

    def __init__(self, timeout: float = 10.0, user_agent: str = DEFAULT_USER_AGENT) -> None:
        self.timeout = timeout
        self._headers = PLAYLIST_HEADERS.copy()
        self._headers["user-agent"] = user_agent

        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock: Optional[asyncio.Lock] = None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

    async def fetch(self, url: str) -> PlaylistDocument:
        """Fetch ``url`` and return its text, final URL, and declared content type."""

        session = await self._get_session()
        try:
            async with session.get(url, allow_redirects=True) as resp:
                resp.raise_for_status()
                text = await resp.text(errors="replace")
                content_type = resp.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
                final_url = str(resp.url)
        except aiohttp.ClientResponseError as exc:
            logging.error("Playlist request to %s failed with status %s", url, exc.status)
            raise FetchError(url, exc, status_code=exc.status) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logging.error("Playlist request to %s failed: %s", url, exc)
            raise FetchError(url, exc) from exc

        if final_url != url:
            logging.debug("Playlist %s redirected to %s", url, final_url)
        return PlaylistDocument(text=text, source_url=final_url, content_type=content_type)

    async def _get_session(self) -> aiohttp.ClientSession:
        current_loop = asyncio.get_running_loop()
        if self._session:
            if self._session.closed or self._session_loop is not current_loop:
                await self._shutdown_session()

        if self._session_lock is None or self._session_loop is not current_loop:
            self._session_lock = asyncio.Lock()

        async with self._session_lock:
            if self._session and not self._session.closed:
                return self._session
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=self._headers.copy(),
            )
            self._session_loop = current_loop
        return self._session

    async def _shutdown_session(self) -> None:
        if self._session and not self._session.closed:
            try:
                await self._session.close()
            except Exception as exc:  # pragma: no cover - session bound to a dead loop
                logging.debug("Closing stale playlist session failed: %s", exc)
        self._session = None
        self._session_loop = None

    async def close(self) -> None:
        await self._shutdown_session()

    async def __aenter__(self) -> "PlaylistFetcher":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.close()
