"""Orchestrates fetch, resolve, master recursion, ad stripping, and publishing."""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import LoadSuperseded, RecursionLimitExceeded, SanitizeError
from ..models import LoadError, LoadResult, LoadStatus, PlaylistDocument, ResourceHandle, SanitizeState
from ..utils.http_client import PlaylistFetcher
from .ad_matcher import AdPatternMatcher
from .publisher import PlaylistPublisher
from .uri_resolver import UriResolver
from .variant_selector import VariantSelector

DEFAULT_MAX_DEPTH = 5
PLAYLIST_MARKER = ".m3u8"


def _load_error(exc: SanitizeError) -> LoadError:
    return LoadError(
        kind=exc.kind,
        message=str(exc),
        url=exc.url,
        status_code=getattr(exc, "status_code", None),
    )


class PlaylistSanitizer:
    """Turns a playlist URL into a published, ad-free playlist handle.

    ``sanitize`` is the bare pipeline and raises :class:`SanitizeError`
    subclasses. ``load`` is what a player calls: every call supersedes the
    previous one, only the newest call may publish, and the handle it installs
    replaces (and revokes) the one before it.
    """

    def __init__(
        self,
        fetcher: PlaylistFetcher,
        publisher: Optional[PlaylistPublisher] = None,
        resolver: Optional[UriResolver] = None,
        selector: Optional[VariantSelector] = None,
        matcher: Optional[AdPatternMatcher] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.max_depth = max_depth
        self.publisher = publisher or PlaylistPublisher()
        self._fetcher = fetcher
        self._resolver = resolver or UriResolver()
        self._selector = selector or VariantSelector()
        self._matcher = matcher or AdPatternMatcher()

        self.state = SanitizeState.IDLE
        self._generation = 0
        self._active_handle: Optional[ResourceHandle] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def active_handle(self) -> Optional[ResourceHandle]:
        return self._active_handle

    async def sanitize(self, url: str, depth: int = 0) -> ResourceHandle:
        """Run the full pipeline for ``url`` and publish the result."""

        try:
            document = await self._prepare(url, depth, None)
        except SanitizeError:
            self._set_state(SanitizeState.FAILED, None)
            raise
        self._set_state(SanitizeState.PUBLISHING, None)
        handle = self.publisher.publish(document.text, document.content_type)
        self._set_state(SanitizeState.DONE, None)
        return handle

    async def load(self, url: str) -> LoadResult:
        """Sanitize ``url`` on behalf of a player and install the resulting handle."""

        self._generation += 1
        generation = self._generation

        if not url:
            self._set_state(SanitizeState.FAILED, generation)
            logging.error("Cannot load playlist: no source URL given")
            return LoadResult(
                status=LoadStatus.FAILED,
                url=url,
                generation=generation,
                error=LoadError(kind="invalid_url", message="No source URL given"),
            )

        if PLAYLIST_MARKER not in url:
            logging.info("Source %s is not an HLS playlist; passing it through", url)
            handle = ResourceHandle(uri=url, owned=False)
            self._install(handle)
            self._set_state(SanitizeState.DONE, generation)
            return LoadResult(status=LoadStatus.OK, url=url, generation=generation, handle=handle)

        try:
            document = await self._prepare(url, 0, generation)
            self._ensure_current(generation, url)
        except LoadSuperseded:
            return self._superseded(url, generation)
        except SanitizeError as exc:
            if generation != self._generation:
                return self._superseded(url, generation)
            self._set_state(SanitizeState.FAILED, generation)
            logging.error("Failed to load playlist %s: %s", url, exc)
            return LoadResult(status=LoadStatus.FAILED, url=url, generation=generation, error=_load_error(exc))

        self._set_state(SanitizeState.PUBLISHING, generation)
        handle = self.publisher.publish(document.text, document.content_type)
        self._install(handle)
        self._set_state(SanitizeState.DONE, generation)
        logging.info("Playlist %s ready at %s", url, handle.uri)
        return LoadResult(status=LoadStatus.OK, url=url, generation=generation, handle=handle)

    def release(self) -> bool:
        """Revoke the active handle and invalidate any load still in flight."""

        self._generation += 1
        handle, self._active_handle = self._active_handle, None
        self.state = SanitizeState.IDLE
        if handle is None:
            return False
        return self.publisher.revoke(handle)

    async def close(self) -> None:
        self.release()
        await self._fetcher.close()

    async def _prepare(self, url: str, depth: int, generation: Optional[int]) -> PlaylistDocument:
        self._set_state(SanitizeState.FETCHING, generation)
        logging.debug("Fetching playlist %s (depth %s)", url, depth)
        document = await self._fetcher.fetch(url)
        self._ensure_current(generation, url)

        self._set_state(SanitizeState.RESOLVING, generation)
        document = document.with_text(self._resolver.resolve(document.text, document.source_url))

        if self._selector.is_master(document.text):
            self._set_state(SanitizeState.MASTER_RECURSING, generation)
            if depth >= self.max_depth:
                raise RecursionLimitExceeded(url, self.max_depth)
            variant_url = self._selector.select_variant(document.text, document.source_url)
            logging.info("Master playlist %s -> variant %s", url, variant_url)
            return await self._prepare(variant_url, depth + 1, generation)

        self._set_state(SanitizeState.AD_STRIPPING, generation)
        return document.with_text(self._matcher.strip(document.text))

    def _install(self, handle: ResourceHandle) -> None:
        previous, self._active_handle = self._active_handle, handle
        if previous is not None and previous != handle:
            self.publisher.revoke(previous)

    def _ensure_current(self, generation: Optional[int], url: str) -> None:
        if generation is not None and generation != self._generation:
            raise LoadSuperseded(f"Load of {url} was superseded", url=url)

    def _superseded(self, url: str, generation: int) -> LoadResult:
        logging.debug("Discarding superseded load of %s (generation %s)", url, generation)
        return LoadResult(status=LoadStatus.SUPERSEDED, url=url, generation=generation)

    def _set_state(self, state: SanitizeState, generation: Optional[int]) -> None:
        if generation is not None and generation != self._generation:
            return
        if state is not self.state:
            logging.debug("Sanitizer state %s -> %s", self.state.value, state.value)
        self.state = state
