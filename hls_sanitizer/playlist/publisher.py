"""In-memory registry that turns sanitized text into addressable playlist URIs."""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Union

from ..errors import ResourceNotFoundError
from ..models import PublishedPlaylist, ResourceHandle
from ..models.playlist_models import DEFAULT_CONTENT_TYPE
from ..models.settings_models import DEFAULT_PUBLIC_BASE_URL

PLAYLIST_SUFFIX = ".m3u8"


class PlaylistPublisher:
    """Publishes playlists under ``{base_url}/{id}.m3u8`` until they are revoked."""

    def __init__(self, base_url: str = DEFAULT_PUBLIC_BASE_URL) -> None:
        self.base_url = base_url.rstrip("/")
        self._resources: Dict[str, PublishedPlaylist] = {}

    def publish(self, text: str, content_type: str = DEFAULT_CONTENT_TYPE) -> ResourceHandle:
        resource_id = uuid.uuid4().hex
        self._resources[resource_id] = PublishedPlaylist(text=text, content_type=content_type)
        handle = ResourceHandle(
            uri=f"{self.base_url}/{resource_id}{PLAYLIST_SUFFIX}",
            resource_id=resource_id,
            content_type=content_type,
        )
        logging.debug("Published playlist %s (%s)", handle.uri, content_type)
        return handle

    def revoke(self, handle: ResourceHandle) -> bool:
        """Release a published playlist; unknown, repeated, or pass-through handles return False."""

        if not handle.owned or handle.resource_id is None:
            return False
        removed = self._resources.pop(handle.resource_id, None)
        if removed is None:
            return False
        logging.debug("Revoked playlist %s", handle.uri)
        return True

    def open(self, target: Union[ResourceHandle, str]) -> PublishedPlaylist:
        """Look up a live playlist by handle, URI, or resource id."""

        resource_id = self._resource_id(target)
        try:
            return self._resources[resource_id]
        except KeyError:
            raise ResourceNotFoundError(f"No published playlist for {target!r}") from None

    def _resource_id(self, target: Union[ResourceHandle, str]) -> str:
        if isinstance(target, ResourceHandle):
            return target.resource_id or ""
        resource_id = target.rsplit("/", 1)[-1]
        if resource_id.endswith(PLAYLIST_SUFFIX):
            resource_id = resource_id[: -len(PLAYLIST_SUFFIX)]
        return resource_id

    def __contains__(self, target: object) -> bool:
        if not isinstance(target, (ResourceHandle, str)):
            return False
        return self._resource_id(target) in self._resources

    def __len__(self) -> int:
        return len(self._resources)
