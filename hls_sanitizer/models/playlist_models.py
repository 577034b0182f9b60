"""Pydantic models that describe fetched playlists and published resources."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

DEFAULT_CONTENT_TYPE = "text/plain"


class PlaylistDocument(BaseModel):
    """Playlist text together with where it came from.

    Frozen: every pipeline step derives a new document with ``with_text``.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    source_url: str
    content_type: str = DEFAULT_CONTENT_TYPE

    def with_text(self, text: str) -> "PlaylistDocument":
        return self.model_copy(update={"text": text})


class ResourceHandle(BaseModel):
    """Addressable handle for a sanitized playlist, owned by the caller."""

    model_config = ConfigDict(frozen=True)

    uri: str
    resource_id: str | None = None
    content_type: str = DEFAULT_CONTENT_TYPE
    owned: bool = True


class PublishedPlaylist(BaseModel):
    """What a live handle resolves to."""

    model_config = ConfigDict(frozen=True)

    text: str
    content_type: str = DEFAULT_CONTENT_TYPE
