"""Data models for playlists, published resources, load results, and settings."""

from .playlist_models import PlaylistDocument, PublishedPlaylist, ResourceHandle
from .result_models import LoadError, LoadResult, LoadStatus, SanitizeState
from .settings_models import SanitizerSettings

__all__ = [
    "PlaylistDocument",
    "PublishedPlaylist",
    "ResourceHandle",
    "LoadError",
    "LoadResult",
    "LoadStatus",
    "SanitizeState",
    "SanitizerSettings",
]
