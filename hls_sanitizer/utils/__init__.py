"""Utility helpers for HTTP access."""

from .http_client import PlaylistFetcher

__all__ = ["PlaylistFetcher"]
