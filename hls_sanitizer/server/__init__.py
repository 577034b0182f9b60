"""HTTP surface for loading and serving sanitized playlists."""

from .app import create_app, run_server

__all__ = ["create_app", "run_server"]
