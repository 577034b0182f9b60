"""Fetch HLS playlists, strip spliced-in ad blocks, and republish them."""

__version__ = "0.1.0"
