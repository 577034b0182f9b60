"""Runtime settings shared by the fetcher, sanitizer, and HTTP service."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .. import __version__

DEFAULT_USER_AGENT = f"hls-sanitizer/{__version__}"
DEFAULT_PUBLIC_BASE_URL = "memory://hls-sanitizer/playlists"


class SanitizerSettings(BaseModel):
    """Validated configuration assembled by the CLI from flags and env vars."""

    timeout: float = Field(default=10.0, gt=0)
    max_depth: int = Field(default=5, ge=0)
    user_agent: str = DEFAULT_USER_AGENT
    public_base_url: str = DEFAULT_PUBLIC_BASE_URL
    host: str = "127.0.0.1"
    port: int = Field(default=8765, ge=0, le=65535)
