"""Models describing the outcome of a playlist load."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .playlist_models import ResourceHandle


class SanitizeState(str, Enum):
    """Stages a sanitize call moves through."""

    IDLE = "idle"
    FETCHING = "fetching"
    RESOLVING = "resolving"
    MASTER_RECURSING = "master_recursing"
    AD_STRIPPING = "ad_stripping"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


class LoadStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SUPERSEDED = "superseded"


class LoadError(BaseModel):
    """Structured description of why a load failed."""

    kind: str
    message: str
    url: Optional[str] = None
    status_code: Optional[int] = None


class LoadResult(BaseModel):
    """Typed result handed back to the caller of ``PlaylistSanitizer.load``."""

    status: LoadStatus
    url: str
    generation: int
    handle: Optional[ResourceHandle] = None
    error: Optional[LoadError] = None

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.OK
