"""Exceptions raised while fetching, resolving, and publishing playlists."""

from __future__ import annotations

from typing import Optional


class SanitizeError(Exception):
    """Base class for failures that abort a sanitize call."""

    kind = "sanitize_error"

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class FetchError(SanitizeError):
    """Raised when a playlist cannot be retrieved (transport or HTTP status)."""

    kind = "fetch_error"

    def __init__(self, url: str, cause: BaseException, status_code: Optional[int] = None) -> None:
        super().__init__(f"Failed to fetch {url}: {cause}", url=url)
        self.cause = cause
        self.status_code = status_code


class RecursionLimitExceeded(SanitizeError):
    """Raised when master playlists nest deeper than the configured limit."""

    kind = "recursion_limit_exceeded"

    def __init__(self, url: str, depth: int) -> None:
        super().__init__(f"Master playlist indirection deeper than {depth} levels at {url}", url=url)
        self.depth = depth


class VariantNotFoundError(SanitizeError):
    """Raised when a master playlist lists no variant URI."""

    kind = "variant_not_found"

    def __init__(self, url: Optional[str] = None) -> None:
        where = f" {url}" if url else ""
        super().__init__(f"Master playlist{where} does not list any variant stream", url=url)


class LoadSuperseded(SanitizeError):
    """Raised internally when a newer load replaced the one in flight."""

    kind = "superseded"


class ResourceNotFoundError(LookupError):
    """Raised when opening a handle that was never published or was revoked."""
