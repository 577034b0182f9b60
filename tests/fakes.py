"""In-memory stand-ins for network collaborators used across tests."""

# pylint: disable=missing-function-docstring
from asyncio import Event
from typing import Dict, List, Optional, Tuple

from hls_sanitizer.errors import FetchError
from hls_sanitizer.models import PlaylistDocument

MPEGURL = "application/vnd.apple.mpegurl"

HEADER = "#EXTM3U\n#EXT-X-VERSION:3\n#EXT-X-TARGETDURATION:4\n"
DISCONTINUITY = "#EXT-X-DISCONTINUITY\n"
ENDLIST = "#EXT-X-ENDLIST\n"


def segments(prefix: str, count: int, duration: str = "2.000000") -> str:
    """Return ``count`` EXTINF/URI pairs named ``{prefix}{i}.ts``."""
    return "".join(f"#EXTINF:{duration},\n{prefix}{i}.ts\n" for i in range(count))


def master(*variants: str) -> str:
    lines = ["#EXTM3U"]
    for bandwidth, variant in enumerate(variants, start=1):
        lines.append(f"#EXT-X-STREAM-INF:BANDWIDTH={bandwidth * 800000}")
        lines.append(variant)
    return "\n".join(lines) + "\n"


class FakeFetcher:
    """Serves canned playlists; URLs listed in ``gates`` block until their event is set."""

    def __init__(
        self,
        pages: Dict[str, Tuple[str, str]],
        gates: Optional[Dict[str, Event]] = None,
    ) -> None:
        self.pages = pages
        self.gates = gates or {}
        self.requested: List[str] = []
        self.closed = False

    async def fetch(self, url: str) -> PlaylistDocument:
        self.requested.append(url)
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, RuntimeError("404, message='Not Found'"), status_code=404)
        text, content_type = page
        return PlaylistDocument(text=text, source_url=url, content_type=content_type)

    async def close(self) -> None:
        self.closed = True
