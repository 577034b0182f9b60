"""Master playlist detection and variant choice."""

from __future__ import annotations

from typing import Optional

from ..errors import VariantNotFoundError

STREAM_INF_TAG = "#EXT-X-STREAM-INF"


class VariantSelector:
    """Picks the variant stream to descend into from a master playlist.

    The choice is positional: the last URI listed wins, regardless of the
    BANDWIDTH or RESOLUTION attributes on its ``#EXT-X-STREAM-INF`` tag.
    """

    def is_master(self, text: str) -> bool:
        return STREAM_INF_TAG in text

    def select_variant(self, text: str, source_url: Optional[str] = None) -> str:
        for raw_line in reversed(text.strip().splitlines()):
            line = raw_line.strip()
            if line and not line.startswith("#"):
                return line
        raise VariantNotFoundError(source_url)
