"""Rewrites relative segment and variant references to absolute URLs."""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

URI_LINE = re.compile(r"^[^#\r\n][^\r\n]*", re.MULTILINE)


def resolve_line(line: str, base_url: str) -> str:
    """Return ``line`` joined onto ``base_url``, or ``line`` itself if it cannot be joined."""

    reference = line.strip()
    if not reference:
        return line
    try:
        return urljoin(base_url, reference)
    except ValueError as exc:
        logging.debug("Leaving malformed playlist reference %r unchanged: %s", line, exc)
        return line


def resolve(text: str, base_url: str) -> str:
    """Make every URI line of ``text`` absolute; tags and blank lines are untouched."""

    return URI_LINE.sub(lambda match: resolve_line(match.group(0), base_url), text)


class UriResolver:
    """Object wrapper around :func:`resolve` for injection into the sanitizer."""

    def resolve(self, text: str, base_url: str) -> str:
        return resolve(text, base_url)
