"""Structural detection and removal of ad blocks spliced into media playlists.

Ad insertion services splice fixed-shape ``#EXT-X-DISCONTINUITY`` brackets
into the stream, or reuse one creative whose segment durations never change.
Each :class:`AdSignature` recognises one such shape and removes every span it
matches. :class:`AdPatternMatcher` applies them in a fixed order, each one
seeing the text left behind by the previous ones.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence, Tuple

DISCONTINUITY_TAG = "#EXT-X-DISCONTINUITY"
DISCONTINUITY_LINE = DISCONTINUITY_TAG + "\n"
BRACKET_MIN_LINES = 18
BRACKET_MAX_LINES = 24

FINGERPRINT_DURATIONS: Tuple[str, ...] = (
    "3.92", "0.76", "2.00", "2.50", "2.00", "2.42", "2.00", "0.78", "1.96",
    "2.00", "1.76", "3.20", "2.00", "1.36", "2.00", "2.00", "0.72",
)


class AdSignature:
    """A stateless recogniser for one kind of ad span."""

    def __init__(self, name: str) -> None:
        self.name = name

    def matches(self, text: str) -> bool:
        raise NotImplementedError

    def remove(self, text: str) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class RegexSignature(AdSignature):
    """Signature backed by a compiled pattern; removal replaces every match."""

    def __init__(self, name: str, pattern: re.Pattern[str]) -> None:
        super().__init__(name)
        self.pattern = pattern

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None

    def remove(self, text: str) -> str:
        return self.pattern.sub("", text)


class ExtremityBracketSignature(AdSignature):
    """A single bracket opened by the first marker and closed by the last one.

    Only pre-roll or post-roll blocks fit: nothing may look like a
    discontinuity marker before the opening line or after the closing line,
    and between them there must be ``min_lines`` to ``max_lines`` lines.
    """

    def __init__(self, name: str, min_lines: int = BRACKET_MIN_LINES, max_lines: int = BRACKET_MAX_LINES) -> None:
        super().__init__(name)
        self.min_lines = min_lines
        self.max_lines = max_lines

    def span(self, text: str) -> Optional[Tuple[int, int]]:
        first = text.find(DISCONTINUITY_TAG)
        last = text.rfind(DISCONTINUITY_TAG)
        if first < 0 or first == last:
            return None
        if not (text.startswith(DISCONTINUITY_LINE, first) and text.startswith(DISCONTINUITY_LINE, last)):
            return None

        body = text[first + len(DISCONTINUITY_LINE):last]
        if body and not body.endswith("\n"):
            return None
        if not self.min_lines <= body.count("\n") <= self.max_lines:
            return None
        return first, last + len(DISCONTINUITY_LINE)

    def matches(self, text: str) -> bool:
        return self.span(text) is not None

    def remove(self, text: str) -> str:
        found = self.span(text)
        if found is None:
            return text
        start, end = found
        return text[:start] + text[end:]


def _duration_pattern(value: str) -> str:
    whole, _, fraction = value.partition(".")
    fraction = fraction.rstrip("0")
    if fraction:
        return rf"{whole}\.{fraction}0*"
    return rf"{whole}(?:\.0*)?"


def _fingerprint_pattern(durations: Sequence[str]) -> re.Pattern[str]:
    entries = [rf"#EXTINF:{_duration_pattern(value)},\n.*\n" for value in durations]
    # The final reference line may close the playlist without a newline.
    entries[-1] = entries[-1][: -len(r"\n")] + r"\n?"
    return re.compile(re.escape(DISCONTINUITY_LINE) + "".join(entries))


KEY_RESET_BRACKET = re.compile(
    rf"{DISCONTINUITY_TAG}\n"
    rf"(?:#EXT-X-KEY:METHOD=NONE\n(?:.*\n){{{BRACKET_MIN_LINES},{BRACKET_MAX_LINES}}})?"
    rf"{DISCONTINUITY_TAG}\n"
    # Also strips the fragment out of legitimate URLs that happen to contain it.
    r"|convertv7/"
)

AD_SIGNATURES: Tuple[AdSignature, ...] = (
    ExtremityBracketSignature("isolated-discontinuity-bracket"),
    RegexSignature("key-reset-bracket", KEY_RESET_BRACKET),
    RegexSignature("duration-fingerprint", _fingerprint_pattern(FINGERPRINT_DURATIONS)),
)


class AdPatternMatcher:
    """Applies the ordered ad signatures until the playlist stops changing."""

    def __init__(self, signatures: Iterable[AdSignature] = AD_SIGNATURES) -> None:
        self.signatures: Tuple[AdSignature, ...] = tuple(signatures)

    def has_ads(self, text: str) -> bool:
        return any(signature.matches(text) for signature in self.signatures)

    def strip(self, text: str) -> str:
        result = text
        while self.has_ads(result):
            reduced = self._reduce(result)
            if reduced == result:
                break
            result = reduced

        if result != text:
            logging.info(
                "Removed ad blocks from playlist (%s -> %s lines)",
                text.count("\n") + 1,
                result.count("\n") + 1,
            )
        return result

    def _reduce(self, text: str) -> str:
        for signature in self.signatures:
            if signature.matches(text):
                logging.debug("Ad signature %s matched", signature.name)
                text = signature.remove(text)
        return text


def strip(text: str) -> str:
    """Strip ads from ``text`` with the default signatures."""

    return AdPatternMatcher().strip(text)
