"""Playlist sanitization pipeline: resolve, select, strip, publish."""

from .ad_matcher import AD_SIGNATURES, AdPatternMatcher, AdSignature
from .publisher import PlaylistPublisher
from .sanitizer import PlaylistSanitizer
from .uri_resolver import UriResolver
from .variant_selector import VariantSelector

__all__ = [
    "AD_SIGNATURES",
    "AdPatternMatcher",
    "AdSignature",
    "PlaylistPublisher",
    "PlaylistSanitizer",
    "UriResolver",
    "VariantSelector",
]
