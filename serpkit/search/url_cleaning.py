"""
Tracking-link unwrapping and URL normalization.

Engines that route outbound clicks through their own domain get a cleaner
here. Every cleaner returns non-tracking URLs untouched, so cleaning is
idempotent.
"""

from __future__ import annotations

import base64
import binascii
from urllib.parse import parse_qsl, urljoin, urlsplit, urlunsplit

from serpkit.utils.logging import get_logger

logger = get_logger(__name__)

BING_TRACKING_PREFIX = "https://www.bing.com/ck/a?"
GOOGLE_TRACKING_PREFIX = "/url?q="
GOOGLE_ORIGIN = "https://www.google.com"


def _first_query_value(url: str, key: str) -> str:
    for name, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if name == key:
            return value
    return ""


def clean_bing_url(url: str) -> str:
    """Decode Bing's /ck/a click-tracking link to its destination.

    The destination sits in the ``u`` parameter as URL-safe base64 behind a
    two-character prefix (``a1``). Undecodable payloads yield ``""``.
    """
    if not url.startswith(BING_TRACKING_PREFIX):
        return url

    encoded = _first_query_value(url, "u")[2:]
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        decoded = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        logger.debug("Bing tracking URL decode failed", encoded=encoded[:50], error=str(e))
        return ""

    return decoded.decode("utf-8", errors="replace")


def clean_google_url(url: str) -> str:
    """Unwrap Google's relative ``/url?q=`` redirect link."""
    if not url.startswith(GOOGLE_TRACKING_PREFIX):
        return url
    return _first_query_value(urljoin(GOOGLE_ORIGIN, url), "q")


def normalize_url(url: str) -> str:
    """Normalize an extracted href.

    Strips surrounding whitespace, gives protocol-relative URLs an https
    scheme, lowercases scheme and host and drops an empty trailing fragment.
    Already-normal URLs come back unchanged.
    """
    url = url.strip()
    if not url:
        return ""

    if url.startswith("//"):
        url = "https:" + url

    try:
        parts = urlsplit(url)
    except ValueError:
        logger.debug("Unparsable URL left as-is", url=url)
        return url

    if not parts.scheme or not parts.netloc:
        return url

    # userinfo is case-sensitive, only host and port are lowercased
    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = userinfo + at + hostport.lower()

    return urlunsplit((parts.scheme.lower(), netloc, parts.path, parts.query, parts.fragment))
