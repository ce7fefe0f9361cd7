"""Deterministic, storage-safe keys derived from video URLs."""

from __future__ import annotations

import base64
import hashlib
import re
from urllib.parse import urlsplit

from vhs.core.constants import (
    FINGERPRINT_LENGTH,
    INVALID_VIDEO_KEY,
    MAX_KEY_PREFIX_CHARS,
    UNKNOWN_VIDEO_KEY,
    VIDEO_KEY_PREFIX,
)

_NON_KEY_CHARS = re.compile(r"[^A-Za-z0-9_]")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def fingerprint(locator: str) -> str:
    """Short alphanumeric fingerprint of the whole locator.

    SHA-256 of the UTF-8 locator, base64 encoded, truncated. Host and query
    take part, so two URLs sharing a path still get different fingerprints.
    Raises UnicodeEncodeError for strings that are not encodable.
    """
    digest = hashlib.sha256(locator.encode("utf-8")).digest()
    encoded = base64.urlsafe_b64encode(digest).decode("ascii")
    return _NON_ALNUM.sub("", encoded)[:FINGERPRINT_LENGTH]


def _path_prefix(locator: str) -> str | None:
    """Last two path segments joined with '_', or None if not an absolute URL."""
    try:
        parts = urlsplit(locator)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    segments = [s for s in parts.path.split("/") if s]
    prefix = "_".join(segments[-2:])
    return _NON_KEY_CHARS.sub("", prefix)[:MAX_KEY_PREFIX_CHARS]


def derive_video_key(locator: str | None) -> str:
    """Map a video URL to its durable-tier key.

    Same URL, same key, across processes. Empty input maps to the
    ``rag_unknown`` sentinel, unencodable input to ``rag_invalid``.

    The fingerprint is a SHA-256 digest, not the web client's base64 of the
    raw URL, so these keys do not match entries a server stored under the
    web client's keys (e.g. for ``/analyze_result`` lookups).
    """
    if not locator:
        return UNKNOWN_VIDEO_KEY

    try:
        fp = fingerprint(locator)
    except UnicodeEncodeError:
        return INVALID_VIDEO_KEY

    prefix = _path_prefix(locator)
    if prefix:
        return f"{VIDEO_KEY_PREFIX}{prefix}_{fp}"
    return f"{VIDEO_KEY_PREFIX}{fp}"
