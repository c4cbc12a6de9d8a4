"""Stable translation key derivation."""

from __future__ import annotations

import hashlib
import re
import unicodedata

MAX_KEY_LENGTH = 40

_WHITESPACE = re.compile(r"\s+")
_NON_KEY_CHARS = re.compile(r"[^a-z0-9]+")


def normalise_text(text: str) -> str:
    """Collapse whitespace runs and trim the text."""

    return _WHITESPACE.sub(" ", text).strip()


def stable_key(text: str, *, max_length: int = MAX_KEY_LENGTH) -> str:
    """Derive a deterministic key from a literal's text.

    The key depends only on the trimmed, whitespace-collapsed text, so the
    same literal anywhere in a project maps to the same key. Text without any
    ASCII letters or digits (for example CJK copy) falls back to a short
    content hash.
    """

    collapsed = normalise_text(text)
    folded = unicodedata.normalize("NFKD", collapsed)
    ascii_only = folded.encode("ascii", "ignore").decode("ascii").lower()
    key = _NON_KEY_CHARS.sub("_", ascii_only).strip("_")
    if len(key) > max_length:
        key = key[:max_length].rstrip("_")
    if key:
        return key
    digest = hashlib.sha1(collapsed.encode("utf-8", "surrogatepass")).hexdigest()[:10]
    return f"key_{digest}"
