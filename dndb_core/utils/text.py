"""Text normalization helpers for record identifiers and descriptions."""

import html
import re

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_KEY_RE = re.compile(r"[^a-z-]")


def strip_html(text: str) -> str:
    """Remove markup and collapse whitespace in a description."""
    if not text:
        return ""
    cleaned = _TAG_RE.sub(" ", text)
    cleaned = html.unescape(cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def normalize_name(name: str) -> str:
    """Lowercase a display name and treat underscores/hyphens as spaces."""
    if not name:
        return ""
    return _WHITESPACE_RE.sub(" ", name.lower().replace("_", " ").replace("-", " ")).strip()


def normalize_key(subtype: str) -> str:
    """Reduce a hyphenated identifier to lowercase letters and hyphens."""
    return _NON_KEY_RE.sub("", (subtype or "").lower())


def title_from_key(key: str) -> str:
    """Build a display name from a hyphenated identifier: deep-speech -> Deep Speech."""
    return " ".join(part.capitalize() for part in key.split("-") if part)
