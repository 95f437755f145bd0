"""Utility helpers for text normalization, URL resolution and path handling."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, fallback: str = "page") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = value.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def clean_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace (non-breaking spaces included) and trim."""
    if not text:
        return ""
    return " ".join(text.split())


def resolve_url(candidate: Optional[str], base_url: str) -> Optional[str]:
    """Turn a possibly relative image/link reference into an absolute URL.

    Resolution is purely syntactic. Empty values and ``data:`` URIs are
    rejected with ``None``; anything starting with ``http`` is returned
    unchanged. Bare relative paths are anchored at the host root, not at
    the directory of ``base_url``.
    """
    if not candidate:
        return None
    candidate = candidate.strip()
    if not candidate or candidate.lower().startswith("data:"):
        return None
    if candidate.startswith("http"):
        return candidate

    base = urlparse(base_url)
    scheme = base.scheme or "https"
    if candidate.startswith("//"):
        return f"{scheme}:{candidate}"
    if candidate.startswith("/"):
        return f"{scheme}://{base.netloc}{candidate}"
    return f"{scheme}://{base.netloc}/{candidate}"
