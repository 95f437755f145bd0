"""Title, cover image and source metadata parsing."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from .utils import clean_text, resolve_url

UNTITLED = "Untitled Article"

# Tried in order after the social meta tags; the first img with a src wins.
_COVER_IMAGE_SELECTORS = (
    "article img[src]",
    "main img[src]",
    "div[class*=hero i] img[src], div[class*=featured i] img[src], div[class*=main i] img[src]",
)


def extract_title(soup: BeautifulSoup) -> str:
    """Return the text of the first ``<title>`` or the untitled fallback."""
    title_tag = soup.find("title")
    if title_tag is None:
        return UNTITLED
    title = clean_text(title_tag.get_text(" "))
    return title or UNTITLED


def _meta_content(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return tag["content"].strip()
    return None


def extract_cover_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    """Pick a representative image: og:image, twitter:image, then in-article images."""
    for candidate in (
        _meta_content(soup, property="og:image"),
        _meta_content(soup, name="twitter:image"),
    ):
        resolved = resolve_url(candidate, base_url)
        if resolved:
            return resolved

    for selector in _COVER_IMAGE_SELECTORS:
        img = soup.select_one(selector)
        if img is None:
            continue
        resolved = resolve_url(img.get("src"), base_url)
        if resolved:
            return resolved
    return None


def source_name(url: str) -> Optional[str]:
    host = urlparse(url).hostname
    return host.upper() if host else None


def favicon_url(url: str) -> Optional[str]:
    host = urlparse(url).hostname
    if not host:
        return None
    return f"https://{host}/favicon.ico"
