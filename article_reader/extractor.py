"""High-level orchestration: fetch a page, extract the article and export it."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from .config import ExtractConfig
from .content import clean_soup, extract_structured_content
from .errors import (
    ArticleParseError,
    FailureReason,
    InvalidURLError,
    NetworkError,
    ParsingFailedError,
)
from .images import download_images
from .markdown import (
    blocks_to_content,
    clean_content,
    compose_markdown,
    parse_structured_content,
)
from .metadata import extract_cover_image, extract_title
from .models import Article, ExtractedArticle
from .utils import slugify

logger = logging.getLogger("article_reader")

MIN_HTML_CHARS = 100
MIN_CONTENT_CHARS = 100
MIN_SENTENCES = 2
MIN_SENTENCE_CHARS = 5

_SENTENCE_BREAK = re.compile(r"[.!?]")


@dataclass
class ProcessResult:
    """Outcome of a processed URL."""

    url: str
    article: Article
    output_path: Path
    total_seconds: float


def validate_url(url: str) -> str:
    """Return the stripped URL or raise ``InvalidURLError``."""
    url = (url or "").strip()
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise InvalidURLError(url) from exc
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError(url)
    return url


def fetch_html(
    url: str,
    config: ExtractConfig,
    session: Optional[requests.Session] = None,
) -> Tuple[int, str]:
    """Issue a single GET and return the status code and decoded body."""
    session = session or requests.Session()
    try:
        resp = session.get(
            url,
            headers={"User-Agent": config.user_agent},
            timeout=config.timeout,
        )
    except requests.RequestException as exc:
        raise NetworkError(url, exc) from exc
    return resp.status_code, resp.text


def check_response(status_code: int, body: str) -> None:
    """Reject unusable HTTP responses before any parsing happens."""
    if status_code == 404:
        raise ParsingFailedError(FailureReason.NOT_FOUND, status_code=status_code)
    if status_code == 403:
        raise ParsingFailedError(FailureReason.ACCESS_DENIED, status_code=status_code)
    if status_code >= 500:
        raise ParsingFailedError(FailureReason.SERVER_ERROR, status_code=status_code)
    if status_code != 200:
        raise ParsingFailedError(FailureReason.HTTP_ERROR, status_code=status_code)
    if not body or len(body) < MIN_HTML_CHARS:
        raise ParsingFailedError(FailureReason.EMPTY_RESPONSE)


def count_sentences(text: str) -> int:
    return sum(
        1 for part in _SENTENCE_BREAK.split(text) if len(part.strip()) > MIN_SENTENCE_CHARS
    )


def check_quality(content: str) -> None:
    """Raise ``ParsingFailedError`` when content is too short or fragmentary."""
    if len(content) < MIN_CONTENT_CHARS:
        raise ParsingFailedError(
            FailureReason.CONTENT_TOO_SHORT, detail=f"{len(content)} characters"
        )
    if count_sentences(content) < MIN_SENTENCES:
        raise ParsingFailedError(FailureReason.CONTENT_INCOMPLETE)


def _extract(html: str, base_url: str, config: ExtractConfig) -> ExtractedArticle:
    soup = BeautifulSoup(html, "html.parser")
    title = extract_title(soup)
    cover_image_url = extract_cover_image(soup, base_url)

    structured = extract_structured_content(clean_soup(soup), base_url)
    if not structured.extracted:
        raise ParsingFailedError(FailureReason.NO_CONTENT)
    check_quality(structured.text)

    if config.preserve_structure and structured.blocks:
        content = blocks_to_content(structured.blocks, structured.images)
    else:
        content = parse_structured_content(clean_content(structured.text), structured.images)

    return ExtractedArticle(
        title=title,
        cover_image_url=cover_image_url,
        content=content,
        inline_images=structured.images,
    )


def extract(
    html: str, base_url: str, config: Optional[ExtractConfig] = None
) -> ExtractedArticle:
    """Extract title, cover image and structured content from fetched HTML.

    Performs no I/O. Every failure surfaces as ``ParsingFailedError``.
    """
    config = config or ExtractConfig()
    try:
        return _extract(html, base_url, config)
    except ArticleParseError:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        raise ParsingFailedError(FailureReason.UNEXPECTED, detail=str(exc)) from exc


def parse_url(
    url: str,
    config: Optional[ExtractConfig] = None,
    session: Optional[requests.Session] = None,
) -> Article:
    """Fetch ``url`` and turn it into an :class:`Article`."""
    config = config or ExtractConfig()
    url = validate_url(url)
    logger.info("Fetching %s", url)
    status_code, html = fetch_html(url, config, session)
    check_response(status_code, html)
    extracted = extract(html, url, config)
    logger.debug(
        "Extracted %d content nodes and %d inline images from %s",
        len(extracted.content),
        len(extracted.inline_images),
        url,
    )
    return Article.from_extracted(extracted, url)


async def parse_url_async(url: str, config: Optional[ExtractConfig] = None) -> Article:
    """Run :func:`parse_url` on a worker thread."""
    return await asyncio.to_thread(parse_url, url, config)


def build_output_dir(config: ExtractConfig, article: Article) -> Path:
    """Create an output directory based on the article source and title."""
    parsed = urlparse(article.source_url or "")
    domain = slugify(parsed.netloc or "local", fallback="site")
    title_slug = slugify(article.title or parsed.path or "article", fallback="article")
    output_dir = config.output_root / domain / title_slug[:80]
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def save_article(
    article: Article,
    config: ExtractConfig,
    session: Optional[requests.Session] = None,
) -> Tuple[Path, str]:
    """Write the article as Markdown, downloading images when configured."""
    output_dir = build_output_dir(config, article)
    assets = []
    if config.download_images:
        urls = list(article.inline_images)
        if article.cover_image_url and article.cover_image_url not in urls:
            urls.insert(0, article.cover_image_url)
        assets = download_images(urls, output_dir, session=session)

    markdown = compose_markdown(article, assets)
    output_path = output_dir / "index.md"
    output_path.write_text(markdown, encoding="utf-8")
    logger.info("Saved Markdown to %s", output_path)
    return output_path, markdown


def run_extractor(
    urls: Sequence[str],
    config: ExtractConfig,
    session: Optional[requests.Session] = None,
) -> List[ProcessResult]:
    """Extract each URL in turn; failures are logged and skipped."""
    session = session or requests.Session()
    results: List[ProcessResult] = []
    for url in urls:
        start = time.perf_counter()
        try:
            article = parse_url(url, config, session)
        except ArticleParseError as exc:
            logger.error("Could not load %s: %s", url, exc)
            continue
        output_path, _ = save_article(article, config, session)
        results.append(
            ProcessResult(
                url=url,
                article=article,
                output_path=output_path,
                total_seconds=time.perf_counter() - start,
            )
        )
    return results
