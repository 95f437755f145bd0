"""HTML cleaning, block segmentation and main-content selection."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Comment, Tag

from .markdown import format_blocks
from .models import BlockType, ContentBlock
from .utils import clean_text, resolve_url

logger = logging.getLogger("article_reader")

NO_CONTENT = "Content could not be extracted"

BOILERPLATE_TAGS = ["script", "style", "nav", "header", "footer", "aside", "form", "iframe"]
BOILERPLATE_CLASS_KEYWORDS = (
    "ad",
    "advertisement",
    "ads",
    "promo",
    "social",
    "share",
    "sidebar",
    "menu",
    "navigation",
    "related",
    "recommended",
    "newsletter",
    "subscribe",
)

_BROAD = ("content", "article", "post", "entry", "story")


def _class_contains(tag: str, keywords: Tuple[str, ...], attr: str = "class") -> str:
    return ", ".join(f"{tag}[{attr}*={keyword} i]" for keyword in keywords)


# Candidate containers, highest priority first.
CONTAINER_SELECTORS = (
    "article",
    "main",
    _class_contains(
        "div", ("post-content", "article-content", "entry-content", "story-body", "article-body")
    ),
    _class_contains("div", _BROAD),
    _class_contains("section", _BROAD),
    _class_contains("div", _BROAD, attr="id"),
    _class_contains("div", ("article-text", "story-text", "post-body", "entry-body")),
    'div[data-module="ArticleBody"]',
)

MIN_CONTAINER_BLOCKS = 3
MIN_FORMATTED_CHARS = 300

MIN_HEADING_CHARS = 5
MIN_PARAGRAPH_CHARS = 30
MIN_QUOTE_CHARS = 20
MIN_LIST_ITEM_CHARS = 15
MIN_FIGCAPTION_CHARS = 10
MAX_CAPTION_CHARS = 150
MIN_ICON_DIMENSION = 100

MIN_FALLBACK_PARAGRAPH_CHARS = 40
MIN_FALLBACK_WORDS = 8
MIN_FALLBACK_PARAGRAPHS = 3
MAX_FALLBACK_PARAGRAPHS = 15

CAPTION_PREFIX = re.compile(
    r"^(photo|image|picture|caption|credit|getty|reuters|ap|afp):", re.IGNORECASE
)
BOILERPLATE_PHRASE = re.compile(
    r"^(advertisement|ad|subscribe|follow|share|click|read more|continue reading|"
    r"related articles|tags:|categories:|posted by|published|updated|copyright|"
    r"all rights reserved)$",
    re.IGNORECASE,
)
NUMERIC_ONLY = re.compile(r"^[\d\s/:-]+$")
_PIXELS = re.compile(r"\s*(\d+)\s*(?:px)?\s*", re.IGNORECASE)

_HEADINGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_TEXT_TAGS = _HEADINGS | {"p", "blockquote", "li"}


@dataclass
class StructuredContent:
    """Intermediate markup for the main content plus the images it references."""

    text: str
    images: List[str] = field(default_factory=list)
    blocks: List[ContentBlock] = field(default_factory=list)
    from_fallback: bool = False
    extracted: bool = True


def clean_soup(soup: Union[BeautifulSoup, Tag]) -> Union[BeautifulSoup, Tag]:
    """Remove page chrome, ads and comments in place."""
    for tag in soup(BOILERPLATE_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    for div in soup.find_all("div"):
        if div.decomposed:
            continue
        classes = " ".join(div.get("class") or []).lower()
        if any(keyword in classes for keyword in BOILERPLATE_CLASS_KEYWORDS):
            div.decompose()
    return soup


def strip_boilerplate(html: str) -> str:
    """Return ``html`` without scripts, navigation, ads and similar furniture."""
    soup = BeautifulSoup(html, "html.parser")
    return str(clean_soup(soup))


def is_caption_text(text: str) -> bool:
    return len(text) < MAX_CAPTION_CHARS and bool(CAPTION_PREFIX.match(text))


def _dimension(value: Optional[str]) -> Optional[int]:
    """Pixel size of a ``width``/``height`` attribute; percentages and keywords are unknown."""
    if value is None:
        return None
    match = _PIXELS.fullmatch(str(value))
    return int(match.group(1)) if match else None


def _is_icon(img: Tag) -> bool:
    for attr in ("width", "height"):
        size = _dimension(img.get(attr))
        if size is not None and size <= MIN_ICON_DIMENSION:
            return True
    return False


def _iter_content_elements(root: Tag) -> Iterator[Tag]:
    """Yield content-bearing elements in document (pre-order) order.

    Text elements swallow nested text elements, so a ``p`` inside a
    ``blockquote`` is not reported twice. Images below a text element are
    still reported after it. A ``figure`` owns its image and caption.
    """
    stack = [child for child in reversed(root.contents) if isinstance(child, Tag)]
    while stack:
        element = stack.pop()
        name = element.name.lower()
        if name in _TEXT_TAGS:
            yield element
            for nested in element.find_all(["img", "figure"]):
                if nested.name == "img" and nested.find_parent("figure") is not None:
                    continue
                yield nested
        elif name in ("figure", "img"):
            yield element
        else:
            stack.extend(child for child in reversed(element.contents) if isinstance(child, Tag))


def _classify(
    element: Tag, position: int, base_url: str, images: List[str]
) -> List[ContentBlock]:
    name = element.name.lower()

    if name in _HEADINGS:
        text = clean_text(element.get_text(" "))
        if len(text) > MIN_HEADING_CHARS:
            return [ContentBlock(BlockType.HEADING, text, position, level=int(name[1]))]
        return []

    if name == "p":
        text = clean_text(element.get_text(" "))
        if len(text) <= MIN_PARAGRAPH_CHARS:
            return []
        block_type = BlockType.CAPTION if is_caption_text(text) else BlockType.PARAGRAPH
        return [ContentBlock(block_type, text, position)]

    if name == "blockquote":
        text = clean_text(element.get_text(" "))
        if len(text) > MIN_QUOTE_CHARS:
            return [ContentBlock(BlockType.QUOTE, text, position)]
        return []

    if name == "li":
        text = clean_text(element.get_text(" "))
        if len(text) > MIN_LIST_ITEM_CHARS:
            return [ContentBlock(BlockType.LIST_ITEM, text, position)]
        return []

    if name == "figure":
        img = element.find("img", src=True)
        if img is None:
            return []
        url = resolve_url(img.get("src"), base_url)
        if not url:
            return []
        images.append(url)
        blocks = [ContentBlock(BlockType.IMAGE, "", position, image_url=url)]
        figcaption = element.find("figcaption")
        if figcaption is not None:
            caption = clean_text(figcaption.get_text(" "))
            if len(caption) > MIN_FIGCAPTION_CHARS:
                blocks.append(ContentBlock(BlockType.CAPTION, caption, position + 0.1))
        return blocks

    if name == "img":
        if _is_icon(element):
            return []
        url = resolve_url(element.get("src"), base_url)
        if not url:
            return []
        images.append(url)
        alt = clean_text(element.get("alt"))
        return [ContentBlock(BlockType.IMAGE, alt, position, image_url=url)]

    return []


def segment_blocks(
    fragment: Union[str, Tag], base_url: str
) -> Tuple[List[ContentBlock], List[str]]:
    """Split one container into ordered content blocks.

    Returns the blocks sorted by position and the resolved image URLs in the
    order they were first met.
    """
    if isinstance(fragment, str):
        fragment = clean_soup(BeautifulSoup(fragment, "html.parser"))

    blocks: List[ContentBlock] = []
    images: List[str] = []
    for position, element in enumerate(_iter_content_elements(fragment)):
        blocks.extend(_classify(element, position, base_url, images))

    blocks.sort(key=lambda block: block.position)
    return blocks, images


def _iter_candidates(soup: BeautifulSoup) -> Iterator[Tuple[int, Tag]]:
    for tier, selector in enumerate(CONTAINER_SELECTORS, start=1):
        for candidate in soup.select(selector):
            yield tier, candidate


def is_valid_paragraph(text: str) -> bool:
    if BOILERPLATE_PHRASE.match(text) or NUMERIC_ONLY.match(text):
        return False
    return len(text.split()) >= MIN_FALLBACK_WORDS


def fallback_paragraphs(soup: Union[BeautifulSoup, Tag]) -> List[str]:
    """Collect usable ``<p>`` texts, ignoring container structure."""
    paragraphs: List[str] = []
    for p in soup.find_all("p"):
        text = clean_text(p.get_text(" "))
        if len(text) <= MIN_FALLBACK_PARAGRAPH_CHARS or not is_valid_paragraph(text):
            continue
        paragraphs.append(f"*{text}*" if is_caption_text(text) else text)
    return paragraphs


def extract_structured_content(soup: BeautifulSoup, base_url: str) -> StructuredContent:
    """Locate the main content of a cleaned document and serialize it.

    Containers are tried in priority order; the first one with at least
    three blocks and more than 300 characters of markup wins. Otherwise a
    flat scan of every paragraph is used.
    """
    for tier, candidate in _iter_candidates(soup):
        blocks, images = segment_blocks(candidate, base_url)
        if len(blocks) < MIN_CONTAINER_BLOCKS:
            continue
        formatted = format_blocks(blocks, images)
        if len(formatted) > MIN_FORMATTED_CHARS:
            logger.debug(
                "Selected <%s> container from tier %d with %d blocks",
                candidate.name,
                tier,
                len(blocks),
            )
            return StructuredContent(text=formatted, images=images, blocks=blocks)

    paragraphs = fallback_paragraphs(soup)
    if len(paragraphs) >= MIN_FALLBACK_PARAGRAPHS:
        logger.debug("No container accepted; using %d fallback paragraphs", len(paragraphs))
        return StructuredContent(
            text="\n\n".join(paragraphs[:MAX_FALLBACK_PARAGRAPHS]),
            from_fallback=True,
        )

    logger.debug("No container or paragraph fallback produced usable content")
    return StructuredContent(text=NO_CONTENT, extracted=False)
