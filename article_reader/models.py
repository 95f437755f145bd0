"""Data models used throughout the extraction pipeline."""

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .metadata import favicon_url, source_name

WORDS_PER_MINUTE = 250
MAX_TITLE_CHARS = 150


class BlockType(Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    QUOTE = "quote"
    CAPTION = "caption"
    LIST_ITEM = "list_item"
    IMAGE = "image"


@dataclass(frozen=True)
class ContentBlock:
    """One classified unit of article content.

    ``position`` is the discovery order inside the container being scanned.
    A figure caption sits at ``position + 0.1`` so that it sorts right after
    its image.
    """

    type: BlockType
    text: str
    position: float
    image_url: Optional[str] = None
    level: int = 0


@dataclass(frozen=True)
class Heading:
    text: str
    level: int = 2


@dataclass(frozen=True)
class Paragraph:
    text: str


@dataclass(frozen=True)
class Image:
    url: str
    caption: Optional[str] = None
    alt: Optional[str] = None


@dataclass(frozen=True)
class Quote:
    text: str
    author: Optional[str] = None


@dataclass(frozen=True)
class ListItem:
    text: str


ArticleContent = Union[Heading, Paragraph, Image, Quote, ListItem]


@dataclass
class ExtractedArticle:
    """Result of a successful extraction, before it becomes an Article."""

    title: str
    cover_image_url: Optional[str]
    content: List[ArticleContent]
    inline_images: List[str]


@dataclass
class ImageAsset:
    """Downloaded and validated image asset stored on disk."""

    absolute_url: str
    filename: str
    relative_path: str


def estimate_reading_time(content: List[ArticleContent]) -> int:
    """Minutes needed to read the text nodes at 250 words per minute."""
    words = 0
    for node in content:
        if isinstance(node, (Heading, Paragraph, Quote, ListItem)):
            words += len(node.text.split())
    return max(1, words // WORDS_PER_MINUTE)


def format_date(moment: dt.date) -> str:
    return f"{moment.strftime('%b')} {moment.day}, {moment.year}"


@dataclass
class Article:
    """A saved article as handed to the persistence and rendering layers."""

    title: str
    date: str
    content: List[ArticleContent]
    cover_image_url: Optional[str] = None
    inline_images: List[str] = field(default_factory=list)
    source_url: Optional[str] = None
    source_name: Optional[str] = None
    source_logo_url: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    is_favorite: bool = False
    reading_progress: float = 0.0
    estimated_reading_time_minutes: int = field(init=False, default=1)

    def __post_init__(self) -> None:
        self.estimated_reading_time_minutes = estimate_reading_time(self.content)

    @classmethod
    def from_extracted(cls, extracted: ExtractedArticle, url: str) -> "Article":
        return cls(
            title=extracted.title[:MAX_TITLE_CHARS],
            date=format_date(dt.date.today()),
            content=list(extracted.content),
            cover_image_url=extracted.cover_image_url,
            inline_images=list(extracted.inline_images),
            source_url=url,
            source_name=source_name(url),
            source_logo_url=favicon_url(url),
        )
