"""Import plain-text files as articles."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import List, Union

from .errors import FailureReason, ParsingFailedError
from .models import Article, ArticleContent, Heading, Paragraph, format_date

logger = logging.getLogger("article_reader")

TEXT_SOURCE_NAME = "Text Document"
MAX_HEADING_CHARS = 100


def _is_heading(block: str) -> bool:
    return len(block) < MAX_HEADING_CHARS and (block.startswith("#") or block.upper() == block)


def parse_text(text: str) -> List[ArticleContent]:
    """Split on blank lines; short ``#``-prefixed or all-caps blocks become headings."""
    content: List[ArticleContent] = []
    for block in text.split("\n\n"):
        block = block.strip()
        if not block:
            continue
        if _is_heading(block):
            content.append(Heading(block.replace("#", "").strip(), level=2))
        else:
            content.append(Paragraph(block))
    return content


def import_text_file(path: Union[str, Path]) -> Article:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParsingFailedError(FailureReason.UNREADABLE_FILE, detail=str(exc)) from exc

    content = parse_text(text.replace("\r\n", "\n"))
    logger.debug("Imported %d blocks from %s", len(content), path)
    return Article(
        title=path.stem or TEXT_SOURCE_NAME,
        date=format_date(dt.date.today()),
        content=content,
        source_name=TEXT_SOURCE_NAME,
    )
