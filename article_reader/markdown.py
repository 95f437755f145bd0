"""Intermediate markup for extracted blocks and Markdown export helpers."""

from __future__ import annotations

import datetime as dt
import re
from typing import List, Optional, Sequence

from .models import (
    Article,
    ArticleContent,
    BlockType,
    ContentBlock,
    Heading,
    Image,
    ImageAsset,
    ListItem,
    Paragraph,
    Quote,
)

BULLET = "• "

_IMAGE_PLACEHOLDER = re.compile(r"\[IMAGE_(\d+)\](.*)$")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_LEADING_BYLINE = re.compile(r"^(By\s+[^\n]+\n|Published\s+[^\n]+\n|Updated\s+[^\n]+\n)", re.IGNORECASE)
_TRAILING_FURNITURE = re.compile(
    r"(Subscribe to our newsletter|Follow us on|Share this article|Related articles?).*$",
    re.IGNORECASE | re.DOTALL,
)


def _format_block(block: ContentBlock, images: Sequence[str]) -> str:
    if block.type is BlockType.HEADING:
        return f"## {block.text}"
    if block.type is BlockType.QUOTE:
        return f"> {block.text}"
    if block.type is BlockType.CAPTION:
        return f"*{block.text}*"
    if block.type is BlockType.LIST_ITEM:
        return f"{BULLET}{block.text}"
    if block.type is BlockType.IMAGE:
        if block.image_url not in images:
            return ""
        alt = f" - {block.text}" if block.text else ""
        return f"[IMAGE_{images.index(block.image_url)}]{alt}"
    return block.text


def format_blocks(blocks: Sequence[ContentBlock], images: Sequence[str]) -> str:
    """Flatten sorted blocks into blank-line separated intermediate markup.

    Images are written as ``[IMAGE_<n>]`` placeholders where ``n`` indexes
    ``images``; a non-empty alt text follows as `` - alt``.
    """
    lines = [_format_block(block, images) for block in blocks]
    text = "\n\n".join(line for line in lines if line)
    return _EXCESS_NEWLINES.sub("\n\n", text).strip()


def parse_structured_content(text: str, images: Sequence[str]) -> List[ArticleContent]:
    """Rebuild content nodes from intermediate markup.

    The mapping is lossy: every heading comes back as level 2, quotes have
    no author, captions turn into plain paragraphs and list items become
    paragraphs that keep their bullet.
    """
    content: List[ArticleContent] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        match = _IMAGE_PLACEHOLDER.search(line)
        if match:
            index = int(match.group(1))
            caption = re.sub(r"^-\s*", "", match.group(2).strip())
            if index < len(images):
                content.append(Image(url=images[index], caption=caption or None))
            continue

        if line.startswith("## "):
            content.append(Heading(line[3:], level=2))
        elif line.startswith("> "):
            content.append(Quote(line[2:]))
        elif len(line) > 1 and line.startswith("*") and line.endswith("*"):
            content.append(Paragraph(line[1:-1]))
        elif line.startswith(BULLET):
            content.append(Paragraph(BULLET + line[len(BULLET):]))
        else:
            content.append(Paragraph(line))
    return content


def blocks_to_content(
    blocks: Sequence[ContentBlock], images: Sequence[str]
) -> List[ArticleContent]:
    """Map blocks straight to content nodes without the string round-trip.

    Heading levels survive, list items stay list items and a caption that
    directly follows an image is attached to it. Quote authors are not
    extracted yet and stay ``None``.
    """
    content: List[ArticleContent] = []
    for block in blocks:
        if block.type is BlockType.HEADING:
            content.append(Heading(block.text, level=block.level or 2))
        elif block.type is BlockType.QUOTE:
            content.append(Quote(block.text))
        elif block.type is BlockType.LIST_ITEM:
            content.append(ListItem(block.text))
        elif block.type is BlockType.IMAGE:
            if block.image_url in images:
                content.append(Image(url=block.image_url, alt=block.text or None))
        elif block.type is BlockType.CAPTION:
            previous = content[-1] if content else None
            if isinstance(previous, Image) and previous.caption is None:
                content[-1] = Image(url=previous.url, caption=block.text, alt=previous.alt)
            else:
                content.append(Paragraph(block.text))
        else:
            content.append(Paragraph(block.text))
    return content


def clean_content(text: str) -> str:
    """Drop a leading byline and trailing newsletter/share furniture."""
    text = _LEADING_BYLINE.sub("", text)
    text = _TRAILING_FURNITURE.sub("", text)
    return text.strip()


def _render_node(node: ArticleContent) -> str:
    if isinstance(node, Heading):
        return f"{'#' * min(max(node.level, 1), 6)} {node.text}"
    if isinstance(node, Quote):
        quote = f"> {node.text}"
        if node.author:
            quote += f"\n>\n> — {node.author}"
        return quote
    if isinstance(node, ListItem):
        return f"- {node.text}"
    if isinstance(node, Image):
        label = node.alt or node.caption or "image"
        rendered = f"![{label}]({node.url})"
        if node.caption:
            rendered += f"\n*{node.caption}*"
        return rendered
    return node.text


def render_markdown(content: Sequence[ArticleContent]) -> str:
    """Render content nodes as a Markdown body; consecutive list items stay together."""
    parts: List[str] = []
    previous: Optional[ArticleContent] = None
    for node in content:
        rendered = _render_node(node)
        if isinstance(node, ListItem) and isinstance(previous, ListItem):
            parts[-1] = parts[-1] + "\n" + rendered
        else:
            parts.append(rendered)
        previous = node
    return "\n\n".join(parts)


def replace_image_links(markdown: str, assets: List[ImageAsset]) -> str:
    """Swap remote image URLs with downloaded asset paths."""
    if not assets:
        return markdown
    updated = markdown
    for asset in assets:
        updated = updated.replace(asset.absolute_url, asset.relative_path)
    return updated


def compose_markdown(article: Article, assets: Optional[List[ImageAsset]] = None) -> str:
    """Generate the exported Markdown document including front matter."""
    assets = assets or []
    timestamp = (
        dt.datetime.now(dt.timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )
    front_matter_lines = ["---", f"title: {article.title}"]
    if article.source_url:
        front_matter_lines.append(f"source_url: {article.source_url}")
    if article.source_name:
        front_matter_lines.append(f"source_name: {article.source_name}")
    front_matter_lines.append(f"date: {article.date}")
    front_matter_lines.append(f"retrieved_at: {timestamp}")
    front_matter_lines.append(f"reading_time_minutes: {article.estimated_reading_time_minutes}")
    if article.cover_image_url:
        front_matter_lines.append(f"cover_image: {article.cover_image_url}")
    if assets:
        image_files = [asset.relative_path for asset in assets]
        files_str = "[" + ", ".join(image_files) + "]"
        front_matter_lines.append(f"images: {files_str}")
    front_matter_lines.append("---\n")

    body = replace_image_links(render_markdown(article.content), assets)
    front_matter = replace_image_links("\n".join(front_matter_lines), assets)
    return front_matter + body.strip() + "\n"
