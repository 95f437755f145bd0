"""MCP server exposing article extraction tools."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import ExtractConfig
from .extractor import parse_url_async
from .markdown import compose_markdown
from .textfile import import_text_file

logger = logging.getLogger("article_reader.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="article-reader")


@mcp.tool()
async def extract_article(url: str, structured: bool = False) -> str:
    """Fetch a web page and return its main article as Markdown."""
    config = ExtractConfig(preserve_structure=structured)
    article = await parse_url_async(url, config)
    return compose_markdown(article)


@mcp.tool()
async def import_text(path: str) -> str:
    """Import a plain-text file and return it as Markdown."""
    source = Path(path).expanduser()
    if not source.exists():
        raise FileNotFoundError(f"Text file does not exist: {source}")
    article = await asyncio.to_thread(import_text_file, source)
    return compose_markdown(article)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
