"""Configuration objects and constants for fetching and exporting articles."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36"
)


@dataclass
class ExtractConfig:
    """Top-level settings that control fetching, extraction and export."""

    output_root: Path = Path("output")
    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    download_images: bool = False
    preserve_structure: bool = False
