"""Image downloading and validation utilities."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse

import requests
from filetype import guess

from .models import ImageAsset
from .utils import slugify

logger = logging.getLogger("article_reader")

MAX_IMAGE_BYTES = 10 * 1024 * 1024
MIN_IMAGE_BYTES = 512
ALLOWED_IMAGE_TYPES = {"png", "jpg", "jpeg", "gif", "webp", "bmp", "tiff"}


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def infer_image_extension(content_type: Optional[str], data: bytes) -> Optional[str]:
    """Guess an image file extension from HTTP metadata or file signature."""
    detected = detect_image_format(data)
    if detected:
        return detected
    if not content_type:
        return None
    parts = content_type.split(";")[0].split("/")
    if len(parts) == 2 and parts[0] == "image":
        ext = parts[1].strip().lower()
        if ext == "jpeg":
            ext = "jpg"
        return ext
    return None


def _url_stem(url: str) -> str:
    return slugify(PurePosixPath(urlparse(url).path).stem, fallback="image")


def download_images(
    urls: Sequence[str],
    output_dir: Path,
    session: Optional[requests.Session] = None,
) -> List[ImageAsset]:
    """Download article images and persist them next to the Markdown file."""
    if not urls:
        return []
    image_dir = output_dir / "images"
    image_dir.mkdir(parents=True, exist_ok=True)

    session = session or requests.Session()
    downloaded: Dict[str, ImageAsset] = {}
    assets: List[ImageAsset] = []

    for index, url in enumerate(urls, start=1):
        if url in downloaded:
            continue
        try:
            resp = session.get(url, timeout=15)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Failed to fetch image %s: %s", url, exc)
            continue

        content_type = resp.headers.get("Content-Type", "")
        data = resp.content
        if len(data) < MIN_IMAGE_BYTES:
            logger.warning("Skipping %s: response too small", url)
            continue
        if len(data) > MAX_IMAGE_BYTES:
            logger.warning("Skipping %s: image larger than %s bytes", url, MAX_IMAGE_BYTES)
            continue

        extension = infer_image_extension(content_type, data)
        if not extension or extension.lower() not in ALLOWED_IMAGE_TYPES:
            logger.warning(
                "Skipping %s: unsupported image type (Content-Type=%s)",
                url,
                content_type,
            )
            continue

        filename = f"image-{index:02d}-{_url_stem(url)}"[:80] + f".{extension}"
        destination = image_dir / filename

        try:
            destination.write_bytes(data)
        except OSError as exc:
            logger.warning("Failed to write image %s: %s", destination, exc)
            continue

        asset = ImageAsset(
            absolute_url=url,
            filename=filename,
            relative_path=str(Path("images") / filename),
        )
        downloaded[url] = asset
        assets.append(asset)
    return assets
