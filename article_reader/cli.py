"""Command-line entry point for the article reader."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, List, Sequence

from .config import DEFAULT_USER_AGENT, ExtractConfig
from .errors import ArticleParseError
from .extractor import run_extractor, save_article
from .textfile import import_text_file

logger = logging.getLogger("article_reader.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("extract", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        default="output",
        type=Path,
        help="Directory where Markdown and assets should be written",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Also write the generated Markdown to STDOUT",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_extract_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("urls", nargs="+", help="One or more article URLs")
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="HTTP timeout in seconds",
    )
    parser.add_argument(
        "--user-agent",
        default=DEFAULT_USER_AGENT,
        help="User-Agent header sent with the page request",
    )
    parser.add_argument(
        "--download-images",
        action="store_true",
        help="Download the cover and inline images next to the Markdown file",
    )
    parser.add_argument(
        "--structured",
        action="store_true",
        help="Keep heading levels, list items and figure captions in the output",
    )
    _add_common_arguments(parser)


def _add_text_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Plain-text files to import",
    )
    _add_common_arguments(parser)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract readable articles from web pages or text files as Markdown.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract", help="Fetch web pages and extract their main article"
    )
    _add_extract_arguments(extract_parser)

    text_parser = subparsers.add_parser("text", help="Import plain-text files")
    _add_text_arguments(text_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _emit(markdowns: List[str]) -> None:
    for idx, markdown in enumerate(markdowns):
        if idx:
            sys.stdout.write("\n")
        sys.stdout.write(markdown if markdown.endswith("\n") else markdown + "\n")
    sys.stdout.flush()


def _run_extract(args: argparse.Namespace) -> int:
    config = ExtractConfig(
        output_root=Path(args.output).resolve(),
        timeout=args.timeout,
        user_agent=args.user_agent,
        download_images=args.download_images,
        preserve_structure=args.structured,
    )

    overall_start = time.perf_counter()
    results = run_extractor(args.urls, config)
    total_elapsed = time.perf_counter() - overall_start

    successes = len(results)
    total_urls = len(args.urls)
    logger.info(
        "Finished in %.2fs (%d/%d succeeded, %d failed)",
        total_elapsed,
        successes,
        total_urls,
        total_urls - successes,
    )
    for result in results:
        logger.debug(
            "Timing for %s -> %.2fs (%d content nodes)",
            result.url,
            result.total_seconds,
            len(result.article.content),
        )

    if args.stdout:
        _emit([result.output_path.read_text(encoding="utf-8") for result in results])
    return 0 if results else 1


def _run_text(args: argparse.Namespace) -> int:
    config = ExtractConfig(output_root=Path(args.output).resolve())
    markdowns: List[str] = []
    for path in args.paths:
        try:
            article = import_text_file(path)
        except ArticleParseError as exc:
            logger.error("Could not import %s: %s", path, exc)
            continue
        _, markdown = save_article(article, config)
        markdowns.append(markdown)

    if args.stdout:
        _emit(markdowns)
    return 0 if markdowns else 1


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "extract":
        status = _run_extract(args)
    else:
        status = _run_text(args)
    if status:
        raise SystemExit(status)


if __name__ == "__main__":
    main()
