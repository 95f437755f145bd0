"""Exceptions raised while turning a URL or file into an article."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FailureReason(Enum):
    NOT_FOUND = "Article not found. Please check the URL and try again."
    ACCESS_DENIED = "Access denied. This website may not allow article extraction."
    SERVER_ERROR = "Server error. Please try again later."
    HTTP_ERROR = "Failed to load article."
    EMPTY_RESPONSE = "The webpage appears to be empty or too short to extract content."
    NO_CONTENT = "Unable to extract article content. This website may not be supported."
    CONTENT_TOO_SHORT = "Article content is too short. Please try a different URL."
    CONTENT_INCOMPLETE = "Article content appears incomplete. Please try a different URL."
    UNREADABLE_FILE = "The file could not be read as UTF-8 text."
    UNEXPECTED = "Failed to extract article content. Please try a different URL."


class ArticleParseError(Exception):
    """Base class for every extraction failure."""


class InvalidURLError(ArticleParseError):
    def __init__(self, url: str) -> None:
        super().__init__(
            f"Please enter a valid URL starting with http:// or https:// (got {url!r})"
        )
        self.url = url


class NetworkError(ArticleParseError):
    """Transport-level failure while fetching the page."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"Network error while fetching {url}: {cause}")
        self.url = url
        self.cause = cause


class ParsingFailedError(ArticleParseError):
    """The page was fetched but did not yield a usable article."""

    def __init__(
        self,
        reason: FailureReason,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        message = reason.value
        if status_code is not None and reason is FailureReason.HTTP_ERROR:
            message = f"Failed to load article (Error {status_code})."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code
