from __future__ import annotations

from enum import Enum

from review_summarizer.scraper.types import NavigationState


class ScrapeErrorKind(str, Enum):
    NAVIGATION_FAILED = "navigation_failed"
    REVIEWS_NOT_FOUND = "reviews_not_found"
    TIMEOUT = "timeout"
    DRIVER_FAILURE = "driver_failure"


class ScrapeError(Exception):
    """Failed scrape operation. Never retried inside the scraper."""

    kind: ScrapeErrorKind

    def __init__(self, kind: ScrapeErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class NavigationFailed(ScrapeError):
    def __init__(self, message: str, last_state: NavigationState) -> None:
        super().__init__(ScrapeErrorKind.NAVIGATION_FAILED, message)
        self.last_state = last_state


class ReviewsNotFound(ScrapeError):
    def __init__(self, message: str = "No review elements matched any known card pattern.") -> None:
        super().__init__(ScrapeErrorKind.REVIEWS_NOT_FOUND, message)


class ScrapeTimeout(ScrapeError):
    def __init__(self, message: str = "Time budget exceeded before review collection started.") -> None:
        super().__init__(ScrapeErrorKind.TIMEOUT, message)


class DriverFailure(ScrapeError):
    def __init__(self, message: str) -> None:
        super().__init__(ScrapeErrorKind.DRIVER_FAILURE, message)
