from __future__ import annotations


class ScrapeError(Exception):
    """Base class for every error raised by a crawl."""


class UnsupportedSiteError(ScrapeError):
    def __init__(self, url: str) -> None:
        super().__init__(f"URL '{url}' is not supported!")
        self.url = url


class NavigationError(ScrapeError):
    """A page could not be reached (network, timeout, engine or HTTP status)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"navigation to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class ExtractionError(ScrapeError):
    """A required element is missing from the loaded page."""

    def __init__(self, field: str, url: str | None = None) -> None:
        where = f" on {url}" if url else ""
        super().__init__(f"required field '{field}' not found{where}")
        self.field = field
        self.url = url
