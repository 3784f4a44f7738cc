from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from aiohttp import ClientSession

from .session import RequestFilter, evaluate_html
from ..config import CrawlConfig
from ..errors import NavigationError
from ..utils.http import create_session, fetch_text

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HttpPageSession:
    """
    PageSession backed by plain HTTP: the document is fetched and parsed,
    no scripts run and no sub-resources are requested.
    """

    def __init__(self, client: ClientSession, config: CrawlConfig) -> None:
        self._client = client
        self._config = config
        self._filter: Optional[RequestFilter] = None
        self._url = "about:blank"
        self._html = ""

    @property
    def url(self) -> str:
        return self._url

    async def navigate(self, url: str) -> None:
        if self._filter is not None and not self._filter.allows("document"):
            raise NavigationError(url, "document requests are blocked by the request filter")
        logger.debug("Fetching %s", url)
        self._url, self._html = await fetch_text(
            self._client,
            url,
            timeout=self._config.navigation_timeout,
            user_agent=self._config.user_agent,
        )

    async def evaluate(self, fn: Callable[..., T], *args: Any) -> T:
        return evaluate_html(self._html, fn, *args)

    async def set_request_filter(self, request_filter: RequestFilter) -> None:
        self._filter = request_filter

    async def close(self) -> None:
        self._html = ""


class HttpBrowser:
    """Browser backend over one shared aiohttp ClientSession."""

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config
        self._client: Optional[ClientSession] = None

    async def __aenter__(self) -> "HttpBrowser":
        self._client = create_session()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.close()

    async def new_session(self) -> HttpPageSession:
        if self._client is None:
            raise RuntimeError("HTTP browser is not open")
        return HttpPageSession(self._client, self.config)
