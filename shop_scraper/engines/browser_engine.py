# engines/browser_engine.py
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Browser, BrowserContext, Page, Playwright, Route, async_playwright

from .session import RequestFilter, evaluate_html
from ..config import CrawlConfig
from ..errors import NavigationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PlaywrightPageSession:
    """A Playwright page used as a PageSession."""

    def __init__(self, page: Page, *, timeout: float) -> None:
        self._page = page
        self._timeout_ms = timeout * 1000
        self._filter: Optional[RequestFilter] = None

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(self, url: str) -> None:
        logger.debug("Navigating to %s", url)
        try:
            response = await self._page.goto(url, timeout=self._timeout_ms, wait_until="domcontentloaded")
        except PlaywrightError as exc:
            raise NavigationError(url, str(exc)) from exc
        if response is not None and response.status >= 400:
            raise NavigationError(url, f"HTTP {response.status}")

    async def evaluate(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            html = await self._page.content()
        except PlaywrightError as exc:
            raise NavigationError(self.url, str(exc)) from exc
        return evaluate_html(html, fn, *args)

    async def set_request_filter(self, request_filter: RequestFilter) -> None:
        self._filter = request_filter
        await self._page.route("**/*", self._route_handler)

    async def _route_handler(self, route: Route) -> None:
        if self._filter is None or self._filter.allows(route.request.resource_type):
            await route.continue_()
        else:
            await route.abort()

    async def close(self) -> None:
        await self._page.close()


class PlaywrightBrowser:
    """
    Headless Chromium via Playwright. ``async with`` launches it and closes
    it (context, browser, driver) exactly once.
    """

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._closed = False

    async def __aenter__(self) -> "PlaywrightBrowser":
        await self.launch()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def launch(self) -> None:
        cfg = self.config
        self._playwright = await async_playwright().start()
        try:
            chromium = self._playwright.chromium
            if cfg.user_data_dir:
                self._context = await chromium.launch_persistent_context(
                    cfg.user_data_dir,
                    headless=cfg.headless,
                    args=list(cfg.browser_args),
                    user_agent=cfg.user_agent,
                )
            else:
                self._browser = await chromium.launch(headless=cfg.headless, args=list(cfg.browser_args))
                self._context = await self._browser.new_context(user_agent=cfg.user_agent)
        except BaseException:
            await self.close()
            raise
        logger.debug("Chromium launched (headless=%s, user_data_dir=%s)", cfg.headless, cfg.user_data_dir)

    async def new_session(self) -> PlaywrightPageSession:
        if self._context is None:
            raise RuntimeError("browser is not launched")
        page = await self._context.new_page()
        return PlaywrightPageSession(page, timeout=self.config.navigation_timeout)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
        logger.debug("Chromium closed")
