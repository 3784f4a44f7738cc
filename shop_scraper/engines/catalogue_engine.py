from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .base import CrawlEngine, CrawlResult, CrawlStage
from .details import DetailHarvester
from .hierarchy import HierarchyWalker
from .listing import ListingPaginator
from .session import BrowserHandle, RequestFilter, SessionPool
from ..adapters.registry import ExtractorRegistry
from ..config import CrawlConfig
from ..utils.loader import load_symbol

logger = logging.getLogger(__name__)

BrowserFactory = Callable[[CrawlConfig], Any]


class CatalogueCrawlEngine(CrawlEngine):
    """
    Hierarchy -> pagination -> concurrent detail harvest -> result.
    - Engine owns the browser lifetime, the cursor session and the pool.
    - Extractors own page parsing.
    - Any error aborts the crawl and is re-raised as is; no partial result.
    """
    def __init__(
        self,
        config: CrawlConfig,
        registry: ExtractorRegistry | None = None,
        browser_factory: Optional[BrowserFactory] = None,
    ) -> None:
        self.config = config
        self.registry = registry or ExtractorRegistry()
        self.browser_factory = browser_factory
        self.stage = CrawlStage.START

    def _advance(self, stage: CrawlStage) -> None:
        logger.info("Crawl stage: %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    async def crawl(self) -> CrawlResult:
        cfg = self.config
        self.stage = CrawlStage.START
        try:
            return await self._crawl(cfg)
        except BaseException:
            logger.info("Crawl stage: %s -> %s", self.stage.value, CrawlStage.FAILED.value)
            self.stage = CrawlStage.FAILED
            raise

    async def _crawl(self, cfg: CrawlConfig) -> CrawlResult:
        extractor = self.registry.match(cfg.start_url)
        factory = self.browser_factory or load_symbol(cfg.browser)
        request_filter = RequestFilter(frozenset(cfg.allowed_resource_types))

        browser: BrowserHandle
        async with factory(cfg) as browser:
            pool = SessionPool(browser, max_sessions=cfg.max_concurrency, request_filter=request_filter)
            try:
                # Single-owner cursor: hierarchy and pagination share its navigation state.
                async with pool.session() as cursor:
                    await cursor.navigate(cfg.start_url)

                    hierarchy = await HierarchyWalker(extractor).walk(cursor)
                    self._advance(CrawlStage.HIERARCHY_FETCHED)

                    paginator = ListingPaginator(extractor)
                    refs = await paginator.collect_all_product_urls(cursor, cfg.start_url)
                    logger.info("Collected %s unique product URLs from %s listing pages",
                                len(refs), paginator.pages_visited)
                    self._advance(CrawlStage.LISTING_COLLECTED)

                products = await DetailHarvester(extractor).harvest_all(pool, refs.keys())
                self._advance(CrawlStage.DETAILS_HARVESTED)
            finally:
                await pool.close()

            result = CrawlResult(hierarchy=hierarchy, products=products)
            self._advance(CrawlStage.AGGREGATED)

        self._advance(CrawlStage.DONE)
        return result
