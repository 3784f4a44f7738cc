from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List

from .session import SessionPool
from ..adapters.base import ProductDetail, SiteExtractor

logger = logging.getLogger(__name__)


class DetailHarvester:
    """
    Extracts one detail record per product URL, each on its own pooled
    session. Concurrency is bounded by the pool alone.
    """

    def __init__(self, extractor: SiteExtractor) -> None:
        self.extractor = extractor

    async def harvest_one(self, pool: SessionPool, url: str) -> ProductDetail:
        async with pool.session() as session:
            await session.navigate(url)
            return await session.evaluate(self.extractor.extract_detail, url)

    async def harvest_all(self, pool: SessionPool, urls: Iterable[str]) -> List[ProductDetail]:
        """
        Harvest every URL concurrently. The first failure fails the whole
        harvest; siblings already running are left to finish on their own.
        """
        tasks = [self.harvest_one(pool, url) for url in urls]
        logger.debug("Harvesting %s product pages (max %s sessions)", len(tasks), pool.max_sessions)
        return list(await asyncio.gather(*tasks))
