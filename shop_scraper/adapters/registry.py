from __future__ import annotations

import logging
from typing import List
from importlib import metadata

from .base import SiteExtractor
from .demo_shop import DemoShopExtractor
from ..errors import UnsupportedSiteError

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """
    Registry for available site extractors.
    Supports built-ins, config-defined dotted classes, and entry-point plugins.
    """
    def __init__(self) -> None:
        self._extractors: List[SiteExtractor] = [DemoShopExtractor()]

    # ---- Introspection / Management ----

    def register(self, extractor: SiteExtractor) -> None:
        self._extractors.append(extractor)

    @property
    def extractors(self) -> List[SiteExtractor]:
        return list(self._extractors)

    def supports(self, url: str) -> bool:
        return any(e.matches(url) for e in self._extractors)

    def match(self, url: str) -> SiteExtractor:
        # Later registrations override built-ins for the same host.
        for extractor in reversed(self._extractors):
            if extractor.matches(url):
                return extractor
        raise UnsupportedSiteError(url)

    # ---- Discovery ----

    def discover_entry_points(self, group: str = "shop_scraper.extractors") -> int:
        """
        Discover third-party extractors installed as entry points.
        Returns count of newly registered extractors.
        """
        added = 0
        for ep in metadata.entry_points().select(group=group):
            try:
                extractor_cls = ep.load()
                self.register(extractor_cls())
            except Exception as exc:
                # Plugins are optional; a broken one must not take down the crawl.
                logger.warning("Failed to load extractor plugin %s: %r", ep.name, exc)
                continue
            added += 1
        return added
