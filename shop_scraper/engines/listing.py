from __future__ import annotations

import logging
from typing import Dict, Set

from .session import PageSession
from ..adapters.base import ProductRef, SiteExtractor
from ..utils.parsing import normalize_url, resolve_url

logger = logging.getLogger(__name__)


class ListingPaginator:
    """
    Follows "next page" links on the cursor session and collects every
    product URL once. The loop ends when a page has no next link, or when
    the next link points at a page that was already visited.
    """

    def __init__(self, extractor: SiteExtractor) -> None:
        self.extractor = extractor
        self.pages_visited = 0

    async def collect_all_product_urls(self, session: PageSession, start_url: str) -> Dict[str, ProductRef]:
        refs: Dict[str, ProductRef] = {}
        visited: Set[str] = {normalize_url(start_url)}
        self.pages_visited = 0

        while True:
            page_url = session.url
            visited.add(normalize_url(page_url))
            listing = await session.evaluate(self.extractor.extract_listing_page)
            self.pages_visited += 1

            for href in listing.product_urls:
                url = resolve_url(page_url, href)
                refs.setdefault(url, ProductRef(url=url, listing_url=page_url))
            logger.debug("Listing page %s (%s): %s products, %s unique so far",
                         self.pages_visited, page_url, len(listing.product_urls), len(refs))

            if not listing.next_page_url:
                break
            next_url = resolve_url(page_url, listing.next_page_url)
            if next_url in visited:
                logger.warning("Next page %s was already visited; stopping pagination at %s",
                               next_url, page_url)
                break
            await session.navigate(next_url)

        return refs
