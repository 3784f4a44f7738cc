from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List
from abc import ABC, abstractmethod

from ..adapters.base import CategoryNode, ProductDetail


class CrawlStage(str, Enum):
    START = "start"
    HIERARCHY_FETCHED = "hierarchy_fetched"
    LISTING_COLLECTED = "listing_collected"
    DETAILS_HARVESTED = "details_harvested"
    AGGREGATED = "aggregated"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CrawlResult:
    hierarchy: List[CategoryNode] = field(default_factory=list)  # top-level categories, source order
    products: List[ProductDetail] = field(default_factory=list)  # order unspecified

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hierarchy": [node.to_dict() for node in self.hierarchy],
            "products": [product.to_dict() for product in self.products],
        }


class CrawlEngine(ABC):
    """
    Abstract engine interface. Implementations own the crawl lifecycle.
    """
    @abstractmethod
    async def crawl(self) -> CrawlResult:  # pragma: no cover - interface
        ...
