from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag


@dataclass(frozen=True)
class CategoryNode:
    """One category of the hierarchy tree; immutable once the walk has built it."""

    url: str
    label: str
    children: Tuple["CategoryNode", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "label": self.label,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class CategoryEntry:
    """Raw hierarchy entry as read from the page; ``subtree`` is the nested list, if any."""

    url: str
    label: str
    subtree: Optional[Tag] = None

    @property
    def has_children(self) -> bool:
        return self.subtree is not None


@dataclass
class ListingPage:
    product_urls: List[str]
    next_page_url: Optional[str] = None


@dataclass(frozen=True)
class ProductRef:
    url: str
    listing_url: str


@dataclass
class CollectionItem:
    url: str
    price: str

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "price": self.price}


@dataclass
class ProductOptions:
    """Selectable product options. ``None`` marks a group the page does not have."""

    collection: Optional[Dict[str, CollectionItem]] = None
    color: Optional[List[str]] = None
    size: Optional[List[str]] = None
    logo: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.collection is not None:
            data["collection"] = {name: item.to_dict() for name, item in self.collection.items()}
        for name in ("color", "size", "logo"):
            values = getattr(self, name)
            if values is not None:
                data[name] = list(values)
        return data


@dataclass
class ProductDetail:
    """Structured extraction of one product detail page."""

    url: str
    image_url: str
    title: str
    price: str
    sku: str
    category: str
    description: str
    related_skus: List[str] = field(default_factory=list)
    attributes: Dict[str, str] = field(default_factory=dict)
    options: ProductOptions = field(default_factory=ProductOptions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "imageUrl": self.image_url,
            "title": self.title,
            "price": self.price,
            "sku": self.sku,
            "category": self.category,
            "description": self.description,
            "relatedSkus": list(self.related_skus),
            "attributes": dict(self.attributes),
            "options": self.options.to_dict(),
        }


class SiteExtractor(Protocol):
    """
    Interface for site-specific extraction rules.
    Every method reads the page currently loaded in a session (``document``)
    and never navigates; the engine owns navigation, pooling and concurrency.
    """

    name: str
    domains: List[str]  # e.g. ["example.com", "www.example.com"]
    hierarchy_selector: str

    def matches(self, url: str) -> bool:
        """Return True if this extractor should handle the given URL."""
        ...

    def extract_hierarchy(self, document: BeautifulSoup, scope: Optional[Tag] = None) -> List[CategoryEntry]:
        """
        Entries of one category list in source order. ``scope`` is a nested list
        from a previous entry's ``subtree``; None means the top-level list.
        """
        ...

    def extract_listing_page(self, document: BeautifulSoup) -> ListingPage:
        ...

    def extract_detail(self, document: BeautifulSoup, url: str) -> ProductDetail:
        """Raise ExtractionError for a missing required field; optional groups may be absent."""
        ...


def domain_of(url: str) -> str:
    return urlparse(url).netloc
