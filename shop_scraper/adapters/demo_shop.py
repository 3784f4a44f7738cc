from __future__ import annotations

from typing import Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from .base import (
    CategoryEntry,
    CollectionItem,
    ListingPage,
    ProductDetail,
    ProductOptions,
    domain_of,
)
from ..errors import ExtractionError
from ..utils.parsing import require, select_attr, select_text, text_of


class DemoShopExtractor:
    """Extraction rules for the WooCommerce demo shop at demo-shop.natek.eu."""

    name = "demo-shop"
    domains = ["demo-shop.natek.eu"]
    hierarchy_selector = "ul.product-categories"

    def matches(self, url: str) -> bool:
        return domain_of(url).lower() in self.domains

    # ---- Hierarchy ----------------------------------------------------------

    def extract_hierarchy(self, document: BeautifulSoup, scope: Optional[Tag] = None) -> List[CategoryEntry]:
        if scope is None:
            scope = document.select_one(self.hierarchy_selector)
            if scope is None:
                raise ExtractionError("hierarchy")

        entries: List[CategoryEntry] = []
        for item in scope.find_all("li", recursive=False):
            anchor = item.find("a")
            if anchor is None:
                raise ExtractionError("hierarchy.url")
            subtree = None
            if "cat-parent" in (item.get("class") or []):
                subtree = item.select_one("ul.children")
            entries.append(
                CategoryEntry(
                    url=require(anchor.get("href"), "hierarchy.url"),
                    label=text_of(anchor) or "",
                    subtree=subtree,
                )
            )
        return entries

    # ---- Listing ------------------------------------------------------------

    def extract_listing_page(self, document: BeautifulSoup) -> ListingPage:
        products = document.select_one("ul.products")
        if products is None:
            raise ExtractionError("listing.products")

        urls: List[str] = []
        for item in products.find_all("li", recursive=False):
            href = select_attr(item, "a", "href")
            if href:
                urls.append(href)

        return ListingPage(
            product_urls=urls,
            next_page_url=select_attr(document, "ul.page-numbers a.next", "href"),
        )

    # ---- Detail -------------------------------------------------------------

    def extract_detail(self, document: BeautifulSoup, url: str) -> ProductDetail:
        price = self._sale_price(document) or require(select_text(document, "p.price"), "price", url)
        return ProductDetail(
            url=url,
            image_url=require(select_attr(document, ".product figure a", "href"), "imageUrl", url),
            title=require(select_text(document, ".product_title"), "title", url),
            price=price,
            sku=require(select_text(document, ".product_meta .sku"), "sku", url),
            category=require(select_text(document, ".product_meta .posted_in a"), "category", url),
            description=require(
                select_text(document, ".woocommerce-Tabs-panel--description p"), "description", url
            ),
            related_skus=self._related_skus(document) or [],
            attributes=self._attributes(document) or {},
            options=ProductOptions(
                collection=self._collection(document),
                color=self._select_values(document, "pa_color"),
                size=self._select_values(document, "pa_size"),
                logo=self._select_values(document, "logo"),
            ),
        )

    # Each optional step returns None when its section is missing from the page.

    def _sale_price(self, document: BeautifulSoup) -> Optional[str]:
        return select_text(document, "p.price ins span.amount bdi")

    def _related_skus(self, document: BeautifulSoup) -> Optional[List[str]]:
        related = document.select_one("section.related ul.products")
        if related is None:
            return None
        skus = [button.get("data-product_sku") for button in related.select(".add_to_cart_button")]
        return [sku for sku in skus if sku]

    def _attributes(self, document: BeautifulSoup) -> Optional[Dict[str, str]]:
        rows = document.select("tr.woocommerce-product-attributes-item")
        if not rows:
            return None
        attributes: Dict[str, str] = {}
        for row in rows:
            name = select_text(row, "th")
            value = select_text(row, "td p") or select_text(row, "td")
            if name and value is not None:
                attributes[name] = value
        return attributes

    def _collection(self, document: BeautifulSoup) -> Optional[Dict[str, CollectionItem]]:
        rows = document.select("tr.woocommerce-grouped-product-list-item")
        if not rows:
            return None
        collection: Dict[str, CollectionItem] = {}
        for row in rows:
            anchor = row.select_one(".woocommerce-grouped-product-list-item__label label a")
            name = text_of(anchor)
            if anchor is None or not name:
                continue
            # Reduced price wins over the regular one.
            price = (
                select_text(row, ".woocommerce-grouped-product-list-item__price ins")
                or select_text(row, ".woocommerce-grouped-product-list-item__price")
                or ""
            )
            collection[name] = CollectionItem(url=anchor.get("href") or "", price=price)
        return collection

    def _select_values(self, document: BeautifulSoup, element_id: str) -> Optional[List[str]]:
        select = document.find(id=element_id)
        if select is None:
            return None
        values = [option.get("value") or "" for option in select.find_all("option")]
        return [value for value in values if value]
