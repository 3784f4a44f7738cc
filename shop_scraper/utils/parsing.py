from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..errors import ExtractionError


def normalize_url(url: str) -> str:
    """
    Normalize URL by removing fragments, resolving dot segments, etc.
    """
    parts = list(urlparse(url))
    if parts[1] and not parts[2]:
        parts[2] = "/"  # "https://host" and "https://host/" are the same page
    parts[5] = ""  # strip fragment
    # Optionally we could normalize query params here.
    return urlunparse(parts)


def resolve_url(base_url: str, href: str) -> str:
    return normalize_url(urljoin(base_url, href))


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def text_of(node: Optional[Tag]) -> Optional[str]:
    """Rendered text of a node with whitespace collapsed, or None when empty/missing."""
    if node is None:
        return None
    text = " ".join(node.get_text(" ", strip=True).split())
    return text or None


def select_text(scope: Tag, selector: str) -> Optional[str]:
    return text_of(scope.select_one(selector))


def select_attr(scope: Tag, selector: str, attr: str) -> Optional[str]:
    node = scope.select_one(selector)
    if node is None:
        return None
    value = node.get(attr)
    if isinstance(value, list):
        value = " ".join(value)
    return value or None


def require(value: Optional[str], field: str, url: Optional[str] = None) -> str:
    """Return a required field value or raise ExtractionError when it is missing."""
    if value is None:
        raise ExtractionError(field, url)
    return value
