from __future__ import annotations

import logging
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from .session import PageSession
from ..adapters.base import CategoryNode, SiteExtractor
from ..errors import ExtractionError

logger = logging.getLogger(__name__)


class HierarchyWalker:
    """
    Builds the category tree from the page the cursor session is on.
    The whole tree is read from one DOM snapshot; nothing is navigated.
    """

    def __init__(self, extractor: SiteExtractor) -> None:
        self.extractor = extractor

    async def walk(self, session: PageSession, root_selector: Optional[str] = None) -> List[CategoryNode]:
        nodes = await session.evaluate(self._walk_document, root_selector)
        logger.debug("Hierarchy on %s: %s top-level categories", session.url, len(nodes))
        return nodes

    def _walk_document(self, document: BeautifulSoup, root_selector: Optional[str]) -> List[CategoryNode]:
        scope = None
        if root_selector is not None:
            scope = document.select_one(root_selector)
            if scope is None:
                raise ExtractionError("hierarchy")
        return self._walk_scope(document, scope)

    def _walk_scope(self, document: BeautifulSoup, scope: Optional[Tag]) -> List[CategoryNode]:
        nodes: List[CategoryNode] = []
        for entry in self.extractor.extract_hierarchy(document, scope):
            children = self._walk_scope(document, entry.subtree) if entry.has_children else []
            nodes.append(CategoryNode(url=entry.url, label=entry.label, children=tuple(children)))
        return nodes
