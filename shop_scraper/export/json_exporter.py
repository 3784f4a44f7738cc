from __future__ import annotations

import json
import logging
from typing import Any
from pathlib import Path
from urllib.parse import urlparse

from ..engines.base import CrawlResult

logger = logging.getLogger(__name__)

HIERARCHY_FILE = "hierarchy.json"
PRODUCTS_FILE = "products.json"


class JSONExporter:
    """Writes <output_dir>/<host>/hierarchy.json and products.json."""

    def export(self, result: CrawlResult, start_url: str, output_dir: str) -> Path:
        target = Path(output_dir) / urlparse(start_url).hostname
        target.mkdir(parents=True, exist_ok=True)
        data = result.to_dict()
        self._write(target / HIERARCHY_FILE, data["hierarchy"])
        self._write(target / PRODUCTS_FILE, data["products"])
        logger.debug("Wrote %s and %s to %s", HIERARCHY_FILE, PRODUCTS_FILE, target)
        return target

    def _write(self, path: Path, payload: Any) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
