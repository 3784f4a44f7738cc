from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..engines.base import CrawlResult


class Exporter(Protocol):
    def export(self, result: CrawlResult, start_url: str, output_dir: str) -> Path:
        """Persist the result and return the directory the artifacts were written to."""
        ...
