from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
from urllib.parse import urlparse
import os
import json

from .version import __version__, CONFIG_SCHEMA_VERSION


DEFAULT_BROWSER = "shop_scraper.engines.browser_engine:PlaywrightBrowser"
DEFAULT_EXPORTER = "shop_scraper.export.json_exporter:JSONExporter"


@dataclass
class CrawlConfig:
    """
    Canonical configuration object passed throughout the system.
    Keep it dataclass-only (no heavy deps) to stay upgrade-friendly.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    start_url: str = ""
    # Upper bound on concurrently open page sessions (cursor included).
    max_concurrency: int = 5
    navigation_timeout: float = 30.0
    headless: bool = True
    user_data_dir: Optional[str] = None
    browser_args: List[str] = field(default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"])
    # Resource types a page may load; everything else is aborted.
    allowed_resource_types: List[str] = field(default_factory=lambda: ["document"])
    user_agent: str = f"shop_scraper/{__version__}"
    # Dotted paths for browser backend/exporter to allow runtime swapping without code changes.
    browser: str = DEFAULT_BROWSER
    exporter: str = DEFAULT_EXPORTER
    # Extra site extractors (dotted class paths) to register at startup
    extra_extractors: List[str] = field(default_factory=list)
    # Artifacts land in <output_dir>/<host>/
    output_dir: str = "."

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """
        Build config from environment variables (all optional).
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        def _list(name: str, default: str = "") -> List[str]:
            return [v.strip() for v in _get(name, default).split(",") if v.strip()]

        return cls(
            start_url=_get("SCRAPER_START_URL", "").strip(),
            max_concurrency=int(_get("SCRAPER_MAX_CONCURRENCY", "5")),
            navigation_timeout=float(_get("SCRAPER_NAVIGATION_TIMEOUT", "30.0")),
            headless=_get("SCRAPER_HEADLESS", "1").lower() not in ("0", "false", "no"),
            user_data_dir=_get("SCRAPER_USER_DATA_DIR", "") or None,
            browser_args=_list("SCRAPER_BROWSER_ARGS", "--no-sandbox,--disable-setuid-sandbox"),
            allowed_resource_types=_list("SCRAPER_ALLOWED_RESOURCE_TYPES", "document"),
            user_agent=_get("SCRAPER_USER_AGENT", f"shop_scraper/{__version__}"),
            browser=_get("SCRAPER_BROWSER", DEFAULT_BROWSER),
            exporter=_get("SCRAPER_EXPORTER", DEFAULT_EXPORTER),
            extra_extractors=_list("SCRAPER_EXTRA_EXTRACTORS"),
            output_dir=_get("SCRAPER_OUTPUT_DIR", "."),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Supports schema migration for older versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.start_url:
            raise ValueError("start_url cannot be empty; provide the catalogue URL.")
        if urlparse(self.start_url).scheme not in ("http", "https"):
            raise ValueError(f"start_url must be an http(s) URL, got {self.start_url!r}")
        if self.max_concurrency <= 0:
            raise ValueError("max_concurrency must be > 0")
        if self.navigation_timeout <= 0:
            raise ValueError("navigation_timeout must be > 0")
        if not self.allowed_resource_types:
            raise ValueError("allowed_resource_types cannot be empty; pages need at least 'document'.")


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    schema = raw.get("schema_version", 1)

    if schema < 2:
        # v1 crawled several start URLs; a catalogue crawl has exactly one.
        start_urls = raw.pop("start_urls", None) or []
        if start_urls and not raw.get("start_url"):
            raw["start_url"] = start_urls[0]
        for dropped in ("allowed_domains", "max_depth", "retries", "request_timeout", "engine",
                        "extra_adapters", "output_path"):
            raw.pop(dropped, None)
        raw["schema_version"] = 2

    # Ensure a schema_version is present
    raw.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    return raw
