from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List

from ..config import CrawlConfig
from ..utils.logging import setup_logging
from ..utils.loader import load_symbol
from ..adapters.registry import ExtractorRegistry
from ..engines.base import CrawlResult
from ..export.base import Exporter
from ..engines.catalogue_engine import CatalogueCrawlEngine
from ..errors import UnsupportedSiteError

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="scrape", description="Scrape a shop's category hierarchy and product details")
    p.add_argument("url", nargs="?", default=None, help="Catalogue start URL, e.g. https://demo-shop.natek.eu")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--max-concurrency", type=int, default=None,
                   help="Max concurrently open page sessions (default from config)")
    p.add_argument("--timeout", type=float, default=None, help="Navigation timeout in seconds")
    p.add_argument("--browser", type=str, default=None, help="Browser backend dotted path (module:ClassName)")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--extra-extractors", type=str, default=None,
                   help="Comma-separated dotted paths for additional site extractors")
    p.add_argument("--output-dir", type=str, default=None, help="Directory the <host>/ artifact folder goes in")
    p.add_argument("--headful", action="store_true", help="Show the browser window")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run REST API server instead of CLI crawl")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig.from_env()

    if args.url:
        cfg.start_url = args.url
    if args.max_concurrency is not None:
        cfg.max_concurrency = args.max_concurrency
    if args.timeout is not None:
        cfg.navigation_timeout = args.timeout
    if args.browser:
        cfg.browser = args.browser
    if args.exporter:
        cfg.exporter = args.exporter
    if args.extra_extractors:
        cfg.extra_extractors = [e.strip() for e in args.extra_extractors.split(",") if e.strip()]
    if args.output_dir:
        cfg.output_dir = args.output_dir
    if args.headful:
        cfg.headless = False

    cfg.validate()
    return cfg


def build_registry(cfg: CrawlConfig) -> ExtractorRegistry:
    registry = ExtractorRegistry()
    registry.discover_entry_points()
    # Allow runtime registration of additional extractors
    for dotted in cfg.extra_extractors:
        try:
            extractor_cls = load_symbol(dotted)
            registry.register(extractor_cls())
        except Exception as exc:
            logger.warning("Failed to load extractor %s: %r", dotted, exc)
    return registry


def run_server(host: str, port: int) -> None:
    try:
        import uvicorn  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dep
        raise SystemExit("To run the API, install dependencies: pip install 'shop-scraper[api]'") from exc
    uvicorn.run("shop_scraper.apis.app:app", host=host, port=port)


def run_cli(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    if not args.url and not args.config:
        parser.print_usage(sys.stderr)
        return 1

    try:
        cfg = _load_config(args)
    except (OSError, ValueError, TypeError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    registry = build_registry(cfg)
    if not registry.supports(cfg.start_url):
        logger.error("%s", UnsupportedSiteError(cfg.start_url))
        return 1

    async def _run() -> CrawlResult:
        engine = CatalogueCrawlEngine(cfg, registry=registry)
        return await engine.crawl()

    try:
        result: CrawlResult = asyncio.run(_run())
        exporter: Exporter = load_symbol(cfg.exporter)()
        target = exporter.export(result, cfg.start_url, cfg.output_dir)
    except Exception:
        logger.exception("Scrape of %s failed", cfg.start_url)
        return 1

    logger.info("Categories: %s | Products: %s | Output: %s",
                len(result.hierarchy), len(result.products), target)
    return 0
