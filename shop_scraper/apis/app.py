from __future__ import annotations

from typing import Any, Dict, Optional
import logging

try:
    from fastapi import FastAPI, HTTPException
    from pydantic import BaseModel
except Exception as exc:  # pragma: no cover - optional dependency
    raise RuntimeError(
        "FastAPI not installed. Install with `pip install 'shop-scraper[api]'` "
        "or avoid using the API server."
    ) from exc

from ..config import CrawlConfig
from ..version import __version__
from ..engines.base import CrawlResult
from ..engines.catalogue_engine import CatalogueCrawlEngine
from ..errors import ScrapeError
from ..ui.cli import build_registry

logger = logging.getLogger(__name__)

app = FastAPI(title="shop_scraper API", version=__version__)


class ScrapeRequest(BaseModel):
    url: str
    max_concurrency: Optional[int] = None
    browser: Optional[str] = None


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/scrape")
async def scrape(req: ScrapeRequest) -> Dict[str, Any]:
    cfg = CrawlConfig.from_env()
    cfg.start_url = req.url
    if req.max_concurrency is not None:
        cfg.max_concurrency = req.max_concurrency
    if req.browser:
        cfg.browser = req.browser

    try:
        cfg.validate()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    registry = build_registry(cfg)
    if not registry.supports(cfg.start_url):
        raise HTTPException(status_code=400, detail=f"URL '{cfg.start_url}' is not supported!")

    engine = CatalogueCrawlEngine(cfg, registry=registry)
    try:
        result: CrawlResult = await engine.crawl()
    except ScrapeError as exc:
        logger.warning("Scrape of %s failed: %s", cfg.start_url, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Scrape of %s failed", cfg.start_url)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return result.to_dict()
