import asyncio
from collections import Counter

import pytest

from shop_scraper.config import CrawlConfig
from shop_scraper.engines.base import CrawlStage
from shop_scraper.engines.catalogue_engine import CatalogueCrawlEngine
from shop_scraper.errors import ExtractionError, NavigationError, UnsupportedSiteError

from tests.fakes import SHOP, FakeBrowser, build_shop, listing_page, product_page, product_url


def _engine(browser, **overrides):
    cfg = CrawlConfig(start_url=SHOP, **overrides)
    return CatalogueCrawlEngine(cfg, browser_factory=browser.factory)


@pytest.mark.asyncio
async def test_full_crawl_harvests_each_unique_product_once(browser):
    engine = _engine(browser)

    result = await engine.crawl()

    expected = {product_url(s) for s in ("beanie", "belt", "cap", "hoodie", "album", "single")}
    assert {p.url for p in result.products} == expected
    assert len(result.products) == 6
    product_visits = Counter(url for url in browser.navigations if "/product/" in url)
    assert set(product_visits) == expected
    assert set(product_visits.values()) == {1}
    assert [node.label for node in result.hierarchy] == ["Clothing", "Decor"]
    assert engine.stage is CrawlStage.DONE


@pytest.mark.asyncio
async def test_every_session_and_the_browser_are_released(browser):
    await _engine(browser).crawl()

    assert browser.enter_calls == 1 and browser.exit_calls == 1
    assert browser.open_sessions == 0
    assert all(s.close_calls == 1 for s in browser.sessions)


@pytest.mark.asyncio
async def test_concurrency_is_bounded_by_config():
    pages = build_shop([[f"item-{i}" for i in range(12)]])
    browser = FakeBrowser(pages, delay=0.01)

    result = await _engine(browser, max_concurrency=4).crawl()

    assert len(result.products) == 12
    assert browser.peak_sessions == 4


@pytest.mark.asyncio
async def test_single_session_pool_does_not_deadlock(shop_pages):
    browser = FakeBrowser(shop_pages)

    result = await asyncio.wait_for(_engine(browser, max_concurrency=1).crawl(), timeout=5)

    assert len(result.products) == 6
    assert browser.peak_sessions == 1


@pytest.mark.asyncio
async def test_missing_title_fails_the_whole_crawl():
    pages = build_shop([["beanie", "belt", "cap"]])
    pages[product_url("belt")] = product_page("belt", title=None)
    browser = FakeBrowser(pages)
    engine = _engine(browser)

    with pytest.raises(ExtractionError) as excinfo:
        await engine.crawl()
    await asyncio.sleep(0.01)  # let in-flight siblings settle

    assert excinfo.value.field == "title"
    assert engine.stage is CrawlStage.FAILED
    assert browser.exit_calls == 1
    assert all(s.close_calls == 1 for s in browser.sessions)


@pytest.mark.asyncio
async def test_navigation_error_keeps_its_cause():
    browser = FakeBrowser({SHOP: listing_page(["ghost"])})
    engine = _engine(browser)

    with pytest.raises(NavigationError) as excinfo:
        await engine.crawl()

    assert excinfo.value.url == product_url("ghost")
    assert browser.exit_calls == 1


@pytest.mark.asyncio
async def test_unreachable_start_page_releases_browser():
    browser = FakeBrowser({})

    with pytest.raises(NavigationError):
        await _engine(browser).crawl()

    assert browser.exit_calls == 1
    assert browser.sessions[0].close_calls == 1


@pytest.mark.asyncio
async def test_unsupported_site_never_launches_a_browser():
    browser = FakeBrowser({})
    engine = CatalogueCrawlEngine(CrawlConfig(start_url="https://example.com"), browser_factory=browser.factory)

    with pytest.raises(UnsupportedSiteError):
        await engine.crawl()

    assert browser.enter_calls == 0


@pytest.mark.asyncio
async def test_browser_backend_loaded_from_dotted_path():
    cfg = CrawlConfig(start_url=SHOP, browser="tests.fakes:DemoShopBrowser")

    result = await CatalogueCrawlEngine(cfg).crawl()

    assert {p.sku for p in result.products} == {"woo-beanie", "woo-belt", "woo-cap"}


@pytest.mark.asyncio
async def test_failed_product_leaves_slow_sibling_running_until_teardown():
    pages = build_shop([["belt", "cap"]])
    pages[product_url("belt")] = product_page("belt", title=None)
    browser = FakeBrowser(pages)
    browser.slow[product_url("cap")] = 0.05

    with pytest.raises(ExtractionError):
        await _engine(browser).crawl()
    await asyncio.sleep(0.1)

    # The sibling is not cancelled; it finishes on its own against the closed browser.
    assert browser.cancelled == []
    assert browser.failed_after_close == [product_url("cap")]
    assert browser.open_sessions == 0
    assert all(s.close_calls == 1 for s in browser.sessions)
