import asyncio

import pytest

from shop_scraper.engines.session import RequestFilter, SessionPool

from tests.fakes import FakeBrowser


def test_request_filter_allows_documents_only_by_default():
    request_filter = RequestFilter()
    assert request_filter.allows("document")
    for resource_type in ("image", "stylesheet", "script", "font"):
        assert not request_filter.allows(resource_type)


@pytest.mark.asyncio
async def test_sessions_get_the_pool_request_filter():
    request_filter = RequestFilter(frozenset({"document", "script"}))
    pool = SessionPool(FakeBrowser({}), max_sessions=2, request_filter=request_filter)

    async with pool.session() as session:
        assert session.request_filter is request_filter
        assert pool.in_use == 1
    assert pool.in_use == 0


@pytest.mark.asyncio
async def test_pool_never_exceeds_max_sessions():
    browser = FakeBrowser({"https://demo-shop.natek.eu": "<html></html>"}, delay=0.01)
    pool = SessionPool(browser, max_sessions=3)

    async def visit():
        async with pool.session() as session:
            await session.navigate("https://demo-shop.natek.eu")

    await asyncio.gather(*(visit() for _ in range(10)))

    assert browser.peak_sessions == 3
    assert len(browser.sessions) == 10
    assert all(s.close_calls == 1 for s in browser.sessions)


@pytest.mark.asyncio
async def test_session_released_when_body_fails():
    browser = FakeBrowser({})
    pool = SessionPool(browser, max_sessions=1)

    with pytest.raises(RuntimeError, match="boom"):
        async with pool.session():
            raise RuntimeError("boom")

    assert browser.sessions[0].close_calls == 1
    # The slot came back, so another acquire does not block.
    session = await asyncio.wait_for(pool.acquire(), timeout=1)
    await pool.release(session)


@pytest.mark.asyncio
async def test_double_release_is_rejected():
    pool = SessionPool(FakeBrowser({}), max_sessions=1)
    session = await pool.acquire()
    await pool.release(session)

    with pytest.raises(RuntimeError):
        await pool.release(session)
    assert session.close_calls == 1


@pytest.mark.asyncio
async def test_close_reclaims_outstanding_sessions():
    browser = FakeBrowser({})
    pool = SessionPool(browser, max_sessions=2)
    first = await pool.acquire()
    await pool.acquire()

    await pool.close()

    assert browser.open_sessions == 0
    # A late release from a straggler is a no-op once the pool is closed.
    await pool.release(first)
    assert first.close_calls == 1
    with pytest.raises(RuntimeError):
        await pool.acquire()


def test_max_sessions_must_be_positive():
    with pytest.raises(ValueError):
        SessionPool(FakeBrowser({}), max_sessions=0)


@pytest.mark.asyncio
async def test_waiting_acquirer_fails_once_pool_closes():
    browser = FakeBrowser({})
    pool = SessionPool(browser, max_sessions=1)
    await pool.acquire()
    waiter = asyncio.ensure_future(pool.acquire())
    await asyncio.sleep(0)
    assert not waiter.done()

    await pool.close()

    with pytest.raises(RuntimeError, match="closed"):
        await waiter
    assert len(browser.sessions) == 1
