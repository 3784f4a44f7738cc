import pytest

from shop_scraper.adapters.demo_shop import DemoShopExtractor
from shop_scraper.engines.hierarchy import HierarchyWalker
from shop_scraper.errors import ExtractionError

from tests.fakes import SHOP, FakeBrowser, listing_page


def _count(nodes):
    return sum(1 + _count(node.children) for node in nodes)


def _depth(nodes):
    return max((1 + _depth(node.children) for node in nodes), default=0)


@pytest.mark.asyncio
async def test_two_top_categories_one_nested():
    browser = FakeBrowser({SHOP: listing_page(["beanie"])})
    session = await browser.new_session()
    await session.navigate(SHOP)

    tree = await HierarchyWalker(DemoShopExtractor()).walk(session)

    assert _count(tree) == 3
    assert _depth(tree) == 2
    assert [node.label for node in tree] == ["Clothing", "Decor"]
    assert [child.label for child in tree[0].children] == ["Accessories"]
    assert tree[1].children == ()
    assert tree[0].to_dict()["children"][0]["url"] == f"{SHOP}/product-category/clothing/accessories/"
    # The walk reads one snapshot; it never navigates.
    assert browser.navigations == [SHOP]


@pytest.mark.asyncio
async def test_missing_root_selector_aborts_walk():
    browser = FakeBrowser({SHOP: listing_page(["beanie"])})
    session = await browser.new_session()
    await session.navigate(SHOP)

    with pytest.raises(ExtractionError):
        await HierarchyWalker(DemoShopExtractor()).walk(session, root_selector="nav.mega-menu")
