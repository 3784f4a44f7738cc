import pytest

from tests.fakes import FakeBrowser, build_shop


@pytest.fixture
def shop_pages():
    """Three listing pages with one duplicate product across pages 1 and 2."""
    return build_shop([["beanie", "belt", "cap"], ["cap", "hoodie"], ["album", "single"]])


@pytest.fixture
def browser(shop_pages):
    return FakeBrowser(shop_pages)
