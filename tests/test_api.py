import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient  # noqa: E402

from shop_scraper.apis.app import app  # noqa: E402

from tests.fakes import SHOP  # noqa: E402


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_scrape_returns_hierarchy_and_products(client):
    resp = client.post("/scrape", json={"url": SHOP, "browser": "tests.fakes:DemoShopBrowser"})

    assert resp.status_code == 200
    body = resp.json()
    assert [node["label"] for node in body["hierarchy"]] == ["Clothing", "Decor"]
    assert len(body["products"]) == 3


def test_scrape_uses_backend_from_env(client, monkeypatch):
    monkeypatch.setenv("SCRAPER_BROWSER", "tests.fakes:DemoShopBrowser")

    resp = client.post("/scrape", json={"url": SHOP, "max_concurrency": 1})

    assert resp.status_code == 200
    assert len(resp.json()["products"]) == 3


def test_unsupported_url_is_rejected(client):
    resp = client.post("/scrape", json={"url": "https://example.com"})
    assert resp.status_code == 400


def test_crawl_failure_maps_to_bad_gateway(client):
    resp = client.post("/scrape", json={"url": SHOP, "browser": "tests.fakes:BrokenShopBrowser"})

    assert resp.status_code == 502
    assert "title" in resp.json()["detail"]


def test_backend_failure_maps_to_bad_gateway(client):
    resp = client.post("/scrape", json={"url": SHOP, "browser": "tests.fakes:ClosedShopBrowser"})

    assert resp.status_code == 502
    assert "not launched" in resp.json()["detail"]
