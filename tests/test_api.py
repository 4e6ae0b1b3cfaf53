from fastapi.testclient import TestClient

from viewcount.config import Settings
from viewcount.database import Database
from viewcount.main import create_app
from viewcount.services.page_key import derive_page_key

PAGE = "https://example.com/"


def test_views_badge_counts_requests(client):
    response = client.get("/views", headers={"Referer": PAGE})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/svg+xml"
    assert response.headers["cache-control"] == "public, max-age=1800, s-maxage=0"
    assert ">1</text>" in response.text

    response = client.get("/views", headers={"Referer": PAGE + "?utm_source=feed"})
    assert ">2</text>" in response.text


def test_visitors_badge_counts_unique_visitors(client):
    client.get("/views", headers={"Referer": PAGE, "User-Agent": "a"})
    client.get("/views", headers={"Referer": PAGE, "User-Agent": "a"})
    response = client.get("/visitors", headers={"Referer": PAGE, "User-Agent": "b"})

    assert response.status_code == 200
    assert ">Visitors</text>" in response.text
    assert ">2</text>" in response.text

    stats = client.get("/api/stats", params={"url": PAGE}).json()
    assert stats == {"page_key": derive_page_key(PAGE), "views": 3, "visitors": 2}


def test_fallback_id_identifies_page(client):
    response = client.get("/views", params={"fallback-id": "my-repo", "color": "blue"})
    assert response.status_code == 200
    assert 'fill="#007ec6"' in response.text

    stats = client.get("/api/stats", params={"fallback-id": "my-repo"}).json()
    assert stats["views"] == 1


def test_missing_referer_and_fallback_is_400(client):
    response = client.get("/views")
    assert response.status_code == 400
    assert "fallback-id" in response.text
    assert response.headers["cache-control"] == "no-store"


def test_stats_for_unseen_page(client):
    response = client.get("/api/stats", params={"url": "https://example.com/nothing"})
    assert response.status_code == 200
    assert response.json()["views"] == 0
    assert response.json()["visitors"] == 0


def test_stats_requires_page(client):
    assert client.get("/api/stats").status_code == 400


def test_preview_does_not_record(client):
    response = client.get("/preview", params={"count": 1234, "mode": "visitors", "color": "red"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert ">1,234</text>" in response.text
    assert ">Visitors</text>" in response.text

    assert client.get("/preview", params={"mode": "other"}).status_code == 400
    assert client.get("/preview", params={"count": -1}).status_code == 422


def test_cdn_cache_and_ttl_from_env(monkeypatch, database):
    monkeypatch.setenv("CACHE_TTL_SECONDS", "600")
    monkeypatch.setenv("CDN_CACHE", "true")
    client = TestClient(create_app(settings=Settings(), database=database))

    response = client.get("/views", headers={"Referer": PAGE})
    assert response.headers["cache-control"] == "public, max-age=600, s-maxage=600"


def test_store_failure_is_generic_500(settings, tmp_path):
    broken = Database(f"sqlite:///{tmp_path / 'missing' / 'viewcount.db'}")
    client = TestClient(create_app(settings=settings, database=broken))

    response = client.get("/views", headers={"Referer": PAGE})
    assert response.status_code == 500
    assert response.text == "Internal server error"

    response = client.get("/api/stats", params={"url": PAGE})
    assert response.status_code == 500


def test_root_and_health(client):
    assert client.get("/api/health").json()["status"] == "ok"
    body = client.get("/").json()
    assert "blue" in body["colors"]
    assert body["cache_ttl_seconds"] == 1800
