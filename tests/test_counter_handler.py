import pytest

from viewcount.errors import MissingPageIdentity, StoreUnavailable
from viewcount.schemas.badge_schema import CounterMode
from viewcount.services.counter_handler import (
    CounterHandler,
    cache_control_header,
    resolve_page_url,
)
from viewcount.services.counter_store import PageCounts
from viewcount.services.page_key import derive_page_key
from viewcount.services.visitor import identify_visitor


class FakeRequest:
    def __init__(self, headers=None, query=None, address="203.0.113.1"):
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.query = query or {}
        self.address = address

    def get_header(self, name):
        return self.headers.get(name.lower())

    def get_client_address(self):
        return self.address

    def get_query_param(self, name):
        return self.query.get(name)


class FakeResponse:
    def __init__(self):
        self.status = None
        self.headers = {}
        self.body = None

    def set_status(self, code):
        self.status = code

    def set_header(self, name, value):
        self.headers[name] = value

    def write_body(self, body):
        self.body = body


class RecordingStore:
    def __init__(self, result=PageCounts(views=42, visitors=7), error=None):
        self.result = result
        self.error = error
        self.calls = []

    def record_view(self, page_key, visitor_id, url=None):
        self.calls.append((page_key, visitor_id, url))
        if self.error:
            raise self.error
        return self.result


def test_resolve_page_url_prefers_referer():
    request = FakeRequest({"Referer": "https://example.com/post?utm=1"}, {"fallback-id": "repo"})
    assert resolve_page_url(request) == "https://example.com/post"


def test_resolve_page_url_accepts_referrer_spelling_and_fallback():
    assert resolve_page_url(FakeRequest({"Referrer": "https://example.com/"})) == "https://example.com/"
    assert resolve_page_url(FakeRequest(query={"fallback-id": "repo"})) == "fallback:repo"


def test_resolve_page_url_without_identity():
    with pytest.raises(MissingPageIdentity):
        resolve_page_url(FakeRequest())


def test_cache_control_header():
    assert cache_control_header(1800) == "public, max-age=1800, s-maxage=0"
    assert cache_control_header(600, cdn_cache=True) == "public, max-age=600, s-maxage=600"


def test_views_badge():
    store = RecordingStore()
    response = FakeResponse()
    request = FakeRequest({"Referer": "https://example.com/post#top", "User-Agent": "Mozilla/5.0"})

    CounterHandler(store).handle(request, response, CounterMode.VIEWS)

    assert response.status == 200
    assert response.headers["Content-Type"] == "image/svg+xml"
    assert response.headers["Cache-Control"] == "public, max-age=1800, s-maxage=0"
    assert ">42</text>" in response.body
    assert ">Views</text>" in response.body
    page_key, visitor_id, url = store.calls[0]
    assert page_key == derive_page_key("https://example.com/post")
    assert visitor_id == identify_visitor("203.0.113.1", "Mozilla/5.0")
    assert url == "https://example.com/post"


def test_visitors_badge_uses_visitor_count_and_color():
    response = FakeResponse()
    request = FakeRequest({"Referer": "https://example.com/"}, {"color": "purple"})

    CounterHandler(RecordingStore()).handle(request, response, CounterMode.VISITORS)

    assert ">7</text>" in response.body
    assert ">Visitors</text>" in response.body
    assert 'fill="#9f7be1"' in response.body


def test_trusted_proxy_header_changes_visitor_identity():
    store = RecordingStore()
    request = FakeRequest(
        {"Referer": "https://example.com/", "X-Forwarded-For": "198.51.100.4", "User-Agent": "ua"},
        address="10.0.0.1",
    )
    CounterHandler(store, trust_proxy_headers=True).handle(request, FakeResponse(), CounterMode.VIEWS)
    assert store.calls[0][1] == identify_visitor("198.51.100.4", "ua")


def test_missing_page_identity_is_400():
    store = RecordingStore()
    response = FakeResponse()

    CounterHandler(store).handle(FakeRequest(), response, CounterMode.VIEWS)

    assert response.status == 400
    assert "fallback-id" in response.body
    assert response.headers["Cache-Control"] == "no-store"
    assert store.calls == []


@pytest.mark.parametrize("error", [
    StoreUnavailable("record_view retries exhausted"),
    RuntimeError("connection string postgres://secret"),
])
def test_failures_are_generic_500(error):
    response = FakeResponse()
    request = FakeRequest({"Referer": "https://example.com/"})

    CounterHandler(RecordingStore(error=error)).handle(request, response, CounterMode.VIEWS)

    assert response.status == 500
    assert response.body == "Internal server error"
    assert response.headers["Content-Type"].startswith("text/plain")
    assert "secret" not in response.body


def test_preview_does_not_touch_store():
    store = RecordingStore()
    svg = CounterHandler(store).preview(1234, CounterMode.VISITORS, "red")
    assert ">1,234</text>" in svg
    assert 'fill="#e05d44"' in svg
    assert store.calls == []
