"""Test suite for HTTP routes, CORS and error responses."""

from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from calproxy.config import Settings
from calproxy.interfaces.http.app import create_app

BASE = "https://upstream.test/calendar/api/v1"
CORS_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


class Upstream:
    """Records every outbound request and answers with ``handler``."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, content=b'{"events":[]}')
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(UPSTREAM_BASE_URL=BASE, LOG_LEVEL="WARNING")


@pytest.fixture
def test_client(test_settings, upstream):
    """Yield a TestClient and ensure proper cleanup after each test."""
    app = create_app(test_settings, http_transport=httpx.MockTransport(upstream))
    with TestClient(app) as client:
        yield client


class TestCalendarRoutes:
    def test_events_miss_then_hit(self, test_client, upstream):
        first = test_client.get("/api/calendar/events")
        second = test_client.get("/api/calendar/events")

        assert first.status_code == 200
        assert first.content == b'{"events":[]}'
        assert first.headers["content-type"] == "application/json"
        assert first.headers["x-cache"] == "MISS"
        assert second.content == b'{"events":[]}'
        assert second.headers["x-cache"] == "HIT"
        assert upstream.urls == [f"{BASE}/events?show_past=true"]

    def test_genres(self, test_client, upstream):
        upstream.handler = lambda request: httpx.Response(200, content=b'["jazz"]')

        response = test_client.get("/api/calendar/genres")

        assert response.status_code == 200
        assert response.content == b'["jazz"]'
        assert upstream.urls == [f"{BASE}/genres"]

    def test_event_by_id(self, test_client, upstream):
        upstream.handler = lambda request: httpx.Response(200, content=b'{"id":42}')

        response = test_client.get("/api/calendar/event/42")

        assert response.status_code == 200
        assert response.json() == {"id": 42}
        assert upstream.urls == [f"{BASE}/event/42"]

    def test_each_event_id_cached_separately(self, test_client, upstream):
        test_client.get("/api/calendar/event/1")
        test_client.get("/api/calendar/event/2")
        repeat = test_client.get("/api/calendar/event/1")

        assert repeat.headers["x-cache"] == "HIT"
        assert upstream.urls == [f"{BASE}/event/1", f"{BASE}/event/2"]

    def test_upstream_body_passed_through_unmodified(self, test_client, upstream):
        body = b'{"title":"Lesung \xc3\xbcber B\xc3\xa4ume",  "ok" :true}'
        upstream.handler = lambda request: httpx.Response(200, content=body)

        response = test_client.get("/api/calendar/events")

        assert response.content == body


class TestValidationGate:
    @pytest.mark.parametrize("event_id", ["12a", "-1", "1%202", "abc", "1/2"])
    def test_invalid_ids_rejected_without_upstream_call(
        self, test_client, upstream, event_id
    ):
        response = test_client.get(f"/api/calendar/event/{event_id}")

        assert response.status_code == 400
        assert response.text == "Invalid event id"
        assert upstream.requests == []

    def test_empty_id_rejected(self, test_client, upstream):
        response = test_client.get("/api/calendar/event/")

        assert response.status_code == 400
        assert upstream.requests == []

    def test_failure_then_invalid_id(self, test_client, upstream):
        upstream.handler = lambda request: httpx.Response(500, text="boom")

        failed = test_client.get("/api/calendar/event/42")
        rejected = test_client.get("/api/calendar/event/abc")

        assert failed.status_code == 502
        assert failed.text == "Upstream error"
        assert "boom" not in failed.text
        assert rejected.status_code == 400
        assert len(upstream.requests) == 1


class TestUpstreamFailures:
    def test_unavailable(self, test_client, upstream):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        upstream.handler = refuse

        response = test_client.get("/api/calendar/genres")

        assert response.status_code == 502
        assert response.text == "Upstream unavailable"
        assert response.headers["content-type"].startswith("text/plain")
        assert "x-cache" not in response.headers

    def test_error_not_cached(self, test_client, upstream):
        responses = iter(
            [httpx.Response(503), httpx.Response(200, content=b'{"events":[]}')]
        )
        upstream.handler = lambda request: next(responses)

        failed = test_client.get("/api/calendar/events")
        recovered = test_client.get("/api/calendar/events")

        assert failed.status_code == 502
        assert recovered.status_code == 200
        assert recovered.headers["x-cache"] == "MISS"
        assert len(upstream.requests) == 2


class TestUnexpectedErrors:
    def test_internal_error_keeps_cors_and_request_id(self, test_client, upstream):
        def explode(request):
            raise ValueError("unexpected")

        upstream.handler = explode

        response = test_client.get("/api/calendar/genres")

        assert response.status_code == 500
        assert response.text == "Internal server error"
        assert response.headers["x-error-type"] == "internal_error"
        assert response.headers["x-request-id"]
        for name, value in CORS_HEADERS.items():
            assert response.headers[name] == value

    def test_app_still_serves_after_internal_error(self, test_client, upstream):
        def explode(request):
            raise RuntimeError("unexpected")

        upstream.handler = explode
        assert test_client.get("/api/calendar/events").status_code == 500

        upstream.handler = lambda request: httpx.Response(200, content=b"[]")
        response = test_client.get("/api/calendar/events")

        assert response.status_code == 200
        assert response.headers["x-cache"] == "MISS"


class TestMethodsAndCors:
    def test_post_not_allowed(self, test_client, upstream):
        response = test_client.post("/api/calendar/events")

        assert response.status_code == 405
        assert upstream.requests == []

    @pytest.mark.parametrize(
        "path", ["/api/calendar/events", "/api/calendar/event/abc", "/anything"]
    )
    def test_preflight_answered_on_any_path(self, test_client, upstream, path):
        response = test_client.options(path)

        assert response.status_code == 204
        for name, value in CORS_HEADERS.items():
            assert response.headers[name] == value
        assert upstream.requests == []

    def test_cors_on_success(self, test_client):
        response = test_client.get("/api/calendar/events")
        for name, value in CORS_HEADERS.items():
            assert response.headers[name] == value

    def test_cors_on_failure(self, test_client):
        response = test_client.get("/api/calendar/event/x")
        assert response.status_code == 400
        for name, value in CORS_HEADERS.items():
            assert response.headers[name] == value


class TestOperationalRoutes:
    def test_health(self, test_client):
        response = test_client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_cache_stats(self, test_client, upstream):
        test_client.get("/api/calendar/events")
        test_client.get("/api/calendar/events")
        upstream.handler = lambda request: httpx.Response(500)
        test_client.get("/api/calendar/genres")

        stats = test_client.get("/cache/stats").json()["response_cache"]

        assert stats["cache_hits"] == 1
        assert stats["cache_misses"] == 2
        assert stats["stores"] == 1
        assert stats["entries"] == 1
        assert stats["upstream_failures"] == {"upstream_error": 1}

    def test_request_id_header(self, test_client):
        response = test_client.get("/api/calendar/events")
        assert response.headers["x-request-id"]
        assert "x-response-time-ms" in response.headers

    def test_state_rebuilt_per_lifespan(self, test_settings, upstream):
        app = create_app(test_settings, http_transport=httpx.MockTransport(upstream))
        with TestClient(app) as client:
            assert client.get("/api/calendar/genres").headers["x-cache"] == "MISS"
        with TestClient(app) as client:
            assert client.get("/api/calendar/genres").headers["x-cache"] == "MISS"
        assert len(upstream.requests) == 2
