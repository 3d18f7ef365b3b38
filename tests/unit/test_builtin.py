"""
Unit tests for the built-in route handlers.
"""

import json

from tinyhttpd.handlers.builtin import (
    ABOUT_PAGE,
    HOME_PAGE,
    HealthHandler,
    about,
    default_router,
    hello,
    home,
)
from tinyhttpd.http.query import QueryParams
from tinyhttpd.http.request import HTTPRequest


def make_request(path: str, raw_query: str = "") -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path=path,
        query=QueryParams.parse(raw_query),
        raw_query=raw_query,
    )


class TestPages:
    """Tests for the fixed HTML pages."""

    def test_home(self):
        response = home(make_request("/"))

        assert response.status == 200
        assert response.content_type == "text/html"
        assert response.body == HOME_PAGE.encode()

    def test_about(self):
        response = about(make_request("/about"))

        assert response.content_type == "text/html"
        assert response.body == ABOUT_PAGE.encode()

    def test_pages_are_fixed(self):
        assert home(make_request("/", "x=1")).body == home(make_request("/")).body


class TestHello:
    """Tests for the /hello greeting."""

    def test_default_name(self):
        response = hello(make_request("/hello"))

        assert response.content_type == "text/plain"
        assert response.body == b"Hello, world!"

    def test_name_from_query(self):
        response = hello(make_request("/hello", "name=Ada+Lovelace"))
        assert response.body == b"Hello, Ada Lovelace!"

    def test_first_name_wins(self):
        response = hello(make_request("/hello", "name=ada&name=grace"))
        assert response.body == b"Hello, ada!"

    def test_empty_name_falls_back(self):
        response = hello(make_request("/hello", "name="))
        assert response.body == b"Hello, world!"

    def test_unicode_name(self):
        response = hello(make_request("/hello", "name=%C3%A9mile"))
        assert response.body == "Hello, émile!".encode()


class TestHealthHandler:
    """Tests for the /health endpoint."""

    def test_status_ok(self):
        response = HealthHandler().handle(make_request("/health"))
        data = json.loads(response.body)

        assert response.status == 200
        assert response.content_type == "application/json"
        assert data["status"] == "ok"
        assert data["uptime_seconds"] >= 0

    def test_uptime_increases(self):
        handler = HealthHandler()
        assert handler.uptime >= 0


class TestDefaultRouter:
    """Tests for the built-in route table."""

    def test_table_order(self):
        router = default_router()
        assert [r.path for r in router.routes()] == ["/", "/about", "/health", "/hello"]

    def test_unfrozen(self):
        """Test that callers can still add routes."""
        router = default_router()

        assert not router.frozen
        router.add_route("/extra", home)

    def test_independent_tables(self):
        first = default_router()
        first.add_route("/extra", home)

        assert default_router().match("/extra") is None
