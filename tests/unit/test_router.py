"""
Unit tests for URL router.
"""

import pytest

from minihttp.http.router import Router
from minihttp.http.request import HTTPRequest
from minihttp.http.response import HTTPResponse, ResponseBuilder
from minihttp.http.status_codes import HTTPStatus


def make_request(method: str, path: str) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path)


def dummy_handler(request: HTTPRequest) -> HTTPResponse:
    """Dummy handler for testing."""
    return ResponseBuilder().text(request.path).build()


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        """Test adding routes."""
        router = Router()
        router.add_route("get", "/user-agent", dummy_handler)

        assert len(router.routes) == 1
        assert router.routes[0].path == "/user-agent"
        assert router.routes[0].method == "GET"

    def test_match_root_only(self):
        """'/' matches exactly '/'."""
        router = Router()
        router.add_route("GET", "/", dummy_handler)

        assert router.match("GET", "/") is not None
        assert router.match("GET", "/other") is None
        assert router.match("GET", "") is None

    def test_match_static_path(self):
        router = Router()
        router.add_route("GET", "/user-agent", dummy_handler)

        match = router.match("GET", "/user-agent")
        assert match is not None
        assert match.params == {}

    def test_no_normalization(self):
        """A trailing slash is a different path."""
        router = Router()
        router.add_route("GET", "/user-agent", dummy_handler)

        assert router.match("GET", "/user-agent/") is None

    def test_match_with_method(self):
        """Test method-based routing."""
        router = Router()
        router.add_route("GET", "/files/*name", dummy_handler)
        router.add_route("POST", "/files/*name", dummy_handler)

        assert router.match("GET", "/files/a").route.method == "GET"
        assert router.match("POST", "/files/a").route.method == "POST"
        assert router.match("PUT", "/files/a") is None

    def test_match_wildcard(self):
        """Wildcard captures the rest of the path, slashes included."""
        router = Router()
        router.add_route("GET", "/echo/*value", dummy_handler)

        assert router.match("GET", "/echo/abc").params == {"value": "abc"}
        assert router.match("GET", "/echo/a/b/c").params == {"value": "a/b/c"}

    def test_wildcard_requires_nonempty_tail(self):
        router = Router()
        router.add_route("GET", "/echo/*value", dummy_handler)

        assert router.match("GET", "/echo/") is None
        assert router.match("GET", "/echo") is None

    def test_wildcard_must_be_last(self):
        router = Router()

        with pytest.raises(ValueError):
            router.add_route("GET", "/echo/*value/more", dummy_handler)

    def test_static_segments_escaped(self):
        """Regex metacharacters in a route are literal."""
        router = Router()
        router.add_route("GET", "/a.b", dummy_handler)

        assert router.match("GET", "/a.b") is not None
        assert router.match("GET", "/axb") is None

    def test_first_match_wins(self):
        """Registration order decides between overlapping routes."""
        def first(request):
            return ResponseBuilder().text("first").build()

        def second(request):
            return ResponseBuilder().text("second").build()

        router = Router()
        router.add_route("GET", "/echo/*value", first)
        router.add_route("GET", "/echo/*other", second)

        response = router.handle(make_request("GET", "/echo/x"))
        assert response.body == b"first"

    def test_handle_sets_path_params(self):
        router = Router()
        router.add_route("GET", "/files/*name", lambda req: ResponseBuilder().text(req.path_params["name"]).build())

        request = make_request("GET", "/files/note.txt")
        response = router.handle(request)

        assert request.path_params == {"name": "note.txt"}
        assert response.body == b"note.txt"

    def test_handle_not_found(self):
        router = Router()
        router.add_route("GET", "/", dummy_handler)

        response = router.handle(make_request("GET", "/missing"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b""

    def test_decorators(self):
        router = Router()

        @router.get("/")
        def index(request):
            return ResponseBuilder().build()

        @router.post("/files/*name")
        def upload(request):
            return ResponseBuilder().build()

        assert [(r.method, r.path) for r in router.routes] == [
            ("GET", "/"),
            ("POST", "/files/*name"),
        ]
        # Decorators hand the function back unchanged
        assert index.__name__ == "index"
