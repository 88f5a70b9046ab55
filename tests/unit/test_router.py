"""
Unit tests for URL router.
"""

import pytest

from socialserve.http.router import Router
from socialserve.http.request import HTTPRequest
from socialserve.http.response import HTTPResponse, ResponseBuilder
from socialserve.http.status_codes import HTTPStatus


def make_request(method: str, path: str) -> HTTPRequest:
    return HTTPRequest(method=method, path=path)


def dummy_handler(request: HTTPRequest) -> HTTPResponse:
    return ResponseBuilder().json({"params": request.path_params}).build()


@pytest.fixture
def social_router() -> Router:
    """The social route table with placeholder handlers."""
    router = Router()
    router.add_route("/", dummy_handler, method="GET")
    router.add_route("/feed", dummy_handler, method="GET")
    router.add_route("/post/:username/:id", dummy_handler, method="GET")
    router.add_route("/register/:username", dummy_handler, method="GET")
    router.add_route("/new-post/:username/:content", dummy_handler, method="GET")
    router.add_route("/like", dummy_handler, method="GET")
    return router


class TestRouter:
    """Tests for Router matching and dispatch."""

    def test_add_route(self):
        router = Router()
        route = router.add_route("/feed", dummy_handler, method="get")

        assert router.routes() == [route]
        assert route.method == "GET"
        assert route._param_names == []

    def test_match_static_path(self, social_router):
        match = social_router.match("GET", "/feed")

        assert match is not None
        assert match.route.path == "/feed"
        assert match.params == {}

    def test_match_root(self, social_router):
        match = social_router.match("GET", "/")

        assert match is not None
        assert match.route.path == "/"

    def test_trailing_slash_is_ignored(self, social_router):
        match = social_router.match("GET", "/feed/")

        assert match is not None
        assert match.route.path == "/feed"

    def test_match_dynamic_params(self, social_router):
        match = social_router.match("GET", "/post/alice/7")

        assert match is not None
        assert match.params == {"username": "alice", "id": "7"}

    def test_params_are_percent_decoded(self, social_router):
        match = social_router.match("GET", "/new-post/alice/hello%20world")

        assert match.params == {"username": "alice", "content": "hello world"}

    def test_encoded_slash_stays_inside_one_segment(self, social_router):
        """%2F is data, not a path separator."""
        match = social_router.match("GET", "/new-post/alice/a%2Fb")

        assert match is not None
        assert match.route.path == "/new-post/:username/:content"
        assert match.params["content"] == "a/b"

    def test_unencoded_slash_does_not_match_segment(self, social_router):
        assert social_router.match("GET", "/new-post/alice/a/b") is None

    def test_utf8_params(self, social_router):
        match = social_router.match("GET", "/register/%ED%95%9C")

        assert match.params == {"username": "한"}

    def test_match_wildcard(self):
        router = Router()
        router.add_route("/files/*rest", dummy_handler, method="GET")

        match = router.match("GET", "/files/a/b%20c")
        assert match is not None
        assert match.params == {"rest": "a/b c"}

    def test_no_match(self, social_router):
        assert social_router.match("GET", "/posts") is None
        assert social_router.match("GET", "/post/alice") is None
        assert social_router.match("POST", "/feed") is None

    def test_first_registered_wins(self):
        router = Router()
        router.add_route("/post/new/:id", dummy_handler, method="GET")
        router.add_route("/post/:username/:id", dummy_handler, method="GET")

        assert router.match("GET", "/post/new/1").route.path == "/post/new/:id"
        assert router.match("GET", "/post/bob/1").route.path == "/post/:username/:id"

    def test_get_allowed_methods(self):
        router = Router()
        router.add_route("/feed", dummy_handler, method="GET")
        router.add_route("/feed", dummy_handler, method="HEAD")

        assert router.get_allowed_methods("/feed") == ["GET", "HEAD"]
        assert router.get_allowed_methods("/nowhere") == []

    def test_handle_success_sets_path_params(self, social_router):
        captured = {}

        @social_router.get("/echo/:word")
        def echo(request):
            captured.update(request.path_params)
            return ResponseBuilder().text(request.path_params["word"]).build()

        response = social_router.handle(make_request("GET", "/echo/hi%21"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"hi!"
        assert captured == {"word": "hi!"}

    def test_handle_not_found(self, social_router):
        response = social_router.handle(make_request("GET", "/nope"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.headers["Content-Type"].startswith("text/plain")

    def test_handle_method_not_allowed(self, social_router):
        response = social_router.handle(make_request("POST", "/feed"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET"


class TestRouterDecorators:
    """Tests for decorator-style route registration."""

    def test_get_decorator_returns_handler(self):
        router = Router()

        @router.get("/feed")
        def feed(request):
            return ResponseBuilder().text("feed").build()

        assert callable(feed)
        assert router.routes()[0].method == "GET"
        assert router.routes()[0].handler is feed

    def test_route_without_method_accepts_any(self):
        router = Router()
        router.route("/anything")(dummy_handler)

        assert router.match("DELETE", "/anything") is not None
        assert "PUT" in router.get_allowed_methods("/anything")

