"""
Unit tests for the social and health handlers.

Handlers are called directly with requests shaped the way the router hands
them over, so no sockets are involved.
"""

import json

import pytest

from socialserve.handlers import BadParameter, HealthHandler, SocialHandler
from socialserve.handlers.social import parse_post_id, require_query
from socialserve.http.status_codes import HTTPStatus
from socialserve.store import SharedStore

from conftest import make_request


@pytest.fixture
def handler(shared: SharedStore) -> SocialHandler:
    return SocialHandler(shared)


@pytest.fixture
def alice_post(shared: SharedStore) -> int:
    """alice is registered and has written post 1."""
    with shared.write() as store:
        store.register_user("alice")
        return store.create_post("alice", "hello")


def reaction_query(username: str = "bob", post_id="1", post_username: str = "alice") -> dict:
    return {"post_id": str(post_id), "post_username": post_username, "username": username}


class TestParameterHelpers:
    """Tests for parse_post_id() and require_query()."""

    @pytest.mark.parametrize("raw, expected", [
        ("1", 1),
        ("42", 42),
        ("007", 7),
        (str(2 ** 64 - 1), 2 ** 64 - 1),
    ])
    def test_parse_post_id(self, raw, expected):
        assert parse_post_id(raw) == expected

    @pytest.mark.parametrize("raw", [
        "", "abc", "-1", "1.5", " 1", "0x1",
        "\u0661",            # ARABIC-INDIC DIGIT ONE
        str(2 ** 64),
        "9" * 5000,
    ])
    def test_parse_post_id_rejects(self, raw):
        with pytest.raises(BadParameter) as exc_info:
            parse_post_id(raw)

        assert str(exc_info.value) == f"invalid post id `{raw}`"

    def test_require_query(self):
        request = make_request("/like", query={"username": "bob"})

        assert require_query(request, "username") == "bob"
        with pytest.raises(BadParameter, match="missing query parameter `post_id`"):
            require_query(request, "post_id")


class TestPages:
    """Tests for /, /feed and /post/:username/:id."""

    def test_index_redirects_permanently(self, handler):
        response = handler.index(make_request("/"))

        assert response.status == HTTPStatus.MOVED_PERMANENTLY
        assert response.headers["Location"] == "/feed"

    def test_feed(self, handler, alice_post):
        response = handler.feed(make_request("/feed"))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"].startswith("text/html")
        assert "Post by @alice" in response.text

    def test_empty_feed(self, handler):
        response = handler.feed(make_request("/feed"))

        assert response.status == HTTPStatus.OK
        assert "Post by" not in response.text

    def test_post_page(self, handler, alice_post):
        request = make_request(
            "/post/alice/1",
            path_params={"username": "alice", "id": str(alice_post)},
        )

        response = handler.post_page(request)

        assert response.status == HTTPStatus.OK
        assert "<h4>hello</h4>" in response.text
        assert "Back to Feed" in response.text

    def test_post_page_uses_name_from_path(self, handler, alice_post):
        request = make_request(
            "/post/mallory/1",
            path_params={"username": "mallory", "id": "1"},
        )

        response = handler.post_page(request)

        assert response.status == HTTPStatus.OK
        assert "Post by @mallory" in response.text

    def test_post_page_missing(self, handler):
        request = make_request("/post/alice/9", path_params={"username": "alice", "id": "9"})

        response = handler.post_page(request)

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "post with id `9` doesn't exist"

    def test_post_page_bad_id(self, handler):
        request = make_request("/post/alice/x", path_params={"username": "alice", "id": "x"})

        response = handler.post_page(request)

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "invalid post id `x`"

    def test_post_page_huge_id_is_bad_request(self, handler):
        huge = "9" * 5000
        request = make_request("/post/alice/9", path_params={"username": "alice", "id": huge})

        response = handler.post_page(request)

        assert response.status == HTTPStatus.BAD_REQUEST

    def test_post_page_non_ascii_digit(self, handler, alice_post):
        request = make_request("/post/alice/1", path_params={"username": "alice", "id": "١"})

        response = handler.post_page(request)

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "invalid post id `١`"


class TestRegisterAndPost:
    """Tests for /register/:username and /new-post/:username/:content."""

    def test_register(self, handler, shared):
        response = handler.register(
            make_request("/register/alice", path_params={"username": "alice"})
        )

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/feed"
        with shared.read() as store:
            assert store.is_registered("alice")

    def test_register_twice(self, handler):
        request = make_request("/register/alice", path_params={"username": "alice"})
        handler.register(request)

        response = handler.register(request)

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "User `alice` already registered"
        assert response.headers["Content-Type"].startswith("text/plain")

    def test_new_post(self, handler, shared, alice_post):
        response = handler.new_post(make_request(
            "/new-post/alice/again",
            path_params={"username": "alice", "content": "again"},
        ))

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/post/alice/2"
        with shared.read() as store:
            assert store.get_post(2).content == "again"

    def test_new_post_redirect_quotes_username(self, handler, shared):
        with shared.write() as store:
            store.register_user("a b")

        response = handler.new_post(make_request(
            "/new-post/a%20b/x",
            path_params={"username": "a b", "content": "x"},
        ))

        assert response.headers["Location"] == "/post/a%20b/1"

    def test_new_post_unknown_user(self, handler, shared):
        response = handler.new_post(make_request(
            "/new-post/ghost/boo",
            path_params={"username": "ghost", "content": "boo"},
        ))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "user `ghost` not registered"
        with shared.read() as store:
            assert store.post_count == 0


class TestComments:
    """Tests for /add-comment."""

    def test_add_comment(self, handler, shared, alice_post):
        query = dict(reaction_query(), comment="nice")

        response = handler.add_comment(make_request("/add-comment", query=query))

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/post/alice/1"
        with shared.read() as store:
            assert list(store.get_post(alice_post).comments()) == [("bob", "nice")]

    def test_redirect_follows_post_username(self, handler, alice_post):
        """post_username is only used to build the redirect."""
        query = dict(reaction_query(post_username="someone"), comment="nice")

        response = handler.add_comment(make_request("/add-comment", query=query))

        assert response.headers["Location"] == "/post/someone/1"

    def test_empty_comment_is_allowed(self, handler, alice_post):
        query = dict(reaction_query(), comment="")

        response = handler.add_comment(make_request("/add-comment", query=query))

        assert response.status == HTTPStatus.FOUND

    @pytest.mark.parametrize("missing", ["post_id", "post_username", "username", "comment"])
    def test_missing_parameter(self, handler, shared, alice_post, missing):
        query = dict(reaction_query(), comment="nice")
        del query[missing]

        response = handler.add_comment(make_request("/add-comment", query=query))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == f"missing query parameter `{missing}`"
        with shared.read() as store:
            assert list(store.get_post(alice_post).comments()) == []

    def test_missing_post(self, handler):
        query = dict(reaction_query(post_id=5), comment="nice")

        response = handler.add_comment(make_request("/add-comment", query=query))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "post with id `5` doesn't exist"


class TestReactions:
    """Tests for /like, /dislike and /unlike."""

    def test_like(self, handler, shared, alice_post):
        response = handler.like(make_request("/like", query=reaction_query()))

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/post/alice/1"
        with shared.read() as store:
            assert list(store.get_post(alice_post).likers()) == ["bob"]

    def test_dislike_then_unlike(self, handler, shared, alice_post):
        handler.dislike(make_request("/dislike", query=reaction_query()))
        with shared.read() as store:
            assert list(store.get_post(alice_post).dislikers()) == ["bob"]

        handler.unlike(make_request("/unlike", query=reaction_query()))
        with shared.read() as store:
            post = store.get_post(alice_post)
            assert list(post.likers()) == []
            assert list(post.dislikers()) == []

    def test_unregistered_user_may_react(self, handler, shared, alice_post):
        response = handler.like(make_request("/like", query=reaction_query("stranger")))

        assert response.status == HTTPStatus.FOUND

    @pytest.mark.parametrize("action", ["like", "dislike", "unlike"])
    def test_missing_post(self, handler, action):
        request = make_request(f"/{action}", query=reaction_query(post_id=3))

        response = getattr(handler, action)(request)

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "post with id `3` doesn't exist"

    def test_bad_post_id(self, handler, alice_post):
        response = handler.like(make_request("/like", query=reaction_query(post_id="one")))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "invalid post id `one`"

    def test_missing_username(self, handler, alice_post):
        query = reaction_query()
        del query["username"]

        response = handler.like(make_request("/like", query=query))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.text == "missing query parameter `username`"


class TestHealthHandler:
    """Tests for /health and /health/live."""

    def test_health_reports_store_counts(self, shared, alice_post):
        response = HealthHandler(shared).handle(make_request("/health"))
        document = json.loads(response.body)

        assert response.status == HTTPStatus.OK
        assert document["status"] == "healthy"
        assert document["store"] == {"users": 1, "posts": 1}
        assert document["uptime_seconds"] >= 0
        assert response.headers["Cache-Control"] == "no-store"

    def test_health_merges_stats(self, shared):
        health = HealthHandler(shared, stats=lambda: {"workers": {"total": 2}})

        document = json.loads(health.handle(make_request("/health")).body)

        assert document["workers"] == {"total": 2}

    def test_liveness(self, shared):
        response = HealthHandler(shared).liveness(make_request("/health/live"))

        assert json.loads(response.body) == {"status": "alive"}
