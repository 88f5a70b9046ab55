"""
=============================================================================
SOCIAL ROUTES
=============================================================================

Request handlers for the social site. Each one:

    1. pulls its inputs from the path (router) or the query string
    2. takes the store's read or write lock for the whole store operation
    3. answers with an HTML page, a redirect, or a 400 with the reason

    ┌──────────────────────────────┬───────┬──────────────────────────────┐
    │ route                        │ lock  │ success                      │
    ├──────────────────────────────┼───────┼──────────────────────────────┤
    │ GET /feed                    │ read  │ 200 feed page                │
    │ GET /post/:username/:id      │ read  │ 200 post page                │
    │ GET /register/:username      │ write │ 302 → /feed                  │
    │ GET /new-post/:username/:content │ write │ 302 → /post/{user}/{id}  │
    │ GET /add-comment?...         │ write │ 302 → /post/{post_user}/{id} │
    │ GET /like?...                │ write │ 302 → /post/{post_user}/{id} │
    │ GET /dislike?...             │ write │ 302 → /post/{post_user}/{id} │
    │ GET /unlike?...              │ write │ 302 → /post/{post_user}/{id} │
    │ GET /                        │ none  │ 301 → /feed                  │
    └──────────────────────────────┴───────┴──────────────────────────────┘

Failures never touch the store: StoreError is raised before any mutation,
and a BadParameter is raised before the lock is taken. Both become
`400 Bad Request` with the message as a plain-text body.

Usernames are not checked against the registry when commenting, liking or
disliking; anyone may act under any name.

=============================================================================
"""

import functools
import logging
from typing import Callable

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, bad_request, html_page, redirect
from ..store import SharedStore, StoreError
from .pages import post_url, render_feed, render_post_page


logger = logging.getLogger(__name__)

# Post ids are unsigned 64-bit
MAX_POST_ID = 2 ** 64 - 1
MAX_POST_ID_DIGITS = len(str(MAX_POST_ID))


class BadParameter(ValueError):
    """A required parameter is missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


def rejects_bad_input(handler: Callable[..., HTTPResponse]) -> Callable[..., HTTPResponse]:
    """Turn BadParameter and StoreError raised by handler into a 400."""

    @functools.wraps(handler)
    def wrapper(self, request: HTTPRequest) -> HTTPResponse:
        try:
            return handler(self, request)
        except (BadParameter, StoreError) as e:
            logger.info(f"Rejected {request.method} {request.path}: {e}")
            return bad_request(str(e))

    return wrapper


def parse_post_id(raw: str) -> int:
    """
    Post ids are ASCII decimal integers no larger than 2**64 - 1.

    Raises:
        BadParameter: raw is not one.
    """
    if not (raw.isascii() and raw.isdecimal()) or len(raw) > MAX_POST_ID_DIGITS:
        raise BadParameter(f"invalid post id `{raw}`")
    post_id = int(raw)
    if post_id > MAX_POST_ID:
        raise BadParameter(f"invalid post id `{raw}`")
    return post_id


def require_query(request: HTTPRequest, name: str) -> str:
    """
    Raises:
        BadParameter: name is absent from the query string.
    """
    value = request.get_query(name)
    if value is None:
        raise BadParameter(f"missing query parameter `{name}`")
    return value


class SocialHandler:
    """
    All social routes, bound to one SharedStore.

        handler = SocialHandler(SharedStore())
        router.get("/feed", handler.feed)
        router.get("/register/:username", handler.register)
        ...

    app.create_app() does this wiring.
    """

    def __init__(self, shared: SharedStore):
        self.shared = shared

    # =========================================================================
    # PAGES
    # =========================================================================

    def index(self, request: HTTPRequest) -> HTTPResponse:
        return redirect("/feed", permanent=True)

    def feed(self, request: HTTPRequest) -> HTTPResponse:
        with self.shared.read() as store:
            markup = render_feed(store)
        return html_page(markup)

    @rejects_bad_input
    def post_page(self, request: HTTPRequest) -> HTTPResponse:
        username = request.path_params["username"]
        post_id = parse_post_id(request.path_params["id"])

        with self.shared.read() as store:
            post = store.require_post(post_id)
            markup = render_post_page(username, post_id, post)
        return html_page(markup)

    # =========================================================================
    # ACTIONS
    # =========================================================================

    @rejects_bad_input
    def register(self, request: HTTPRequest) -> HTTPResponse:
        username = request.path_params["username"]

        with self.shared.write() as store:
            store.register_user(username)

        logger.info(f"Registered user {username!r}")
        return redirect("/feed")

    @rejects_bad_input
    def new_post(self, request: HTTPRequest) -> HTTPResponse:
        username = request.path_params["username"]
        content = request.path_params["content"]

        with self.shared.write() as store:
            post_id = store.create_post(username, content)

        logger.info(f"User {username!r} created post {post_id}")
        return redirect(post_url(username, post_id))

    @rejects_bad_input
    def add_comment(self, request: HTTPRequest) -> HTTPResponse:
        post_id = parse_post_id(require_query(request, "post_id"))
        post_username = require_query(request, "post_username")
        username = require_query(request, "username")
        comment = require_query(request, "comment")

        with self.shared.write() as store:
            store.create_comment(post_id, username, comment)

        logger.info(f"User {username!r} commented on post {post_id}")
        return redirect(post_url(post_username, post_id))

    @rejects_bad_input
    def like(self, request: HTTPRequest) -> HTTPResponse:
        return self._react(request, "like")

    @rejects_bad_input
    def dislike(self, request: HTTPRequest) -> HTTPResponse:
        return self._react(request, "dislike")

    @rejects_bad_input
    def unlike(self, request: HTTPRequest) -> HTTPResponse:
        return self._react(request, "unlike")

    def _react(self, request: HTTPRequest, action: str) -> HTTPResponse:
        """Apply Post.like / dislike / unlike for the query's user."""
        post_id = parse_post_id(require_query(request, "post_id"))
        post_username = require_query(request, "post_username")
        username = require_query(request, "username")

        with self.shared.write() as store:
            post = store.require_post(post_id)
            getattr(post, action)(username)

        logger.info(f"User {username!r} {action}d post {post_id}")
        return redirect(post_url(post_username, post_id))
