"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a handler function.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /post/alice/3                                                  │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER                                                      │   │
    │   │  GET /feed                    → feed                         │   │
    │   │  GET /post/:username/:id      → post_page     ← MATCH        │   │
    │   │  GET /register/:username      → register                     │   │
    │   │  GET /new-post/:username/:content → new_post                 │   │
    │   │  ...                                                         │   │
    │   │                                                              │   │
    │   │  path_params = {"username": "alice", "id": "3"}              │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   post_page(request)                                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ROUTE PATTERNS
=============================================================================

    /feed            static segment, exact match
    /post/:id        one segment, captured as "id"
    /files/*rest     the rest of the path, slashes included

Patterns compile to anchored regexes with named groups:

    /post/:username/:id   →   ^/post/(?P<username>[^/]+)/(?P<id>[^/]+)$

Matching runs on the still percent-encoded path; each captured value is
decoded afterwards. So "%2F" inside a segment is data, not a separator:

    /new-post/alice/a%2Fb   →   {"username": "alice", "content": "a/b"}

First registered, first matched.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, Any, List
from urllib.parse import unquote
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed


logger = logging.getLogger(__name__)


# Every route handler has this shape
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        @router.get("/post/:username/:id")
        def post_page(request): ...

        Route(path="/post/:username/:id", method="GET", handler=post_page,
              _param_names=["username", "id"])
    """

    path: str
    method: Optional[str]            # None = any method
    handler: Handler
    meta: Dict[str, Any] = field(default_factory=dict)

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """A route plus the decoded path parameters it captured."""
    route: Route
    params: Dict[str, str]


class Router:
    """
    Request router with dynamic path parameters.

    Usage:
        router = Router()

        @router.get("/feed")
        def feed(request):
            ...

        @router.get("/post/:username/:id")
        def post_page(request):
            post_id = request.path_params["id"]
            ...
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        **meta: Any
    ) -> Route:
        """
        Register handler for path.

        Args:
            path: Pattern, e.g. /post/:username/:id
            handler: request → response
            method: HTTP method, None for any
            **meta: Free-form metadata stored on the Route
        """
        pattern, param_names = self._compile_pattern(path)

        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            meta=meta,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile a route pattern to a regex.

            "/post/:username/:id"
              → ["", "post", ":username", ":id"]
              → ^/post/(?P<username>[^/]+)/(?P<id>[^/]+)$

        Returns:
            (compiled regex, parameter names in order)
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            regex_parts.append("/")

            if segment.startswith(":"):
                param_name = segment[1:]
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>[^/]+)")

            elif segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>.*)")
                break  # wildcard must be last

            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            regex_parts.append("/")  # the root pattern "/"

        regex_parts.append("$")
        return re.compile("".join(regex_parts)), param_names

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    @staticmethod
    def _normalize(path: str) -> str:
        """Leading slash kept, trailing slash dropped ("/feed/" → "/feed")."""
        return "/" + path.strip("/") if path != "/" else "/"

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        First route matching method and path, or None.

        Args:
            method: HTTP method
            path: Percent-encoded request path
        """
        path = self._normalize(path)

        for route in self._routes:
            if route.method and route.method != method.upper():
                continue

            found = route._pattern.match(path)
            if found:
                params = {
                    name: unquote(value)
                    for name, value in found.groupdict().items()
                }
                return RouteMatch(route=route, params=params)

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """Methods that some route accepts for path (for the 405 Allow header)."""
        path = self._normalize(path)
        methods = set()

        for route in self._routes:
            if route._pattern.match(path):
                if route.method is None:
                    return ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"]
                methods.add(route.method)

        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch request to its handler.

            match            → handler(request), with request.path_params set
            path, not method → 405 Method Not Allowed
            nothing          → 404 Not Found
        """
        match = self.match(request.method, request.path)

        if match:
            request.path_params = match.params
            return match.route.handler(request)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed)

        logger.debug(f"No route for {request.method} {request.path}")
        return not_found(f"No route matches {request.path}")

    # =========================================================================
    # DECORATORS
    # =========================================================================

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        **meta: Any
    ) -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route(). Returns the handler unchanged so
        decorators can be stacked.
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, **meta)
            return handler
        return decorator

    def get(self, path: str, **meta: Any) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET", **meta)

    # =========================================================================
    # UTILITIES
    # =========================================================================

    def routes(self) -> List[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def print_routes(self) -> None:
        """
        Print the routing table (startup banner):

            Registered Routes:
            ------------------------------------------------------------
              GET      /feed
              GET      /post/:username/:id
            ------------------------------------------------------------
        """
        print("\nRegistered Routes:")
        print("-" * 60)
        for route in self._routes:
            method = route.method or "ANY"
            print(f"  {method:8} {route.path}")
        print("-" * 60)
