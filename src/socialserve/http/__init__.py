"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Bytes in, bytes out. Nothing here knows about users or posts.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   raw bytes ──► RequestParser ──► HTTPRequest                        │
    │                                        │                             │
    │                                        ▼                             │
    │                                     Router ──► handler(request)      │
    │                                                      │               │
    │                                                      ▼               │
    │   raw bytes ◄── HTTPResponse.to_bytes() ◄── HTTPResponse             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    request.py        RequestParser, HTTPRequest, HTTPParseError
    response.py       HTTPResponse, ResponseBuilder, response helpers
    router.py         Router, Route (":param" and "*wildcard" patterns)
    status_codes.py   HTTPStatus

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200, JSON or text
    html_page,           # 200, HTML, not cached
    redirect,            # 301 / 302
    error_text,          # any status, plain-text message
    bad_request,         # 400
    not_found,           # 404
    method_not_allowed,  # 405
    internal_error,      # 500
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "html_page",
    "redirect",
    "error_text",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
]
