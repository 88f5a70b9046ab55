"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTPResponse objects and serializes them to bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP RESPONSE STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.1 302 Found\r\n                     ── status line         │
    │   Location: /post/alice/3\r\n               ┐                       │
    │   Content-Length: 0\r\n                     ├─ headers              │
    │   Date: Sat, 17 Oct 2026 09:00:00 GMT\r\n   │  (Content-Length,     │
    │   Server: socialserve/1.0\r\n               ┘   Date, Server added) │
    │   \r\n                                       ── end of headers      │
    │   [body]                                                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The social app only ever sends four kinds of response, each with a helper
at the bottom of this module:

    html_page(markup)              200, text/html
    redirect(location, permanent)  301 / 302 with Location
    error_text(status, message)    4xx/5xx, text/plain body = message
    ok(dict)                       200, application/json (health check)

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, Union
import json

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "socialserve/1.0"


@dataclass
class HTTPResponse:
    """
    A response ready to be serialized.

    Prefer ResponseBuilder or the helper functions over building this by
    hand.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 200 OK" """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header; returns self for chaining."""
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body; strings are UTF-8 encoded."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 (for tests and logs)."""
        return self.body.decode("utf-8", errors="replace")

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize for socket.sendall().

        Content-Length, Date and Server are filled in unless the handler
        already set them.
        """
        response_headers = dict(self.headers)
        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        return "\r\n".join(lines).encode("utf-8") + b"\r\n" + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .html("<h1>Social</h1>")
            .no_cache()
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Plain-text body (text/plain; charset=utf-8)."""
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = "text/plain; charset=utf-8"
        return self

    def html(self, html: str) -> "ResponseBuilder":
        """HTML body (text/html; charset=utf-8)."""
        self._body = html.encode("utf-8")
        self._headers["Content-Type"] = "text/html; charset=utf-8"
        return self

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        """
        JSON body.

        ensure_ascii=False keeps non-ASCII usernames readable instead of
        \\uXXXX escapes.
        """
        indent = 2 if pretty else None
        self._body = json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self

    def redirect(self, location: str, permanent: bool = False) -> "ResponseBuilder":
        """
        Redirect to location.

            301 Moved Permanently  browsers cache it and skip us next time.
                                   Only safe for GET / → /feed.
            302 Found              fetched again every time. Used after
                                   actions, since /like?... must reach the
                                   server on every click.
        """
        self._status = HTTPStatus.MOVED_PERMANENTLY if permanent else HTTPStatus.FOUND
        self._headers["Location"] = location
        return self

    def no_cache(self) -> "ResponseBuilder":
        """Pages reflect live state; don't let browsers reuse them."""
        self._headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        self._headers["Pragma"] = "no-cache"
        return self

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


def format_http_date(dt: datetime) -> str:
    """
    RFC 7231 HTTP-date, always GMT:

        Sat, 17 Oct 2026 09:00:00 GMT

    Day and month names are English regardless of the process locale.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: Union[str, dict, list] = "") -> HTTPResponse:
    """200 OK; dict/list become JSON, str becomes text/plain."""
    builder = ResponseBuilder()
    if isinstance(body, (dict, list)):
        builder.json(body)
    else:
        builder.text(body)
    return builder.build()


def html_page(markup: str) -> HTTPResponse:
    """200 OK with an HTML document, never cached."""
    return ResponseBuilder().html(markup).no_cache().build()


def redirect(location: str, permanent: bool = False) -> HTTPResponse:
    """301 (permanent) or 302 redirect to location."""
    return ResponseBuilder().redirect(location, permanent).build()


def error_text(status: HTTPStatus, message: str) -> HTTPResponse:
    """Failure response whose whole body is the message, as plain text."""
    return ResponseBuilder().status(status).text(message).build()


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """400 Bad Request with a plain-text message."""
    return error_text(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str = "Not Found") -> HTTPResponse:
    """404 Not Found with a plain-text message."""
    return error_text(HTTPStatus.NOT_FOUND, message)


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """405 with the Allow header listing what the path does accept."""
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .text(f"Method not allowed. Allowed: {', '.join(allowed_methods)}")
        .build())


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """500; the message should not leak exception details."""
    return error_text(HTTPStatus.INTERNAL_SERVER_ERROR, message)
