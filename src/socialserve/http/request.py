"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a connection into an HTTPRequest
(RFC 7230 message syntax).

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /like?post_id=3&post_username=alice&username=bob HTTP/1.1\r\n │
    │   ─┬─ ──┬── ──────────────────┬──────────────────────  ───┬────     │
    │    │    │                     │                           │         │
    │  Method Path            Query string                  Version       │
    │                                                                      │
    │   Host: localhost:8000\r\n            ┐                              │
    │   User-Agent: Mozilla/5.0\r\n         ├─ headers                     │
    │   Connection: keep-alive\r\n          ┘                              │
    │   \r\n                                ── end of headers              │
    │   [body, Content-Length bytes]                                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PATH ENCODING
=============================================================================

The path is kept PERCENT-ENCODED. Decoding happens in the router, per
captured segment, after matching:

    GET /new-post/alice/hello%2Fworld
                        ──────┬──────
                              └─ ONE segment, decodes to "hello/world"

Decoding the whole path first would turn that into /new-post/alice/hello/world,
which no longer matches /new-post/:username/:content. The query string is
decoded here (parse_qs), so "+" and "%20" both become spaces.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict
from urllib.parse import parse_qs, urlsplit
import re


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    Carries the status code the server should answer with:
        400 Bad Request (default), 405 for unknown methods,
        413 for oversized requests, 505 for unsupported versions.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         GET, POST, ...
        path:           Percent-encoded path without the query string
        version:        "HTTP/1.1" or "HTTP/1.0"
        headers:        Header name (lowercased) → value
        query_params:   "?a=1&a=2&b=" → {"a": ["1", "2"], "b": [""]}
        body:           Raw body bytes (Content-Length of them)
        path_params:    Decoded values captured by the router
                        (/post/:username/:id → {"username": ..., "id": ...})
        client_address: (ip, port) of the peer
        raw:            The bytes this request was parsed from
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    @property
    def content_length(self) -> int:
        """Content-Length as int, 0 when missing or garbage."""
        try:
            return int(self.headers.get("content-length", 0))
        except ValueError:
            return 0

    @property
    def host(self) -> str:
        return self.headers.get("host", "")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_keep_alive(self) -> bool:
        """
        Should the connection stay open after this request?

            HTTP/1.1: yes unless "Connection: close"
            HTTP/1.0: no unless "Connection: keep-alive"
        """
        connection = self.headers.get("connection", "").lower()
        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        First value of a query parameter.

        Example:
            # GET /like?post_id=3&username=bob
            request.get_query("post_id")   # "3"
            request.get_query("missing")   # None
        """
        values = self.query_params.get(name, [])
        return values[0] if values else default


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw bytes
          │
          ├─ 1. size check ────────────── too big?      → 413
          ├─ 2. split at \\r\\n\\r\\n ─────── no split?     → 400
          ├─ 3. request line ──────────── bad method?   → 405
          │                               bad version?  → 505
          ├─ 4. headers (lowercased names)
          ├─ 5. body (Content-Length bytes)
          ▼
        HTTPRequest
    """

    VALID_METHODS = {
        "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 1024 * 1024):
        """
        Args:
            max_request_size: Larger requests are rejected with 413. The
                              social app only takes query strings, so the
                              default is 1 MB rather than upload-sized.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse one complete request.

        Args:
            data: Raw bytes, as returned by Connection.read_request().
            client_address: Peer (ip, port), kept for logging.

        Raises:
            HTTPParseError: On anything malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, query_params, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length header")

        if content_length < 0:
            raise HTTPParseError(f"Invalid Content-Length header: {content_length}")

        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_params=query_params,
            body=body[:content_length],
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, Dict[str, list[str]], str]:
        """
        METHOD SP REQUEST-URI SP HTTP-VERSION

        Returns:
            (method, percent-encoded path, decoded query params, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )

        parsed = urlsplit(uri)
        path = parsed.path or "/"
        query_params = parse_qs(parsed.query, keep_blank_values=True)

        return method, path, query_params, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        "Name: value" lines into a dict with lowercase names.

        - obsolete line folding (leading whitespace) continues the previous
          header
        - repeated headers are joined with ", " (RFC 7230 §3.2.2)
        - malformed lines are skipped
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 1024 * 1024
) -> HTTPRequest:
    """One-shot helper: RequestParser(max_size).parse(data, client_address)."""
    return RequestParser(max_request_size=max_size).parse(data, client_address)
