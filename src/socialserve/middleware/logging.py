"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One log line per request on the "socialserve.access" logger, plus an
X-Request-ID response header that ties the line to what the client saw.

    text (default, Apache-like):
        127.0.0.1 - - [17/Oct/2026:09:00:00 +0000] "GET /like?post_id=3&..." 302 0 0.41ms

    json:
        {"request_id": "5f1c2a9e", "method": "GET", "path": "/like", ...}

A client-supplied X-Request-ID is reused instead of a fresh one, so a
proxy's id follows the request through our log.

=============================================================================
"""

import time
import json
import uuid
import logging
from typing import Optional
from dataclasses import dataclass, asdict
from urllib.parse import urlencode

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("socialserve.access")


@dataclass
class RequestLog:
    """Fields of one access log line."""

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @property
    def target(self) -> str:
        return f"{self.path}?{self.query}" if self.query else self.path

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Times each request and logs it once the response exists.

    Add it first, so its timing covers everything after it:

        pipeline.add(LoggingMiddleware(log_format="json", skip_paths=["/health"]))

    Exceptions from the rest of the chain are logged at ERROR and re-raised
    for the server to turn into a 500.
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        """
        Args:
            log_format: "text" or "json".
            include_request_id: Set X-Request-ID on responses.
            log_level: Level of the access lines.
            skip_paths: Paths that are served but not logged (probes).
        """
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = request.get_header("x-request-id") or uuid.uuid4().hex[:8]
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        if self.include_request_id:
            response.headers["X-Request-ID"] = request_id

        if request.path in self.skip_paths:
            return response

        log_entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=urlencode(request.query_params, doseq=True),
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict(), ensure_ascii=False))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
