"""
Middleware: code that runs around every request.

    MiddlewarePipeline   ordered chain around router.handle
    LoggingMiddleware    access log on "socialserve.access", X-Request-ID
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
