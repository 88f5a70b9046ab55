"""
=============================================================================
MIDDLEWARE INTERFACE
=============================================================================

A middleware sees every request before the router and every response after
it. Each one receives the request plus `next`, the rest of the chain:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   request ──► LoggingMiddleware ──► ... ──► router.handle            │
    │                    │ before                      │                   │
    │                    │                             ▼                   │
    │   response ◄── LoggingMiddleware ◄── ... ◄── handler response        │
    │                    after                                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A middleware may also answer by itself and never call next (short-circuit).

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class Stamp(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.set_header("X-Stamp", "1")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Return next(request), possibly adjusted, or a response of its own."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered middleware around a final handler.

    First added is outermost:

        pipeline.add(A()).add(B())
        handler = pipeline.wrap(router.handle)

        handler(request)  ==  A(request, lambda r: B(r, router.handle))
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain. Wrapping runs in reverse so the first middleware
        added ends up outermost:

            [A, B] + h   →   B(h)   →   A(B(h))
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._bind(middleware, current)
        return current

    @staticmethod
    def _bind(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
