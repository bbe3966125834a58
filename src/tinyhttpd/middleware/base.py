"""
=============================================================================
MIDDLEWARE BASE CLASSES
=============================================================================

Middleware wraps the route table with behavior that applies to every
request, whatever its route:

    pipeline.add(LoggingMiddleware())
    handler = pipeline.wrap(router.handle)

    request ──► LoggingMiddleware ──► router.handle ──► route handler
    response ◄── LoggingMiddleware ◄──────────────────────────┘

Each middleware receives the request and `next`, the rest of the chain.
It may inspect the request, call next(request), and inspect the response
on the way back out.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterator, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The rest of the chain: the next middleware, or the final handler.
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class Timing(Middleware):
            def __call__(self, request, next):
                start = time.perf_counter()
                response = next(request)
                logger.debug(f"{time.perf_counter() - start:.3f}s")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Must call next(request) to reach the handler, unless the middleware
        answers the request itself.
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered middleware chain.

    First added is outermost: it sees the request first and the response
    last.
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain around a final handler.

        Given [A, B] and handler h, returns a callable equivalent to
        A(request, lambda r: B(r, h)).
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

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middleware)
