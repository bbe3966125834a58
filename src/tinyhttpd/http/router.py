"""
=============================================================================
ROUTE TABLE
=============================================================================

Routes are keyed by the FIRST path segment of the request:

    Route key        Handler
    ─────────        ───────
    ""               root        (GET /)
    "echo"           echo        (GET /echo/<message>)
    "user-agent"     user_agent  (GET /user-agent)
    "files"          files       (GET|POST /files/<name>)

Handlers are registered into the table at startup. Dispatch is one dict
lookup, and adding a route never touches the dispatch code:

    router = Router()
    router.add("echo", echo)

    @router.route("health")
    def health(request):
        return ok("up")

Anything whose key is not in the table gets 404 Not Found.

=============================================================================
"""

import logging
from typing import Callable, Dict, Iterator, Optional, Tuple

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


# Handler: takes a request, returns a response.
# Functions qualify directly; handler classes expose a bound `handle`.
Handler = Callable[[HTTPRequest], HTTPResponse]


class Router:
    """Maps route keys to handlers."""

    def __init__(self):
        self._routes: Dict[str, Handler] = {}

    def add(self, key: str, handler: Handler) -> Handler:
        """
        Register a handler for a route key.

        Args:
            key: First path segment ("" for the root path).
            handler: Callable taking an HTTPRequest.

        Returns:
            The handler, so add() can back a decorator.

        Raises:
            ValueError: If the key is already registered or contains "/".
        """
        if "/" in key:
            raise ValueError(f"Route key must be a single path segment: {key!r}")
        if key in self._routes:
            raise ValueError(f"Route already registered: {key!r}")
        self._routes[key] = handler
        logger.debug(f"Registered route /{key}")
        return handler

    def route(self, key: str) -> Callable[[Handler], Handler]:
        """Decorator form of add()."""
        def decorator(handler: Handler) -> Handler:
            return self.add(key, handler)
        return decorator

    def resolve(self, key: str) -> Optional[Handler]:
        """Handler for a route key, or None."""
        return self._routes.get(key)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request to the handler for its route key.

        Unknown keys get 404. Exceptions raised by the handler propagate
        to the caller.
        """
        handler = self.resolve(request.route_key)
        if handler is None:
            return not_found()
        return handler(request)

    def __contains__(self, key: str) -> bool:
        return key in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Tuple[str, Handler]]:
        return iter(self._routes.items())
