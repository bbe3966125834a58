"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌──────────────┐  accept   ┌────────────┐  submit  ┌────────────┐
    │ SocketServer │ ────────► │ Connection │ ───────► │ ThreadPool │
    └──────────────┘           └────────────┘          └─────┬──────┘
                                                             │ worker
                                                             ▼
                           read → dispatch(parse → middleware → router)
                                → to_bytes → send → close

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts and wraps the socket in a Connection
    2. The connection is queued on the ThreadPool (503 if the queue is full)
    3. A worker reads one complete request (408 on timeout, 413 if too big)
    4. dispatch() parses it, runs the middleware and the route handler
    5. The response is serialized, sent, and the connection is closed

Every failure is turned into a response at step 3 or 4; none of them
reaches the accept loop or another connection.

=============================================================================
"""

import logging
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, RequestTooLarge, ThreadPool
from .handlers import register_default_routes
from .http import (
    HTTPRequest,
    HTTPResponse,
    HTTPStatus,
    HTTPParseError,
    RequestParser,
    Router,
    Handler,
    error_response,
    internal_error,
)
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Minimal HTTP/1.1 server: one request per connection.

    Built-in routes:

        GET  /                  200, empty body
        GET  /echo/<message>    message as text/plain, gzip when accepted
        GET  /user-agent        the User-Agent header
        GET  /files/<name>      file contents   (only with config.directory)
        POST /files/<name>      write body      (only with config.directory)

    Usage:
        server = HTTPServer(ServerConfig(directory="/tmp/data"))
        server.use(LoggingMiddleware())

        @server.route("time")
        def current_time(request):
            return ok(time.ctime())

        server.run()  # blocks until Ctrl+C or stop()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # NETWORK AND CONCURRENCY
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            workers=self.config.workers,
            queue_size=self.config.queue_size,
        )

        # ─────────────────────────────────────────────────────────────────
        # PROTOCOL AND APPLICATION
        # ─────────────────────────────────────────────────────────────────

        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = register_default_routes(Router(), self.config.directory)
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), rebuilt when middleware changes
        self._handler: Optional[Handler] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware. The first one added runs outermost.

        Returns:
            Self for chaining.
        """
        self._middleware.add(middleware)
        self._handler = None
        return self

    def route(self, key: str) -> Callable[[Handler], Handler]:
        """Decorator registering a handler for a route key."""
        return self._router.route(key)

    def add_route(self, key: str, handler: Handler) -> Handler:
        return self._router.add(key, handler)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def dispatch(self, data: bytes, client_address: Tuple[str, int] = ("", 0)) -> HTTPResponse:
        """
        Turn raw request bytes into a response. Never raises.

        Parse errors map to their status (500 for a malformed request
        line, 413 for an oversized request); any handler exception is
        logged and becomes a 500 with an empty body.
        """
        try:
            request = self._parser.parse(data, client_address)
        except HTTPParseError as e:
            logger.warning(f"Bad request from {client_address[0]}: {e}")
            return error_response(e.status_code)

        try:
            return self._get_handler()(request)
        except Exception:
            logger.exception(f"Unhandled error in handler for {request.method} {request.target}")
            return internal_error()

    def _get_handler(self) -> Callable[[HTTPRequest], HTTPResponse]:
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)
        return self._handler

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """
        Start serving (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._get_handler()
        self._thread_pool.start()

        if self.config.directory is not None:
            logger.info(f"Serving files from {self.config.directory}")
        logger.info(f"Routes: {', '.join(repr(key) for key, _ in self._router)}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self) -> None:
        """Stop accepting connections; run() returns once workers finish."""
        self._socket_server.shutdown()

    def _setup_logging(self) -> None:
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("tinyhttpd").setLevel(level)

    def _shutdown(self) -> None:
        logger.info("Shutting down server...")
        self._socket_server.shutdown()
        stats = self._thread_pool.stats
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info(f"Handled {stats['completed']} connections ({stats['failed']} failed)")
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection) -> None:
        """Called on the accept thread: hand the connection to a worker."""
        if not self._thread_pool.submit(self._process_connection, args=(conn,)):
            logger.warning(f"[{conn.id}] Thread pool full, rejecting {conn.client_ip}")
            conn.send_response(error_response(HTTPStatus.SERVICE_UNAVAILABLE).to_bytes())
            conn.close()

    def _process_connection(self, conn: Connection) -> None:
        """Runs on a worker: one request, one response, then close."""
        with conn:
            try:
                data = conn.read_request()
            except TimeoutError:
                logger.warning(f"[{conn.id}] Timed out reading request from {conn.client_ip}")
                conn.send_response(error_response(HTTPStatus.REQUEST_TIMEOUT).to_bytes())
                return
            except RequestTooLarge as e:
                logger.warning(f"[{conn.id}] {e}")
                conn.send_response(error_response(HTTPStatus.PAYLOAD_TOO_LARGE).to_bytes())
                return

            if data is None:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return

            conn.state = ConnectionState.DISPATCHING
            response = self.dispatch(data, conn.address)
            conn.send_response(response.to_bytes())


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """Build a server with the access log middleware installed."""
    return HTTPServer(config).use(LoggingMiddleware())
