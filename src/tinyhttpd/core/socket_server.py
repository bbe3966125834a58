"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop.

    socket() → setsockopt() → bind() → listen() → accept() ... → close()

Every accepted client socket is wrapped in a Connection and passed to a
callback. The callback must return quickly (the HTTP server hands the
connection to its thread pool), since nothing else is accepted while it
runs.

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR   Rebind immediately after a restart instead of waiting for
               old sockets to leave TIME_WAIT.
TCP_NODELAY    Disable Nagle's algorithm: responses are small and should
               leave as soon as they are written.

=============================================================================
SHUTDOWN
=============================================================================

accept() waits at most one second, so the loop notices shutdown() within
a second. SIGINT (Ctrl+C) and SIGTERM (kill, docker stop) call shutdown()
when the server runs on the main thread; Python only allows signal
handlers there.

Errors from accept() itself (a client that aborted, the process running
out of file descriptors) are logged and the loop carries on, backing off
briefly when descriptors are exhausted. Only a listening socket that is
no longer usable ends the loop.

=============================================================================
"""

import errno
import logging
import signal
import socket
import threading
import time
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ACCEPT_POLL_INTERVAL = 1.0

# accept() keeps failing with these until some connection closes
RESOURCE_ERRORS = (errno.EMFILE, errno.ENFILE, errno.ENOBUFS, errno.ENOMEM)
RESOURCE_BACKOFF = 0.1

# The listening socket itself is gone
FATAL_ERRORS = (errno.EBADF, errno.EINVAL, errno.ENOTSOCK)


class SocketServer:
    """
    Accept loop over a listening TCP socket.

    Usage:
        def on_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(on_connection)  # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready = threading.Event()
        self._stopped = threading.Event()
        self._original_handlers: dict = {}
        self._bound_address: Optional[Tuple[str, int]] = None

    @property
    def address(self) -> Tuple[str, int]:
        """
        Bound (host, port).

        Before start() this is the configured address; afterwards it is
        the real one, which differs when port 0 was requested.
        """
        return self._bound_address or (self.config.host, self.config.port)

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._ready.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the accept loop has exited. False on timeout."""
        return self._stopped.wait(timeout)

    # =========================================================================
    # SETUP
    # =========================================================================

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, signal handlers not installed")
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self) -> None:
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    # =========================================================================
    # ACCEPT LOOP
    # =========================================================================

    def start(self, connection_handler: Callable[[Connection], None]) -> None:
        """
        Bind, listen and accept until shutdown() is called.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._stopped.clear()
        self._socket = self._create_socket()
        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            self._stopped.set()
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]
        self._running = True
        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]) -> None:
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # poll self._running
            except OSError as e:
                if not self._running or e.errno in FATAL_ERRORS:
                    if self._running:
                        logger.error(f"Listening socket unusable: {e}")
                    break
                logger.error(f"Accept error: {e}")
                if e.errno in RESOURCE_ERRORS:
                    time.sleep(RESOURCE_BACKOFF)
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")
            conn = Connection(
                socket=client_socket,
                address=client_address[:2],
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            )
            try:
                connection_handler(conn)
            except Exception:
                # Never let one connection stop the accept loop
                logger.exception(f"[{conn.id}] Connection handler failed")
                conn.close()

    def shutdown(self) -> None:
        """Ask the accept loop to stop. Idempotent, callable from any thread."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self) -> None:
        self._restore_signals()
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
        self._ready.clear()
        self._stopped.set()
        logger.info("Socket server stopped")
