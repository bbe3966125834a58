"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps the socket returned by accept() for exactly one request/response
exchange.

=============================================================================
LIFECYCLE
=============================================================================

    NEW ──► READING ──► DISPATCHING ──► WRITING ──► CLOSED
     │         │                                      ▲
     │         └── peer sent nothing ─────────────────┤
     └──────────── error at any point ────────────────┘

There is no keep-alive: after one response the connection is closed.

=============================================================================
READING A WHOLE REQUEST
=============================================================================

TCP is a byte stream. One recv() may return half a request, or a request
and a half. read_request() keeps reading until:

    1. the head terminator \r\n\r\n has arrived, and then
    2. Content-Length bytes of body have arrived (0 if the header is absent)

    recv #1:  "POST /files/a HTTP/1.1\r\nContent-Le"
    recv #2:  "ngth: 10\r\n\r\nhello"
    recv #3:  "world"                     ← body complete, stop

If the peer closes early, whatever arrived is returned and parsed as is.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..http.request import HEAD_TERMINATOR, parse_content_length


logger = logging.getLogger(__name__)

# Upper bounds on draining unread client data in close()
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class RequestTooLarge(ValueError):
    """The request grew past max_request_size while being read."""


class ConnectionState(Enum):
    NEW = "new"                  # accepted, nothing read yet
    READING = "reading"          # receiving request bytes
    DISPATCHING = "dispatching"  # parsing and running the handler
    WRITING = "writing"          # sending the response
    CLOSED = "closed"            # socket released


@dataclass
class Connection:
    """
    One accepted client connection.

    Attributes:
        socket: The client socket from accept().
        address: Client (ip, port).
        id: Short random id for correlating log lines.
        state: Current lifecycle state.
        created_at: When the connection was accepted.

    Usage:
        with Connection(sock, addr) as conn:
            data = conn.read_request()
            conn.send_response(b"HTTP/1.1 200 OK\\r\\n\\r\\n")
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 4096
    timeout: Optional[float] = None
    max_request_size: int = 10 * 1024 * 1024

    def __post_init__(self):
        # accept() may inherit the listening socket's poll timeout
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete request.

        Returns:
            Request bytes, or None if the peer closed without sending
            anything.

        Raises:
            TimeoutError: If timeout is set and the request does not
                          arrive in time.
            RequestTooLarge: If more than max_request_size bytes arrive.
        """
        self.state = ConnectionState.READING
        buffer = b""

        try:
            # ─────────────────────────────────────────────────────────────
            # STEP 1: read until the head is complete
            # ─────────────────────────────────────────────────────────────
            while HEAD_TERMINATOR not in buffer:
                chunk = self._recv()
                if not chunk:
                    return buffer or None
                buffer = self._append(buffer, chunk)

            # ─────────────────────────────────────────────────────────────
            # STEP 2: read until Content-Length body bytes are present
            # ─────────────────────────────────────────────────────────────
            head_end = buffer.find(HEAD_TERMINATOR)
            body_start = head_end + len(HEAD_TERMINATOR)
            content_length = self._parse_content_length(buffer[:head_end])

            while len(buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    logger.debug(f"[{self.id}] Peer closed with body incomplete")
                    break
                buffer = self._append(buffer, chunk)

            return buffer

        except socket.timeout:
            raise TimeoutError(f"Request not received within {self.timeout}s")

    def _recv(self) -> bytes:
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _append(self, buffer: bytes, chunk: bytes) -> bytes:
        buffer += chunk
        if len(buffer) > self.max_request_size:
            raise RequestTooLarge(f"Request too large: {len(buffer)} bytes")
        return buffer

    @staticmethod
    def _parse_content_length(head: bytes) -> int:
        """
        Content-Length from the raw head, 0 if absent or invalid.

        Only framing needs this, before the request is parsed.
        """
        for line in head.decode("utf-8", errors="replace").split("\r\n")[1:]:
            name, _, value = line.partition(":")
            if name.strip().lower() == "content-length":
                return parse_content_length(value)
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send all of data.

        Returns:
            True if sent, False if the peer went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> None:
        """
        Close the connection. Safe to call more than once.

        shutdown(SHUT_WR) sends FIN so the client sees end-of-response,
        then unread client data is drained briefly so the kernel does not
        answer it with a RST that could discard the response in flight.
        The drain stops after DRAIN_TIMEOUT seconds or DRAIN_LIMIT bytes,
        whichever comes first, so a client that keeps sending cannot hold
        the connection open.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self) -> None:
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # includes socket.timeout
        if drained:
            logger.debug(f"[{self.id}] Discarded {drained} unread bytes")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
